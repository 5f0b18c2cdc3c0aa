"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import (
    BookingByReferenceView,
    BookingCancelView,
    BookingCollectionView,
    BookingCompleteView,
    BookingDetailView,
    BookingStatsView,
    BookingTicketView,
    MyBookingsView,
)

urlpatterns = [
    path("", BookingCollectionView.as_view(), name="booking-list"),
    path("my/", MyBookingsView.as_view(), name="booking-my"),
    path("stats/", BookingStatsView.as_view(), name="booking-stats"),
    path("reference/<str:reference>/", BookingByReferenceView.as_view(), name="booking-by-reference"),
    path("<str:booking_id>/", BookingDetailView.as_view(), name="booking-detail"),
    path("<str:booking_id>/cancel/", BookingCancelView.as_view(), name="booking-cancel"),
    path("<str:booking_id>/complete/", BookingCompleteView.as_view(), name="booking-complete"),
    path("<str:booking_id>/ticket/", BookingTicketView.as_view(), name="booking-ticket"),
]
