"""URL routing for the catalog."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import (
    AdminAttractionDetailView,
    AdminAttractionListView,
    AdminCategoryDetailView,
    AdminCategoryListView,
    AdminDestinationDetailView,
    AdminDestinationListView,
    AttractionAvailabilityView,
    AttractionDetailView,
    AttractionListView,
    CategoryDetailView,
    CategoryListView,
    DestinationListView,
    HomepageStatsView,
)

attraction_urlpatterns = [
    path("", AttractionListView.as_view(), name="attraction-list"),
    path("admin/", AdminAttractionListView.as_view(), name="attraction-admin-list"),
    path("admin/<str:attraction_id>/", AdminAttractionDetailView.as_view(), name="attraction-admin-detail"),
    path("<str:id_or_slug>/", AttractionDetailView.as_view(), name="attraction-detail"),
    path(
        "<str:id_or_slug>/availability/",
        AttractionAvailabilityView.as_view(),
        name="attraction-availability",
    ),
]

destination_urlpatterns = [
    path("", DestinationListView.as_view(), name="destination-list"),
    path("admin/", AdminDestinationListView.as_view(), name="destination-admin-list"),
    path("admin/<str:destination_id>/", AdminDestinationDetailView.as_view(), name="destination-admin-detail"),
]

category_urlpatterns = [
    path("", CategoryListView.as_view(), name="category-list"),
    path("admin/", AdminCategoryListView.as_view(), name="category-admin-list"),
    path("admin/<str:category_id>/", AdminCategoryDetailView.as_view(), name="category-admin-detail"),
    path("<slug:slug>/", CategoryDetailView.as_view(), name="category-detail"),
]

stats_urlpatterns = [
    path("homepage/", HomepageStatsView.as_view(), name="stats-homepage"),
]
