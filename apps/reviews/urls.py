"""URL routing for reviews."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .domain.entities import ReviewStatus
from .views import (
    AttractionReviewsView,
    ModerationQueueView,
    RecentReviewsView,
    ReviewCreateView,
    ReviewModerationView,
)

urlpatterns = [
    path("", ReviewCreateView.as_view(), name="review-create"),
    path("recent/", RecentReviewsView.as_view(), name="review-recent"),
    path("moderation/", ModerationQueueView.as_view(), name="review-moderation"),
    path(
        "attraction/<str:id_or_slug>/",
        AttractionReviewsView.as_view(),
        name="review-attraction",
    ),
    path(
        "<str:review_id>/approve/",
        ReviewModerationView.as_view(outcome=ReviewStatus.APPROVED),
        name="review-approve",
    ),
    path(
        "<str:review_id>/reject/",
        ReviewModerationView.as_view(outcome=ReviewStatus.REJECTED),
        name="review-reject",
    ),
]
