"""API views for reviews."""

from __future__ import annotations

from rest_framework import status  # type: ignore

from shared.infrastructure.api import paginated, success
from shared.infrastructure.views import TENANT_STRICT, ContextAPIView

from .application.services import CreateReviewCommand
from .domain.entities import ReviewStatus
from .serializers import (
    AdminReviewSerializer,
    ModerationQuerySerializer,
    RecentReviewsQuerySerializer,
    ReviewCreateSerializer,
    ReviewSerializer,
)


class ReviewCreateView(ContextAPIView):
    tenant_mode = TENANT_STRICT

    def post(self, request):
        data = self.validated(ReviewCreateSerializer, request.data)
        review = self.container.reviews.create(self.request_context(request), CreateReviewCommand(**data))
        return success(
            ReviewSerializer(review).data,
            message="Review created successfully",
            status_code=status.HTTP_201_CREATED,
        )


class RecentReviewsView(ContextAPIView):
    tenant_mode = None

    def get(self, request):
        params = self.validated(RecentReviewsQuerySerializer, request.query_params)
        page = self.container.review_queries.recent(params['limit'])
        return success(ReviewSerializer(page.items, many=True).data)


class AttractionReviewsView(ContextAPIView):
    """Approved reviews of one attraction, with the rating summary."""

    tenant_mode = TENANT_STRICT

    def get(self, request, id_or_slug: str):
        page, summary = self.container.review_queries.for_attraction(
            self.request_context(request), id_or_slug, self.page_request(request, default_limit=10),
        )
        response = paginated(page, ReviewSerializer(page.items, many=True).data)
        response.data['summary'] = summary.to_dict()
        return response


class ModerationQueueView(ContextAPIView):
    def get(self, request):
        params = self.validated(ModerationQuerySerializer, request.query_params)
        page = self.container.review_queries.moderation_queue(
            self.request_context(request),
            status=params.get('status', ReviewStatus.PENDING),
            page=self.page_request(request),
        )
        return paginated(page, AdminReviewSerializer(page.items, many=True).data)


class ReviewModerationView(ContextAPIView):
    tenant_mode = None
    outcome = ReviewStatus.APPROVED

    def post(self, request, review_id: str):
        review = self.container.reviews.moderate(self.request_context(request), review_id, self.outcome)
        return success(AdminReviewSerializer(review).data, message=f"Review {self.outcome.value}")
