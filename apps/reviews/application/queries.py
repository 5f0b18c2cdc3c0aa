"""
Review Queries

Public reads only ever see approved reviews. The moderation queue follows
the caller's tenant scope over the reviewed attraction's tenants.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from apps.access.context import RequestContext
from apps.access.engine import admin_scope
from apps.reviews.domain.entities import RATINGS, Review, ReviewStatus
from shared.application.repository import Page, PageRequest

MAX_RECENT = 50


@dataclass(frozen=True)
class ReviewSummary:
    count: int
    average: float
    breakdown: Dict[int, int]

    def to_dict(self) -> dict:
        return {
            'count': self.count,
            'average': self.average,
            'breakdown': {str(rating): n for rating, n in self.breakdown.items()},
        }


class ReviewQueries:
    def __init__(self, review_repo, catalog):
        self.review_repo = review_repo
        self.catalog = catalog

    def for_attraction(
        self,
        context: RequestContext,
        id_or_slug: str,
        page: PageRequest | None = None,
    ) -> Tuple[Page[Review], ReviewSummary]:
        attraction = self.catalog.get_attraction(context, id_or_slug)
        filters = {'attraction_id': attraction.id, 'status': ReviewStatus.APPROVED}

        breakdown = {rating: self.review_repo.count({**filters, 'rating': rating}) for rating in RATINGS}
        count = sum(breakdown.values())
        average = round(sum(r * n for r, n in breakdown.items()) / count, 1) if count else 0.0

        reviews = self.review_repo.find(filters, page or PageRequest(limit=10))
        return reviews, ReviewSummary(count=count, average=average, breakdown=breakdown)

    def recent(self, limit: int = 6) -> Page[Review]:
        return self.review_repo.find(
            {'status': ReviewStatus.APPROVED},
            PageRequest(limit=max(1, min(limit, MAX_RECENT))),
        )

    def moderation_queue(
        self,
        context: RequestContext,
        status: ReviewStatus | None = ReviewStatus.PENDING,
        page: PageRequest | None = None,
    ) -> Page[Review]:
        page = page or PageRequest()
        scope = admin_scope(context.identity, context.tenant_id, 'reviews.queue')
        if scope.is_empty:
            return Page.empty(page)

        filters = scope.filters(tenant_field='tenant_ids', many=True)
        if status is not None:
            filters['status'] = status
        return self.review_repo.find(filters, page)
