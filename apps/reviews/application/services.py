"""
Review Services

Anyone may write a review of an attraction visible in the public catalog;
it waits in the moderation queue until an admin of one of the attraction's
tenants approves or rejects it.
"""

from dataclasses import dataclass
from typing import Callable
import logging

from apps.access.context import RequestContext
from apps.access.engine import ADMIN_ROLES, ensure_role, ensure_shared_resource_access
from apps.reviews.domain.entities import Review, ReviewPatch, ReviewStatus
from shared.application.uow import InMemoryUnitOfWork
from shared.domain.exceptions import NotFound, ValidationFailed

logger = logging.getLogger(__name__)


@dataclass
class CreateReviewCommand:
    attraction_id: str
    rating: int
    title: str
    content: str
    author: str
    country: str = ''


class ReviewService:
    def __init__(self, review_repo, catalog, uow_factory: Callable = InMemoryUnitOfWork):
        self.review_repo = review_repo
        self.catalog = catalog
        self.uow_factory = uow_factory

    def create(self, context: RequestContext, command: CreateReviewCommand) -> Review:
        attraction = self.catalog.get_attraction(context, command.attraction_id)
        try:
            review = Review(
                attraction_id=attraction.id,
                tenant_ids=list(attraction.tenant_ids),
                user_id=context.user_id,
                rating=command.rating,
                title=command.title,
                content=command.content,
                author=command.author,
                country=command.country,
                verified=context.identity is not None,
            )
        except ValueError as e:
            raise ValidationFailed(str(e), {'rating': [str(e)]})

        with self.uow_factory():
            self.review_repo.add(review)
        logger.info(f"Review {review.id} submitted for attraction {attraction.id}")
        return review

    def moderate(self, context: RequestContext, review_id: str, status: ReviewStatus) -> Review:
        """Approve or reject a pending review"""
        identity = ensure_role(context.identity, ADMIN_ROLES, 'reviews.moderate', 'Admin access required')
        review = self.review_repo.get(review_id)
        if review is None:
            raise NotFound("Review not found")
        ensure_shared_resource_access(identity, review.tenant_ids, 'reviews.moderate', 'Access denied to this review')

        review.moderate(status)
        with self.uow_factory():
            review.version = self.review_repo.update(review.id, review.version, ReviewPatch(status=status))
        logger.info(f"Review {review.id} {status.value} by {identity.id}")
        return review
