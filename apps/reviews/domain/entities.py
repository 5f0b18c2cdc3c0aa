"""
Review Domain Entities
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from shared.application.repository import Patch
from shared.domain.base import Aggregate
from shared.domain.exceptions import InvalidState


class ReviewStatus(Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


RATINGS = (5, 4, 3, 2, 1)


@dataclass(kw_only=True, eq=False)
class Review(Aggregate):
    attraction_id: str
    # copied from the attraction so moderation can be scoped per tenant
    tenant_ids: List[str] = field(default_factory=list)
    user_id: str | None = None
    rating: int
    title: str
    content: str
    author: str
    country: str = ''
    status: ReviewStatus = ReviewStatus.PENDING
    verified: bool = False

    def __post_init__(self):
        if self.rating not in RATINGS:
            raise ValueError("Rating must be between 1 and 5")

    def moderate(self, status: ReviewStatus):
        if status == ReviewStatus.PENDING:
            raise InvalidState("A review cannot be moved back to pending")
        if self.status != ReviewStatus.PENDING:
            raise InvalidState(f"Review is already {self.status.value}")
        self.status = status


@dataclass(frozen=True)
class ReviewPatch(Patch):
    status: ReviewStatus | None = None
