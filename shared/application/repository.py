"""
Store Interface

Every aggregate store exposes the same small set of operations:
find by id, find by filter with pagination, count by filter, sum by filter,
insert, and a conditional update keyed on the aggregate version.

Filters are mappings of lookups that mirror the Django ORM:
- "field": exact match
- "field__in": value is a member of the given collection
- "field__contains": the collection stored in the field contains the value
- "field__overlap": the collection stored in the field shares a member with
  the given collection
- "field__gte" / "field__lte": range bounds
- "field__icontains": case-insensitive substring match
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from decimal import Decimal
from typing import Any, Generic, List, Mapping, TypeVar

T = TypeVar('T')

Filters = Mapping[str, Any]


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 20
    order_by: str = '-created_at'

    def __post_init__(self):
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if not 1 <= self.limit <= 100:
            raise ValueError("limit must be between 1 and 100")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @classmethod
    def empty(cls, request: PageRequest) -> 'Page[T]':
        return cls(items=[], page=request.page, limit=request.limit, total=0)


@dataclass(frozen=True)
class Patch:
    """
    Base class for patch value objects

    A patch names exactly the mutable fields of an entity. Fields left as
    None are not touched by the update.
    """

    def changes(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    def __bool__(self) -> bool:
        return bool(self.changes())


class AbstractRepository(ABC, Generic[T]):
    """Store interface shared by every aggregate"""

    @abstractmethod
    def get(self, entity_id: str) -> T | None:
        """Find by id; None when the id does not resolve"""

    @abstractmethod
    def find(self, filters: Filters, page: PageRequest | None = None) -> Page[T]:
        """Find by filter with pagination"""

    @abstractmethod
    def count(self, filters: Filters) -> int:
        """Count by filter"""

    @abstractmethod
    def sum(self, field_name: str, filters: Filters) -> Decimal:
        """Aggregate sum of a numeric field by filter"""

    @abstractmethod
    def add(self, entity: T) -> T:
        """Insert a new aggregate"""

    @abstractmethod
    def update(self, entity_id: str, expected_version: int, patch: Patch) -> int:
        """
        Apply a patch only if the stored version still equals expected_version

        Returns the new version.

        Raises:
            ConcurrentModification: if no row matches (id, expected_version)
        """

    def first(self, filters: Filters) -> T | None:
        result = self.find(filters, PageRequest(page=1, limit=1))
        return result.items[0] if result.items else None
