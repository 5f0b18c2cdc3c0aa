"""
In-memory store

Implements the store interface over a plain dict. Used by the test suite,
where every test builds its own instance, and by local scripts that run
without a database.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Generic, Iterable, TypeVar

from shared.application.repository import (
    AbstractRepository,
    Filters,
    Page,
    PageRequest,
    Patch,
)
from shared.domain.exceptions import ConcurrentModification, DuplicateReference

T = TypeVar('T')

_MISSING = object()


def _resolve(entity: Any, path: str) -> Any:
    value = entity
    for part in path.split('.'):
        value = getattr(value, part, _MISSING) if not isinstance(value, dict) else value.get(part, _MISSING)
        if value is _MISSING:
            return None
    return getattr(value, 'value', value)


def matches(entity: Any, filters: Filters) -> bool:
    """Evaluate ORM-style lookups against an entity"""
    for key, expected in filters.items():
        field_name, _, lookup = key.partition('__')
        actual = _resolve(entity, field_name)
        expected = getattr(expected, 'value', expected)

        if lookup == '':
            if actual != expected:
                return False
        elif lookup == 'in':
            values = {getattr(v, 'value', v) for v in expected}
            if actual not in values:
                return False
        elif lookup == 'contains':
            if actual is None or expected not in actual:
                return False
        elif lookup == 'overlap':
            if not actual or not set(actual) & set(expected):
                return False
        elif lookup == 'icontains':
            if actual is None or str(expected).lower() not in str(actual).lower():
                return False
        elif lookup == 'gte':
            if actual is None or actual < expected:
                return False
        elif lookup == 'lte':
            if actual is None or actual > expected:
                return False
        else:
            raise ValueError(f"Unsupported lookup: {key}")
    return True


class InMemoryRepository(AbstractRepository[T], Generic[T]):
    """
    Dict-backed store

    Stored aggregates are deep-copied on the way in and out, so callers
    never share mutable state with the store. unique_fields emulates a
    unique index.
    """

    def __init__(self, entities: Iterable[T] = (), unique_fields: Iterable[str] = ()):
        self._items: Dict[str, T] = {}
        self._unique_fields = tuple(unique_fields)
        self._lock = threading.Lock()
        for entity in entities:
            self.add(entity)

    def _copy(self, entity: T) -> T:
        clone = copy.deepcopy(entity)
        if hasattr(clone, 'clear_events'):
            clone.clear_events()
        return clone

    def get(self, entity_id: str) -> T | None:
        entity = self._items.get(entity_id)
        return self._copy(entity) if entity is not None else None

    def _filter(self, filters: Filters) -> list:
        return [e for e in self._items.values() if matches(e, filters)]

    def find(self, filters: Filters, page: PageRequest | None = None) -> Page[T]:
        page = page or PageRequest()
        found = self._filter(filters)

        order_field = page.order_by.lstrip('-')
        reverse = page.order_by.startswith('-')
        found.sort(key=lambda e: _sort_key(_resolve(e, order_field)), reverse=reverse)

        window = found[page.offset:page.offset + page.limit]
        return Page(
            items=[self._copy(e) for e in window],
            page=page.page,
            limit=page.limit,
            total=len(found),
        )

    def count(self, filters: Filters) -> int:
        return len(self._filter(filters))

    def sum(self, field_name: str, filters: Filters) -> Decimal:
        total = Decimal('0')
        for entity in self._filter(filters):
            value = _resolve(entity, field_name)
            if value is not None:
                total += Decimal(str(value))
        return total

    def add(self, entity: T) -> T:
        with self._lock:
            for unique in self._unique_fields:
                value = getattr(entity, unique)
                if any(getattr(e, unique) == value for e in self._items.values()):
                    raise DuplicateReference(f"{unique} '{value}' already exists")
            self._items[entity.id] = self._copy(entity)
        return entity

    def update(self, entity_id: str, expected_version: int, patch: Patch) -> int:
        with self._lock:
            current = self._items.get(entity_id)
            if current is None or current.version != expected_version:
                raise ConcurrentModification()
            changes = patch.changes()
            for unique in self._unique_fields:
                value = changes.get(unique, _MISSING)
                if value is not _MISSING and any(
                    other_id != entity_id and getattr(e, unique) == value
                    for other_id, e in self._items.items()
                ):
                    raise DuplicateReference(f"{unique} '{value}' already exists")
            changes['version'] = expected_version + 1
            changes['updated_at'] = datetime.now(timezone.utc)
            self._items[entity_id] = replace(current, **changes)
            return expected_version + 1

    def apply(self, entity_id: str, mutate: Callable[[T], None]):
        """Mutate a stored entity directly (test setup helper)"""
        with self._lock:
            mutate(self._items[entity_id])


def _sort_key(value):
    if value is None:
        return (0, '')
    if isinstance(value, datetime):
        return (1, value.timestamp())
    return (1, value)
