"""
Django ORM store

Base class implementing the store interface over a Django model. Subclasses
map rows to aggregates (to_domain / to_fields) and translate domain filter
keys that do not match a column (field_map).

The conditional update is a single UPDATE ... WHERE id = %s AND version = %s,
so two writers holding the same version cannot both succeed.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Any, Generic, TypeVar

from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import F, Sum  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.repository import AbstractRepository, Filters, Page, PageRequest, Patch
from shared.domain.exceptions import ConcurrentModification, DuplicateReference

T = TypeVar('T')


def db_value(value: Any) -> Any:
    """Convert enums (also inside collections) to their stored value"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple, set, frozenset)):
        return [db_value(v) for v in value]
    return value


class DjangoRepository(AbstractRepository[T], Generic[T]):
    model = None
    # domain filter key (or bare field name) -> ORM lookup
    field_map: dict = {}
    # domain field holding ids -> many-to-many attribute of the row
    relation_fields: dict = {}
    distinct = False

    def to_domain(self, row) -> T:
        raise NotImplementedError

    def to_fields(self, entity: T) -> dict:
        raise NotImplementedError

    def patch_fields(self, changes: dict) -> dict:
        return {name: db_value(value) for name, value in changes.items()}

    def after_insert(self, row, entity: T):
        """Many-to-many relations need a saved row"""
        self._set_relations(row, {name: getattr(entity, name) for name in self.relation_fields})

    def _set_relations(self, row, values: dict):
        for name, ids in values.items():
            getattr(row, self.relation_fields[name]).set(ids)

    def base_queryset(self):
        return self.model.objects.all()

    def _orm_key(self, key: str) -> str:
        if key in self.field_map:
            return self.field_map[key]
        field_name, _, lookup = key.partition('__')
        column = self.field_map.get(field_name, field_name.replace('.', '__'))
        return f"{column}__{lookup}" if lookup else column

    def _queryset(self, filters: Filters):
        lookups = {self._orm_key(key): db_value(value) for key, value in filters.items()}
        queryset = self.base_queryset().filter(**lookups)
        return queryset.distinct() if self.distinct else queryset

    def _order(self, order_by: str) -> str:
        descending = order_by.startswith('-')
        column = self._orm_key(order_by.lstrip('-'))
        return f"-{column}" if descending else column

    def get(self, entity_id: str) -> T | None:
        row = self.base_queryset().filter(pk=entity_id).first()
        return self.to_domain(row) if row is not None else None

    def find(self, filters: Filters, page: PageRequest | None = None) -> Page[T]:
        page = page or PageRequest()
        queryset = self._queryset(filters).order_by(self._order(page.order_by), 'pk')
        total = queryset.count()
        rows = queryset[page.offset:page.offset + page.limit]
        return Page(
            items=[self.to_domain(row) for row in rows],
            page=page.page,
            limit=page.limit,
            total=total,
        )

    def count(self, filters: Filters) -> int:
        return self._queryset(filters).count()

    def sum(self, field_name: str, filters: Filters) -> Decimal:
        column = self._orm_key(field_name)
        result = self._queryset(filters).aggregate(total=Sum(column))['total']
        return result if result is not None else Decimal('0')

    def add(self, entity: T) -> T:
        try:
            with transaction.atomic():
                row = self.model.objects.create(**self.to_fields(entity))
                self.after_insert(row, entity)
        except IntegrityError as e:
            raise DuplicateReference(str(e))
        return entity

    def update(self, entity_id: str, expected_version: int, patch: Patch) -> int:
        changes = patch.changes()
        relations = {name: changes.pop(name) for name in list(changes) if name in self.relation_fields}
        fields = self.patch_fields(changes)
        try:
            with transaction.atomic():
                updated = self.model.objects.filter(pk=entity_id, version=expected_version).update(
                    version=F('version') + 1,
                    updated_at=timezone.now(),
                    **fields,
                )
                if not updated:
                    raise ConcurrentModification()
                if relations:
                    self._set_relations(self.model.objects.get(pk=entity_id), relations)
        except IntegrityError as e:
            raise DuplicateReference(str(e))
        return expected_version + 1
