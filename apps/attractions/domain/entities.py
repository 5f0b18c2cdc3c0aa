"""
Catalog Domain Entities

- Attraction: bookable catalog item; its pricing options are the only
  source of truth for price
- PricingOption: named, priced variant identified by a stable id
- Destination: city-level grouping used for browsing
- Category: browsing taxonomy; attractions name it by slug
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List

from shared.application.repository import Patch
from shared.domain.base import Aggregate, ValueObject
from shared.domain.exceptions import ValidationFailed
from shared.domain.value_objects import to_decimal


class AttractionStatus(Enum):
    ACTIVE = 'active'
    DRAFT = 'draft'
    ARCHIVED = 'archived'


class AvailabilityType(Enum):
    TIME_SLOTS = 'time-slots'
    DATE_ONLY = 'date-only'
    FLEXIBLE = 'flexible'


@dataclass(frozen=True)
class PricingOption(ValueObject):
    id: str
    name: str
    price: Decimal
    description: str = ''

    def __post_init__(self):
        object.__setattr__(self, 'price', to_decimal(self.price))
        if self.price < 0:
            raise ValueError(f"Pricing option {self.id} has a negative price")


@dataclass(kw_only=True, eq=False)
class Attraction(Aggregate):
    """
    Attraction Aggregate Root

    Key invariants:
    - pricing option ids are unique within the attraction
    - an attraction may be shared by several tenants
    """
    title: str
    slug: str = ''
    currency: str = 'USD'
    tenant_ids: List[str] = field(default_factory=list)
    pricing_options: List[PricingOption] = field(default_factory=list)
    status: AttractionStatus = AttractionStatus.DRAFT
    destination_id: str | None = None
    city: str = ''
    meeting_point: str = ''
    category: str = ''
    availability_type: AvailabilityType = AvailabilityType.TIME_SLOTS

    def __post_init__(self):
        ids = [option.id for option in self.pricing_options]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate pricing option ids in attraction {self.id}")
        self.currency = self.currency.upper()

    def revise(self, patch: 'AttractionPatch'):
        """Apply an edit in place, keeping the option invariant"""
        changes = patch.changes()
        options = changes.get('pricing_options')
        if options is not None:
            ids = [option.id for option in options]
            if len(ids) != len(set(ids)):
                raise ValidationFailed("Pricing option ids must be unique", {'pricing_options': ids})
        if 'tenant_ids' in changes and not changes['tenant_ids']:
            raise ValidationFailed("An attraction needs at least one tenant")
        for name, value in changes.items():
            setattr(self, name, value)
        self.currency = self.currency.upper()

    def option(self, option_id: str) -> PricingOption | None:
        """Exact-id lookup of a pricing option"""
        return next((o for o in self.pricing_options if o.id == option_id), None)

    def is_offered_by(self, tenant_id: str) -> bool:
        return tenant_id in self.tenant_ids

    @property
    def primary_tenant_id(self) -> str | None:
        return self.tenant_ids[0] if self.tenant_ids else None

    @property
    def is_bookable(self) -> bool:
        return self.status == AttractionStatus.ACTIVE

    def __str__(self):
        return f"Attraction {self.title} ({self.status.value})"


@dataclass(kw_only=True, eq=False)
class Destination(Aggregate):
    name: str
    slug: str = ''
    city: str = ''
    country: str = ''
    tenant_ids: List[str] = field(default_factory=list)
    status: AttractionStatus = AttractionStatus.ACTIVE


@dataclass(frozen=True)
class AttractionPatch(Patch):
    """Mutable fields of an Attraction"""
    title: str | None = None
    slug: str | None = None
    currency: str | None = None
    tenant_ids: List[str] | None = None
    pricing_options: List[PricingOption] | None = None
    status: AttractionStatus | None = None
    destination_id: str | None = None
    city: str | None = None
    meeting_point: str | None = None
    category: str | None = None
    availability_type: AvailabilityType | None = None


@dataclass(frozen=True)
class DestinationPatch(Patch):
    name: str | None = None
    slug: str | None = None
    city: str | None = None
    country: str | None = None
    tenant_ids: List[str] | None = None
    status: AttractionStatus | None = None


@dataclass(kw_only=True, eq=False)
class Category(Aggregate):
    slug: str
    name: str
    icon: str = ''
    description: str = ''
    parent_id: str | None = None
    sort_order: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class CategoryPatch(Patch):
    slug: str | None = None
    name: str | None = None
    icon: str | None = None
    description: str | None = None
    parent_id: str | None = None
    sort_order: int | None = None
    is_active: bool | None = None
