"""
Catalog Queries

Public listings show active items only, narrowed to the request tenant
when one is resolved. Admin listings follow the caller's tenant scope and
return nothing for a scoped admin without assigned tenants.

Availability is computed: there are no inventory records, so every day in
range is open and time-slot attractions offer the default slots.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Tuple

from apps.access.context import RequestContext
from apps.access.engine import (
    ADMIN_ROLES,
    admin_scope,
    ensure_role,
    ensure_shared_resource_access,
    scope_filter,
)
from apps.attractions.domain.entities import (
    Attraction,
    AttractionStatus,
    AvailabilityType,
    Category,
    Destination,
)
from apps.bookings.domain.entities import BookingStatus
from shared.application.repository import Page, PageRequest
from shared.domain.exceptions import NotFound, ValidationFailed

DEFAULT_SLOTS = ('09:00', '10:00', '11:00', '14:00', '15:00', '16:00')
DEFAULT_CAPACITY = 25
DEFAULT_RANGE_DAYS = 30
MAX_RANGE_DAYS = 62


@dataclass(frozen=True)
class HomepageStats:
    total_attractions: int
    total_destinations: int
    total_bookings: int

    def to_dict(self) -> dict:
        return {
            'total_attractions': self.total_attractions,
            'total_destinations': self.total_destinations,
            'total_bookings': self.total_bookings,
        }


@dataclass(frozen=True)
class TimeSlot:
    time: str
    available: bool
    spots_left: int


@dataclass(frozen=True)
class DayAvailability:
    date: date
    available: bool
    time_slots: Tuple[TimeSlot, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CategoryCount:
    category: Category
    count: int


class CatalogQueries:
    def __init__(self, attraction_repo, destination_repo, booking_repo, category_repo):
        self.attraction_repo = attraction_repo
        self.destination_repo = destination_repo
        self.booking_repo = booking_repo
        self.category_repo = category_repo

    @staticmethod
    def _public_filters(context: RequestContext) -> dict:
        filters = {'status': AttractionStatus.ACTIVE}
        if context.tenant is not None:
            filters['tenant_ids__contains'] = context.tenant_id
        return filters

    # ----- attractions -----

    def list_attractions(
        self,
        context: RequestContext,
        city: str = '',
        search: str = '',
        category: str = '',
        page: PageRequest | None = None,
    ) -> Page[Attraction]:
        filters = self._public_filters(context)
        if city:
            filters['city__icontains'] = city
        if category:
            filters['category'] = category
        if search:
            filters['title__icontains'] = search
        return self.attraction_repo.find(filters, page or PageRequest())

    def get_attraction(self, context: RequestContext, id_or_slug: str) -> Attraction:
        attraction = self.attraction_repo.get(id_or_slug) or self.attraction_repo.first({'slug': id_or_slug})
        if attraction is None or not attraction.is_bookable:
            raise NotFound("Attraction not found")
        if context.tenant is not None and not attraction.is_offered_by(context.tenant_id):
            raise NotFound("Attraction not found")
        return attraction

    def admin_get_attraction(self, context: RequestContext, attraction_id: str) -> Attraction:
        """Any status; the caller must reach one of the attraction's tenants"""
        identity = ensure_role(context.identity, ADMIN_ROLES, 'attractions.admin_get', 'Admin access required')
        attraction = self.attraction_repo.get(attraction_id)
        if attraction is None:
            raise NotFound("Attraction not found")
        ensure_shared_resource_access(
            identity, attraction.tenant_ids, 'attractions.admin_get', 'Access denied to this attraction',
        )
        return attraction

    def availability(
        self,
        context: RequestContext,
        id_or_slug: str,
        start: date | None = None,
        month: str = '',
        today: date | None = None,
    ) -> List[DayAvailability]:
        attraction = self.get_attraction(context, id_or_slug)
        start = start or today or date.today()
        if month:
            try:
                first = datetime.strptime(month, '%Y-%m').date()
            except ValueError:
                raise ValidationFailed("Invalid month", {'month': ['Expected YYYY-MM.']})
            end = first.replace(day=calendar.monthrange(first.year, first.month)[1])
        else:
            end = start + timedelta(days=DEFAULT_RANGE_DAYS)

        if end < start:
            raise ValidationFailed("The requested month ends before the start date")
        if (end - start).days > MAX_RANGE_DAYS:
            raise ValidationFailed(f"Availability can be requested for at most {MAX_RANGE_DAYS} days")

        slots = ()
        if attraction.availability_type == AvailabilityType.TIME_SLOTS:
            slots = tuple(TimeSlot(time=t, available=True, spots_left=DEFAULT_CAPACITY) for t in DEFAULT_SLOTS)
        return [
            DayAvailability(date=start + timedelta(days=offset), available=True, time_slots=slots)
            for offset in range((end - start).days + 1)
        ]

    def admin_attractions(
        self,
        context: RequestContext,
        status: AttractionStatus | None = None,
        page: PageRequest | None = None,
    ) -> Page[Attraction]:
        page = page or PageRequest()
        scope = admin_scope(context.identity, context.tenant_id, 'attractions.list')
        if scope.is_empty:
            return Page.empty(page)

        filters = scope.filters(tenant_field='tenant_ids', many=True)
        if status is not None:
            filters['status'] = status
        return self.attraction_repo.find(filters, page)

    # ----- destinations -----

    def list_destinations(self, context: RequestContext, page: PageRequest | None = None) -> Page[Destination]:
        return self.destination_repo.find(
            self._public_filters(context), page or PageRequest(order_by='name'),
        )

    def admin_destinations(self, context: RequestContext, page: PageRequest | None = None) -> Page[Destination]:
        page = page or PageRequest(order_by='name')
        scope = admin_scope(context.identity, context.tenant_id, 'destinations.list')
        if scope.is_empty:
            return Page.empty(page)
        return self.destination_repo.find(scope.filters(tenant_field='tenant_ids', many=True), page)

    # ----- categories -----

    def _category_scope(self, context: RequestContext) -> dict | None:
        """Attraction filters for category counts; None when nothing is visible"""
        if context.tenant is not None:
            return {'tenant_ids__contains': context.tenant_id}
        scope = scope_filter(context.identity)
        if not scope.is_admin_scope:
            return {}
        if scope.is_empty:
            return None
        return scope.filters(tenant_field='tenant_ids', many=True)

    def list_categories(self, context: RequestContext) -> List[CategoryCount]:
        scope = self._category_scope(context)
        if scope is None:
            return []

        categories = self.category_repo.find({'is_active': True}, PageRequest(limit=100, order_by='name')).items
        categories.sort(key=lambda c: (c.sort_order, c.name))
        counted = [
            CategoryCount(
                category=category,
                count=self.attraction_repo.count({
                    'status': AttractionStatus.ACTIVE, 'category': category.slug, **scope,
                }),
            )
            for category in categories
        ]
        if scope:
            counted = [c for c in counted if c.count > 0]
        return counted

    def get_category(self, context: RequestContext, slug: str) -> CategoryCount:
        category = self.category_repo.first({'slug': slug, 'is_active': True})
        if category is None:
            raise NotFound("Category not found")
        filters = {'status': AttractionStatus.ACTIVE, 'category': category.slug}
        if context.tenant is not None:
            filters['tenant_ids__contains'] = context.tenant_id
        return CategoryCount(category=category, count=self.attraction_repo.count(filters))

    # ----- homepage -----

    def homepage_stats(self) -> HomepageStats:
        return HomepageStats(
            total_attractions=self.attraction_repo.count({'status': AttractionStatus.ACTIVE}),
            total_destinations=self.destination_repo.count({'status': AttractionStatus.ACTIVE}),
            total_bookings=self.booking_repo.count({
                'status__in': [BookingStatus.CONFIRMED, BookingStatus.COMPLETED],
            }),
        )
