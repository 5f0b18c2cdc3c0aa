"""
Booking Queries

Read side of the booking domain. Every query is gated by the access
control engine; list and aggregate queries are narrowed with scope_filter.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
import logging

from apps.access.context import RequestContext
from apps.access.engine import admin_scope, ensure_owned_resource_access, require_identity
from apps.bookings.domain.entities import Booking, BookingStatus, PaymentStatus
from shared.application.repository import Page, PageRequest
from shared.domain.exceptions import NotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingFilters:
    status: BookingStatus | None = None
    search: str = ''
    created_from: datetime | None = None
    created_to: datetime | None = None

    def to_filters(self) -> dict:
        filters = {}
        if self.status is not None:
            filters['status'] = self.status
        if self.search:
            # e-mail searches go to the guest contact, everything else to the reference
            if '@' in self.search:
                filters['guest_details.email__icontains'] = self.search
            else:
                filters['reference__icontains'] = self.search
        if self.created_from is not None:
            filters['created_at__gte'] = self.created_from
        if self.created_to is not None:
            filters['created_at__lte'] = self.created_to
        return filters


@dataclass(frozen=True)
class TicketStatus:
    """ready is False while the ticket is still being generated"""
    booking_id: str
    reference: str
    ticket_url: str | None

    @property
    def ready(self) -> bool:
        return bool(self.ticket_url)


@dataclass(frozen=True)
class BookingStats:
    total_bookings: int
    confirmed_bookings: int
    pending_bookings: int
    cancelled_bookings: int
    completed_bookings: int
    total_revenue: Decimal

    def to_dict(self) -> dict:
        return {
            'total_bookings': self.total_bookings,
            'confirmed_bookings': self.confirmed_bookings,
            'pending_bookings': self.pending_bookings,
            'cancelled_bookings': self.cancelled_bookings,
            'completed_bookings': self.completed_bookings,
            'total_revenue': self.total_revenue,
        }


class BookingQueries:
    def __init__(self, booking_repo):
        self.booking_repo = booking_repo

    def _visible(self, context: RequestContext, booking: Booking | None, operation: str, message: str) -> Booking:
        if booking is None:
            raise NotFound("Booking not found")
        ensure_owned_resource_access(
            context.identity, booking.user_id, booking.tenant_id, operation, message,
        )
        return booking

    def get(self, context: RequestContext, booking_id: str) -> Booking:
        return self._visible(
            context, self.booking_repo.get(booking_id),
            'bookings.view', 'Not authorized to view this booking',
        )

    def get_by_reference(self, context: RequestContext, reference: str) -> Booking:
        return self._visible(
            context, self.booking_repo.first({'reference': reference.upper()}),
            'bookings.view', 'Not authorized to view this booking',
        )

    def ticket(self, context: RequestContext, booking_id: str) -> TicketStatus:
        booking = self._visible(
            context, self.booking_repo.get(booking_id),
            'bookings.ticket', 'Not authorized to access this ticket',
        )
        return TicketStatus(
            booking_id=booking.id,
            reference=booking.reference,
            ticket_url=booking.ticket(),
        )

    def my_bookings(
        self,
        context: RequestContext,
        status: BookingStatus | None = None,
        page: PageRequest | None = None,
    ) -> Page[Booking]:
        identity = require_identity(context.identity, 'bookings.my')
        filters = BookingFilters(status=status).to_filters()
        filters['user_id'] = identity.id
        return self.booking_repo.find(filters, page or PageRequest(limit=10))

    def list(
        self,
        context: RequestContext,
        filters: BookingFilters = BookingFilters(),
        page: PageRequest | None = None,
    ) -> Page[Booking]:
        """Admin listing within the caller's tenant scope"""
        page = page or PageRequest()
        scope = admin_scope(context.identity, context.tenant_id, 'bookings.list')
        if scope.is_empty:
            return Page.empty(page)

        query = filters.to_filters()
        query.update(scope.filters())
        return self.booking_repo.find(query, page)

    def stats(self, context: RequestContext) -> BookingStats:
        scope = admin_scope(context.identity, context.tenant_id, 'bookings.stats')
        if scope.is_empty:
            return BookingStats(0, 0, 0, 0, 0, Decimal('0.00'))

        base = scope.filters()

        def count(**extra) -> int:
            return self.booking_repo.count({**base, **extra})

        revenue = self.booking_repo.sum(
            'total', {**base, 'payment_status': PaymentStatus.SUCCEEDED},
        )
        return BookingStats(
            total_bookings=count(),
            confirmed_bookings=count(status=BookingStatus.CONFIRMED),
            pending_bookings=count(status=BookingStatus.PENDING),
            cancelled_bookings=count(status=BookingStatus.CANCELLED),
            completed_bookings=count(status=BookingStatus.COMPLETED),
            total_revenue=revenue,
        )
