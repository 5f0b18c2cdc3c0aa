"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Create a new booking with server-side pricing
- CancelBookingCommand: Cancel a booking (refunding a paid one)
- CompleteBookingCommand: Mark a confirmed booking as completed
- CompleteFinishedBookings: Periodic job completing past bookings
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List
import logging

from apps.access.context import RequestContext
from apps.access.engine import ensure_owned_resource_access, ensure_tenant_access
from apps.bookings.domain.entities import Booking, BookingStatus, GuestDetails
from apps.bookings.domain.events import BookingCreated
from apps.bookings.domain.pricing import PricingEngine, RequestedItem, default_engine
from apps.bookings.domain.references import generate_reference
from shared.application.repository import PageRequest
from shared.application.uow import InMemoryUnitOfWork
from shared.domain.exceptions import (
    ConcurrentModification,
    DuplicateReference,
    Forbidden,
    InvalidState,
    NotFound,
)

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    Prices and option names in items are ignored; the pricing engine
    derives them from the attraction.
    """
    attraction_id: str
    items: List[RequestedItem]
    guest_details: GuestDetails | None = None
    promo_code: str = ''


@dataclass
class CancelBookingCommand:
    booking_id: str
    reason: str = ''


@dataclass
class CompleteBookingCommand:
    booking_id: str


# ===== Transition helper =====

class BookingTransition:
    """
    Read-modify-write of a single booking

    The write is a conditional update on the version that was read. When
    another writer got there first the whole step (access check included)
    is replayed against the fresh state, so the loser of a race sees the
    winner's status and fails with InvalidState instead of repeating it.
    """

    def __init__(self, booking_repo, uow_factory: Callable = InMemoryUnitOfWork):
        self.booking_repo = booking_repo
        self.uow_factory = uow_factory

    def load(self, booking_id: str) -> Booking:
        booking = self.booking_repo.get(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        return booking

    def apply(self, booking_id: str, step: Callable[[Booking], None], attempts: int = 3) -> Booking:
        for attempt in range(1, attempts + 1):
            booking = self.load(booking_id)
            try:
                with self.uow_factory() as uow:
                    step(booking)
                    uow.collect_events(booking)
                    booking.version = self.booking_repo.update(
                        booking.id, booking.version, booking.patch()
                    )
                return booking
            except ConcurrentModification:
                logger.warning(
                    f"Booking {booking_id} changed concurrently "
                    f"(attempt {attempt}/{attempts})"
                )
        raise ConcurrentModification()


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Resolve the attraction (must be active)
    2. Check it is offered by the request tenant, if any
    3. Price every line from the catalog
    4. Insert with a fresh reference, regenerating on collision
    """

    def __init__(
        self,
        booking_repo,
        attraction_repo,
        uow_factory: Callable = InMemoryUnitOfWork,
        pricing: PricingEngine = default_engine,
        reference_prefix: str = 'ATT',
        max_attempts: int = 5,
    ):
        self.booking_repo = booking_repo
        self.attraction_repo = attraction_repo
        self.uow_factory = uow_factory
        self.pricing = pricing
        self.reference_prefix = reference_prefix
        self.max_attempts = max_attempts

    def handle(self, context: RequestContext, command: CreateBookingCommand) -> Booking:
        """
        Handle booking creation

        Returns: Created Booking aggregate (PENDING/PENDING)

        Raises:
            NotFound: attraction missing or not active
            Forbidden: attraction not offered by the request tenant
            InvalidState: attraction belongs to no tenant
            UnknownPricingOption: a line references an unknown option
        """
        attraction = self.attraction_repo.get(command.attraction_id)
        if attraction is None or not attraction.is_bookable:
            raise NotFound("Attraction not found")

        if context.tenant is not None and not attraction.is_offered_by(context.tenant_id):
            raise Forbidden("Attraction not available for this tenant")

        tenant_id = context.tenant_id or attraction.primary_tenant_id
        if not tenant_id:
            raise InvalidState("Attraction is not assigned to any tenant")

        priced = self.pricing.price_booking(attraction, command.items)

        prefix = self.reference_prefix
        if context.tenant is not None and context.tenant.reference_prefix:
            prefix = context.tenant.reference_prefix

        for attempt in range(1, self.max_attempts + 1):
            booking = Booking(
                reference=generate_reference(prefix),
                user_id=context.user_id,
                tenant_id=tenant_id,
                attraction_id=attraction.id,
                items=list(priced.items),
                guest_details=command.guest_details,
                promo_code=command.promo_code,
                subtotal=priced.subtotal.amount,
                fees=priced.fees.amount,
                discount=priced.discount.amount,
                total=priced.total.amount,
                currency=priced.currency,
            )
            booking.add_event(BookingCreated(
                aggregate_id=booking.id,
                booking_id=booking.id,
                reference=booking.reference,
                tenant_id=tenant_id,
                attraction_id=attraction.id,
                user_id=booking.user_id,
                total=booking.total,
                currency=booking.currency,
            ))

            try:
                with self.uow_factory() as uow:
                    uow.collect_events(booking)
                    self.booking_repo.add(booking)
            except DuplicateReference:
                logger.warning(
                    f"Booking reference {booking.reference} collided "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                continue

            logger.info(
                f"Booking {booking.reference} created for attraction {attraction.id}, "
                f"tenant {tenant_id}, total {booking.total} {booking.currency}"
            )
            return booking

        raise DuplicateReference(
            f"Could not allocate a unique booking reference after {self.max_attempts} attempts"
        )


class CancelBookingHandler:
    """
    Handler for CancelBooking command

    A paid booking is refunded with the payment provider before the
    cancellation is persisted; if the provider refuses, nothing changes.
    The refund carries the booking's idempotency key, so a step replayed
    after a lost race gets the first refund back instead of a second one.
    """

    def __init__(self, booking_repo, gateway, uow_factory: Callable = InMemoryUnitOfWork):
        self.transition = BookingTransition(booking_repo, uow_factory)
        self.gateway = gateway

    def handle(self, context: RequestContext, command: CancelBookingCommand) -> Booking:
        def step(booking: Booking):
            ensure_owned_resource_access(
                context.identity, booking.user_id, booking.tenant_id,
                'bookings.cancel', 'Not authorized to cancel this booking',
            )
            if not booking.is_active:
                raise InvalidState("Booking cannot be cancelled")

            refund = booking.cancel(command.reason)
            if refund:
                if booking.payment_intent_id:
                    self.gateway.refund(booking.payment_intent_id, idempotency_key=booking.refund_key)
                else:
                    logger.warning(
                        f"Booking {booking.reference} was paid without a payment intent; "
                        f"no provider refund issued"
                    )

        booking = self.transition.apply(command.booking_id, step)
        logger.info(f"Booking {booking.reference} cancelled by {context.user_id}")
        return booking


class CompleteBookingHandler:
    """Handler for CompleteBooking command (admin, CONFIRMED -> COMPLETED)"""

    def __init__(self, booking_repo, uow_factory: Callable = InMemoryUnitOfWork):
        self.transition = BookingTransition(booking_repo, uow_factory)

    def handle(self, context: RequestContext, command: CompleteBookingCommand) -> Booking:
        def step(booking: Booking):
            ensure_tenant_access(
                context.identity, booking.tenant_id,
                'bookings.complete', 'Not authorized to update this booking',
            )
            booking.complete()

        booking = self.transition.apply(command.booking_id, step)
        logger.info(f"Booking {booking.reference} completed")
        return booking


@dataclass
class CompleteFinishedBookings:
    """Periodic job: complete confirmed bookings whose last date has passed"""
    today: date = field(default_factory=date.today)


class CompleteFinishedBookingsHandler:
    batch_size = 100

    def __init__(self, booking_repo, uow_factory: Callable = InMemoryUnitOfWork):
        self.booking_repo = booking_repo
        self.transition = BookingTransition(booking_repo, uow_factory)

    def handle(self, command: CompleteFinishedBookings) -> int:
        cutoff = command.today.isoformat()
        due = []
        page_number = 1
        while True:
            page = self.booking_repo.find(
                {'status': BookingStatus.CONFIRMED},
                PageRequest(page=page_number, limit=self.batch_size, order_by='created_at'),
            )
            due.extend(
                b.id for b in page.items
                if b.last_item_date is not None and b.last_item_date < cutoff
            )
            if page_number >= page.pages:
                break
            page_number += 1

        completed = 0
        for booking_id in due:
            try:
                self.transition.apply(booking_id, lambda booking: booking.complete())
                completed += 1
            except InvalidState as e:
                logger.info(f"Skipping booking {booking_id}: {e}")

        logger.info(f"Completed {completed} finished bookings (cutoff {cutoff})")
        return completed
