"""
Booking Domain Entities

Core business entities for the booking domain:
- Booking: Main aggregate representing a reservation of an attraction
- BookingStatus / PaymentStatus: the two jointly constrained state machines
- LineItem: a priced line, always derived from the catalog
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, List

from shared.application.repository import Patch
from shared.domain.base import Aggregate, ValueObject, utcnow
from shared.domain.exceptions import InvalidState
from shared.domain.value_objects import to_decimal


class BookingStatus(Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (payment succeeded)
    - PENDING -> CANCELLED (cancelled before payment)
    - CONFIRMED -> CANCELLED (cancelled after payment, refund implied)
    - CONFIRMED -> COMPLETED (experience took place)
    - CONFIRMED -> REFUNDED (admin refund)
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'
    REFUNDED = 'refunded'


class PaymentStatus(Enum):
    """
    Payment status tracking

    - PENDING -> PROCESSING (payment intent issued)
    - PENDING | PROCESSING -> SUCCEEDED (payment confirmed)
    - PROCESSING -> FAILED (provider declined)
    - SUCCEEDED -> REFUNDED
    """
    PENDING = 'pending'
    PROCESSING = 'processing'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'
    REFUNDED = 'refunded'


BOOKING_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.CANCELLED,
        BookingStatus.COMPLETED,
        BookingStatus.REFUNDED,
    }),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.REFUNDED: frozenset(),
}

PAYMENT_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PROCESSING, PaymentStatus.SUCCEEDED}),
    PaymentStatus.PROCESSING: frozenset({PaymentStatus.SUCCEEDED, PaymentStatus.FAILED}),
    PaymentStatus.SUCCEEDED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}


@dataclass(frozen=True)
class Quantities(ValueObject):
    adults: int = 0
    children: int = 0
    infants: int = 0

    def __post_init__(self):
        if min(self.adults, self.children, self.infants) < 0:
            raise ValueError("Quantities cannot be negative")

    @property
    def total_guests(self) -> int:
        return self.adults + self.children + self.infants

    def to_dict(self) -> dict:
        return {'adults': self.adults, 'children': self.children, 'infants': self.infants}


@dataclass(frozen=True)
class LineItem(ValueObject):
    """Priced booking line; name and prices always come from the catalog"""
    option_id: str
    option_name: str
    date: str
    quantities: Quantities
    unit_price: Decimal
    total_price: Decimal
    time: str | None = None

    def __post_init__(self):
        object.__setattr__(self, 'unit_price', to_decimal(self.unit_price))
        object.__setattr__(self, 'total_price', to_decimal(self.total_price))

    def to_dict(self) -> dict:
        return {
            'option_id': self.option_id,
            'option_name': self.option_name,
            'date': self.date,
            'time': self.time,
            'quantities': self.quantities.to_dict(),
            'unit_price': str(self.unit_price),
            'total_price': str(self.total_price),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'LineItem':
        return cls(
            option_id=data['option_id'],
            option_name=data['option_name'],
            date=data['date'],
            time=data.get('time'),
            quantities=Quantities(**data['quantities']),
            unit_price=Decimal(str(data['unit_price'])),
            total_price=Decimal(str(data['total_price'])),
        )


@dataclass(frozen=True)
class GuestDetails(ValueObject):
    first_name: str
    last_name: str
    email: str
    phone: str = ''
    country: str = ''
    special_requests: str = ''

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict:
        return {
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'country': self.country,
            'special_requests': self.special_requests,
        }


@dataclass(frozen=True)
class BookingPatch(Patch):
    """Mutable fields of a Booking"""
    status: BookingStatus | None = None
    payment_status: PaymentStatus | None = None
    payment_intent_id: str | None = None
    payment_method: str | None = None
    ticket_url: str | None = None
    cancellation_reason: str | None = None
    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    refunded_at: datetime | None = None
    completed_at: datetime | None = None


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Key invariants:
    - total == subtotal + fees - discount
    - subtotal == sum of item total prices
    - status and payment_status only move along BOOKING_TRANSITIONS and
      PAYMENT_TRANSITIONS; anything else raises InvalidState
    """

    reference: str
    tenant_id: str
    attraction_id: str
    items: List[LineItem]
    subtotal: Decimal
    fees: Decimal
    total: Decimal
    currency: str
    discount: Decimal = Decimal('0.00')
    user_id: str | None = None
    guest_details: GuestDetails | None = None
    promo_code: str = ''

    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_intent_id: str | None = None
    payment_method: str | None = None
    ticket_url: str | None = None
    cancellation_reason: str = ''

    confirmed_at: datetime | None = None
    cancelled_at: datetime | None = None
    refunded_at: datetime | None = None
    completed_at: datetime | None = None

    def __post_init__(self):
        for name in ('subtotal', 'fees', 'discount', 'total'):
            setattr(self, name, to_decimal(getattr(self, name)))

    # ----- state machine -----

    def _move(self, status: BookingStatus | None = None, payment_status: PaymentStatus | None = None):
        if status is not None and status not in BOOKING_TRANSITIONS[self.status]:
            raise InvalidState(
                f"Booking {self.reference} cannot move from {self.status.value} to {status.value}"
            )
        if payment_status is not None and payment_status not in PAYMENT_TRANSITIONS[self.payment_status]:
            raise InvalidState(
                f"Payment for booking {self.reference} cannot move from "
                f"{self.payment_status.value} to {payment_status.value}"
            )
        if status is not None:
            self.status = status
        if payment_status is not None:
            self.payment_status = payment_status

    def issue_payment_intent(self, payment_intent_id: str):
        """
        Record an external payment intent (payment PENDING -> PROCESSING)

        A second intent for the same booking is rejected; callers poll the
        payment status instead of retrying.
        Events: PaymentIntentIssued
        """
        if self.payment_status != PaymentStatus.PENDING:
            raise InvalidState("Payment already processed")
        if self.status != BookingStatus.PENDING:
            raise InvalidState(f"Cannot pay for a {self.status.value} booking")

        from apps.bookings.domain.events import PaymentIntentIssued

        self._move(payment_status=PaymentStatus.PROCESSING)
        self.payment_intent_id = payment_intent_id

        self.add_event(PaymentIntentIssued(
            aggregate_id=self.id,
            booking_id=self.id,
            payment_intent_id=payment_intent_id,
        ))

    def confirm_payment(self, payment_method: str | None = None):
        """
        Confirm payment (payment -> SUCCEEDED, booking PENDING -> CONFIRMED)

        Ticket generation and the confirmation e-mail hang off the
        BookingConfirmed event and never affect this transition.
        Events: BookingConfirmed
        """
        if self.payment_status != PaymentStatus.PROCESSING:
            raise InvalidState(
                f"Cannot confirm payment with status {self.payment_status.value}"
            )
        if self.status != BookingStatus.PENDING:
            raise InvalidState(f"Cannot confirm a {self.status.value} booking")

        from apps.bookings.domain.events import BookingConfirmed

        self._move(status=BookingStatus.CONFIRMED, payment_status=PaymentStatus.SUCCEEDED)
        self.payment_method = payment_method
        self.confirmed_at = utcnow()

        self.add_event(BookingConfirmed(
            aggregate_id=self.id,
            booking_id=self.id,
            reference=self.reference,
            tenant_id=self.tenant_id,
            user_id=self.user_id,
        ))

    def fail_payment(self, reason: str = ''):
        """
        Payment declined by the provider (PROCESSING -> FAILED)

        Events: PaymentFailed
        """
        if self.payment_status != PaymentStatus.PROCESSING:
            raise InvalidState(
                f"Cannot fail payment with status {self.payment_status.value}"
            )

        from apps.bookings.domain.events import PaymentFailed

        self._move(payment_status=PaymentStatus.FAILED)
        self.add_event(PaymentFailed(
            aggregate_id=self.id,
            booking_id=self.id,
            reason=reason,
        ))

    def cancel(self, reason: str = '') -> bool:
        """
        Cancel booking (PENDING | CONFIRMED -> CANCELLED)

        A succeeded payment is refunded in the same transition.
        Returns True when a refund is implied.
        Events: BookingCancelled
        """
        if self.status not in (BookingStatus.PENDING, BookingStatus.CONFIRMED):
            raise InvalidState(f"Booking cannot be cancelled from status {self.status.value}")

        from apps.bookings.domain.events import BookingCancelled

        old_status = self.status
        refund = self.payment_status == PaymentStatus.SUCCEEDED
        self._move(
            status=BookingStatus.CANCELLED,
            payment_status=PaymentStatus.REFUNDED if refund else None,
        )
        now = utcnow()
        self.cancellation_reason = reason
        self.cancelled_at = now
        if refund:
            self.refunded_at = now

        self.add_event(BookingCancelled(
            aggregate_id=self.id,
            booking_id=self.id,
            reason=reason,
            refunded=refund,
            old_status=old_status.value,
        ))
        return refund

    def refund(self):
        """
        Refund a succeeded payment (booking and payment -> REFUNDED)

        Events: BookingRefunded
        """
        if self.payment_status != PaymentStatus.SUCCEEDED:
            raise InvalidState("Payment cannot be refunded")
        if not self.payment_intent_id:
            raise InvalidState("No payment found for this booking")

        from apps.bookings.domain.events import BookingRefunded

        self._move(status=BookingStatus.REFUNDED, payment_status=PaymentStatus.REFUNDED)
        self.refunded_at = utcnow()

        self.add_event(BookingRefunded(
            aggregate_id=self.id,
            booking_id=self.id,
            amount=self.total,
            currency=self.currency,
        ))

    def refund_late_payment(self, payment_method: str | None = None):
        """
        A payment that succeeded after the booking was cancelled

        The booking stays CANCELLED; the payment is recorded as succeeded
        and refunded in the same transition (PROCESSING -> REFUNDED).
        Events: BookingRefunded
        """
        if self.status != BookingStatus.CANCELLED:
            raise InvalidState(f"Cannot refund a late payment on a {self.status.value} booking")
        if self.payment_status != PaymentStatus.PROCESSING:
            raise InvalidState(
                f"Cannot refund a late payment with status {self.payment_status.value}"
            )

        from apps.bookings.domain.events import BookingRefunded

        self._move(payment_status=PaymentStatus.SUCCEEDED)
        self._move(payment_status=PaymentStatus.REFUNDED)
        self.payment_method = payment_method
        self.refunded_at = utcnow()

        self.add_event(BookingRefunded(
            aggregate_id=self.id,
            booking_id=self.id,
            amount=self.total,
            currency=self.currency,
        ))

    def complete(self):
        """
        Complete booking (CONFIRMED -> COMPLETED)

        Events: BookingCompleted
        """
        from apps.bookings.domain.events import BookingCompleted

        self._move(status=BookingStatus.COMPLETED)
        self.completed_at = utcnow()
        self.add_event(BookingCompleted(aggregate_id=self.id, booking_id=self.id))

    def attach_ticket(self, ticket_url: str):
        if self.status != BookingStatus.CONFIRMED:
            raise InvalidState("Tickets are only issued for confirmed bookings")
        self.ticket_url = ticket_url

    def ticket(self) -> str | None:
        """Ticket URL if already generated; never issued for unconfirmed bookings"""
        if self.status != BookingStatus.CONFIRMED:
            raise InvalidState("Ticket not available. Booking is not confirmed.")
        return self.ticket_url

    def patch(self) -> BookingPatch:
        """Snapshot of the mutable fields, for a conditional update"""
        return BookingPatch(
            status=self.status,
            payment_status=self.payment_status,
            payment_intent_id=self.payment_intent_id,
            payment_method=self.payment_method,
            ticket_url=self.ticket_url,
            cancellation_reason=self.cancellation_reason,
            confirmed_at=self.confirmed_at,
            cancelled_at=self.cancelled_at,
            refunded_at=self.refunded_at,
            completed_at=self.completed_at,
        )

    # ----- queries -----

    @property
    def contact_email(self) -> str | None:
        return self.guest_details.email if self.guest_details else None

    @property
    def last_item_date(self) -> str | None:
        return max((item.date for item in self.items), default=None)

    @property
    def refund_key(self) -> str:
        """Idempotency key of the provider refund; a booking is refunded at most once"""
        return f"booking-{self.id}-refund"

    @property
    def awaits_late_refund(self) -> bool:
        return self.status == BookingStatus.CANCELLED and self.payment_status == PaymentStatus.PROCESSING

    @property
    def is_active(self) -> bool:
        return self.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    def __str__(self):
        return f"Booking {self.reference} ({self.status.value}/{self.payment_status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, reference={self.reference}, "
            f"status={self.status.value}, payment_status={self.payment_status.value})"
        )
