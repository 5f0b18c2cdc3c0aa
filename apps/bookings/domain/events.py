"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits; handler failures
are logged and never undo the transition that raised the event.
"""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import DomainEvent


# ===== Booking Events =====

@dataclass
class BookingCreated(DomainEvent):
    """
    Event: A new booking was created (PENDING/PENDING)

    Triggers:
    - Audit log entry
    """
    booking_id: str
    reference: str
    tenant_id: str
    attraction_id: str
    user_id: str | None
    total: Decimal
    currency: str


@dataclass
class BookingConfirmed(DomainEvent):
    """
    Event: Payment succeeded (PENDING -> CONFIRMED)

    Triggers:
    - Render and store the PDF ticket
    - Send booking confirmation e-mail with the ticket attached
    """
    booking_id: str
    reference: str
    tenant_id: str
    user_id: str | None


@dataclass
class BookingCancelled(DomainEvent):
    """
    Event: Booking was cancelled

    refunded is True when the cancellation reversed a succeeded payment.
    """
    booking_id: str
    reason: str
    refunded: bool
    old_status: str


@dataclass
class BookingRefunded(DomainEvent):
    """Event: Payment of a booking was refunded with the provider"""
    booking_id: str
    amount: Decimal
    currency: str


@dataclass
class BookingCompleted(DomainEvent):
    """Event: The experience took place (CONFIRMED -> COMPLETED)"""
    booking_id: str


# ===== Payment Events =====

@dataclass
class PaymentIntentIssued(DomainEvent):
    """Event: A payment intent was created with the provider"""
    booking_id: str
    payment_intent_id: str


@dataclass
class PaymentFailed(DomainEvent):
    """
    Event: Provider declined the payment (PROCESSING -> FAILED)

    The booking stays PENDING; a failed payment is terminal for this booking.
    """
    booking_id: str
    reason: str
