"""
Payment Command Handlers

Commands:
- IssuePaymentIntent: create a provider intent for a pending booking
- ConfirmPayment: client-side confirmation after checkout, verified
  against the provider
- HandleWebhook: provider notifications (succeeded, failed, refunded)
- RefundPayment: admin refund of a succeeded payment

Every booking write goes through BookingTransition, so a duplicated
confirmation (client call racing the webhook) is applied once and the
other attempt sees InvalidState.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable
import logging

from apps.access.context import RequestContext
from apps.access.engine import ensure_owned_resource_access, ensure_tenant_access
from apps.bookings.application.command_handlers import BookingTransition
from apps.bookings.domain.entities import Booking, PaymentStatus
from apps.payments.gateway import (
    EVENT_CHARGE_REFUNDED,
    EVENT_INTENT_FAILED,
    EVENT_INTENT_SUCCEEDED,
    PaymentGateway,
    PaymentIntent,
)
from shared.application.uow import InMemoryUnitOfWork
from shared.domain.exceptions import InvalidState, NotFound, ValidationFailed
from shared.domain.value_objects import Money

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedIntent:
    client_secret: str
    payment_intent_id: str
    amount: Decimal
    currency: str


@dataclass(frozen=True)
class PaymentStatusView:
    booking_id: str
    reference: str
    payment_status: str
    booking_status: str
    amount: Decimal
    currency: str

    @classmethod
    def of(cls, booking: Booking) -> 'PaymentStatusView':
        return cls(
            booking_id=booking.id,
            reference=booking.reference,
            payment_status=booking.payment_status.value,
            booking_status=booking.status.value,
            amount=booking.total,
            currency=booking.currency,
        )


class IssuePaymentIntentHandler:
    """
    PENDING -> PROCESSING

    The intent is created with the provider first, using the booking id as
    idempotency key, and recorded on the booking only if the booking still
    is in the state that was read.
    """

    def __init__(self, booking_repo, gateway: PaymentGateway, uow_factory: Callable = InMemoryUnitOfWork):
        self.transition = BookingTransition(booking_repo, uow_factory)
        self.gateway = gateway

    def handle(self, context: RequestContext, booking_id: str) -> IssuedIntent:
        issued = {}

        def step(booking: Booking):
            ensure_owned_resource_access(
                context.identity, booking.user_id, booking.tenant_id,
                'payments.create_intent', 'Not authorized to pay for this booking',
            )
            if booking.payment_status != PaymentStatus.PENDING:
                raise InvalidState("Payment already processed")

            intent = self.gateway.create_intent(
                Money(booking.total, booking.currency),
                metadata={'booking_id': booking.id, 'booking_reference': booking.reference},
                idempotency_key=f"booking-{booking.id}-intent",
            )
            booking.issue_payment_intent(intent.id)
            issued['intent'] = intent

        booking = self.transition.apply(booking_id, step, attempts=1)
        intent = issued['intent']
        logger.info(f"Payment intent {intent.id} issued for booking {booking.reference}")
        return IssuedIntent(
            client_secret=intent.client_secret,
            payment_intent_id=intent.id,
            amount=booking.total,
            currency=booking.currency,
        )


class ConfirmPaymentHandler:
    """
    Confirm a payment from the client after checkout

    The provider is the source of truth: the booking is only confirmed when
    the intent reports succeeded. A declined intent fails the payment; an
    intent still in flight leaves the booking untouched.
    """

    def __init__(self, booking_repo, gateway: PaymentGateway, uow_factory: Callable = InMemoryUnitOfWork):
        self.transition = BookingTransition(booking_repo, uow_factory)
        self.gateway = gateway

    def handle(self, context: RequestContext, booking_id: str) -> Booking:
        booking = self.transition.load(booking_id)
        ensure_owned_resource_access(
            context.identity, booking.user_id, booking.tenant_id,
            'payments.confirm', 'Not authorized to confirm this payment',
        )
        if booking.payment_status not in (PaymentStatus.PENDING, PaymentStatus.PROCESSING):
            raise InvalidState(
                f"Cannot confirm payment with status {booking.payment_status.value}"
            )
        if not booking.payment_intent_id:
            raise InvalidState("No payment intent for this booking")

        intent = self.gateway.retrieve_intent(booking.payment_intent_id)
        return apply_intent_outcome(self.transition, self.gateway, booking.id, intent)


def settle_succeeded_payment(gateway: PaymentGateway, booking: Booking, payment_method: str | None):
    """
    Record a succeeded payment

    A booking cancelled while its payment was in flight is not confirmed;
    the money is handed back with the booking's refund key instead.
    """
    if booking.awaits_late_refund:
        gateway.refund(booking.payment_intent_id, idempotency_key=booking.refund_key)
        booking.refund_late_payment(payment_method)
        logger.warning(f"Payment for cancelled booking {booking.reference} succeeded; refunded")
    else:
        booking.confirm_payment(payment_method)


def apply_intent_outcome(
    transition: BookingTransition, gateway: PaymentGateway, booking_id: str, intent: PaymentIntent,
) -> Booking:
    if intent.succeeded:
        booking = transition.apply(
            booking_id, lambda b: settle_succeeded_payment(gateway, b, intent.payment_method),
        )
        logger.info(f"Payment settled for booking {booking.reference}")
        return booking
    if intent.failed:
        booking = transition.apply(
            booking_id, lambda b: b.fail_payment(intent.last_error),
        )
        logger.info(f"Payment failed for booking {booking.reference}: {intent.last_error}")
        return booking

    logger.info(f"Payment intent {intent.id} still {intent.status}")
    return transition.load(booking_id)


class HandleWebhookHandler:
    """
    Provider notifications

    Deliveries are at-least-once; a notification for a transition that has
    already happened is acknowledged without changes.
    """

    def __init__(self, booking_repo, gateway: PaymentGateway, uow_factory: Callable = InMemoryUnitOfWork):
        self.booking_repo = booking_repo
        self.transition = BookingTransition(booking_repo, uow_factory)
        self.gateway = gateway

    def handle(self, payload: bytes, signature: str | None) -> str:
        event = self.gateway.parse_webhook(payload, signature)
        logger.info(f"Webhook {event.id} received: {event.type}")

        if event.type not in (EVENT_INTENT_SUCCEEDED, EVENT_INTENT_FAILED, EVENT_CHARGE_REFUNDED):
            logger.info(f"Unhandled webhook event type: {event.type}")
            return 'ignored'
        if not event.payment_intent_id:
            logger.warning(f"Webhook {event.id} carries no payment intent")
            return 'ignored'

        booking = self.booking_repo.first({'payment_intent_id': event.payment_intent_id})
        if booking is None:
            logger.warning(f"No booking for payment intent {event.payment_intent_id}")
            return 'ignored'

        def step(b: Booking):
            if event.type == EVENT_INTENT_SUCCEEDED:
                settle_succeeded_payment(self.gateway, b, event.payment_method)
            elif event.type == EVENT_INTENT_FAILED:
                b.fail_payment(event.failure_message)
            else:
                b.refund()

        try:
            self.transition.apply(booking.id, step)
        except InvalidState as e:
            logger.info(f"Webhook {event.id} for booking {booking.reference} already applied: {e}")
            return 'duplicate'
        return 'processed'


class RefundPaymentHandler:
    """
    Admin refund (booking and payment -> REFUNDED)

    Owners without tenant access cannot refund their own bookings; they
    cancel instead.
    """

    def __init__(self, booking_repo, gateway: PaymentGateway, uow_factory: Callable = InMemoryUnitOfWork):
        self.transition = BookingTransition(booking_repo, uow_factory)
        self.gateway = gateway

    def handle(self, context: RequestContext, booking_id: str, amount: Decimal | None = None) -> Booking:
        def step(booking: Booking):
            ensure_tenant_access(
                context.identity, booking.tenant_id,
                'payments.refund', 'Not authorized to refund this payment',
            )
            if not booking.payment_intent_id:
                raise InvalidState("No payment found for this booking")
            if booking.payment_status != PaymentStatus.SUCCEEDED:
                raise InvalidState("Payment cannot be refunded")
            if amount is not None and not Decimal('0') < amount <= booking.total:
                raise ValidationFailed("Refund amount must be positive and not exceed the booking total")

            booking.refund()
            self.gateway.refund(
                booking.payment_intent_id,
                Money(amount, booking.currency) if amount is not None else None,
                idempotency_key=booking.refund_key,
            )

        booking = self.transition.apply(booking_id, step)
        logger.info(f"Booking {booking.reference} refunded by {context.user_id}")
        return booking


class PaymentQueries:
    def __init__(self, booking_repo):
        self.booking_repo = booking_repo

    def status(self, context: RequestContext, booking_id: str) -> PaymentStatusView:
        booking = self.booking_repo.get(booking_id)
        if booking is None:
            raise NotFound("Booking not found")
        ensure_owned_resource_access(
            context.identity, booking.user_id, booking.tenant_id,
            'payments.status', 'Not authorized to view this payment',
        )
        return PaymentStatusView.of(booking)
