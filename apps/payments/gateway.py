"""
Payment gateway

PaymentGateway is the boundary to the payment provider. StripeGateway talks
to Stripe through the official SDK; SimulatedGateway keeps intents in
memory and is used in development and tests.

Amounts cross the boundary as Money and are converted to minor units here.
"""

from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from uuid import uuid4

import stripe

from shared.domain.exceptions import PaymentGatewayError, PaymentsNotConfigured, ValidationFailed
from shared.domain.value_objects import Money

logger = logging.getLogger(__name__)

INTENT_SUCCEEDED = 'succeeded'
INTENT_PROCESSING = 'processing'
INTENT_REQUIRES_PAYMENT_METHOD = 'requires_payment_method'
INTENT_CANCELED = 'canceled'

EVENT_INTENT_SUCCEEDED = 'payment_intent.succeeded'
EVENT_INTENT_FAILED = 'payment_intent.payment_failed'
EVENT_CHARGE_REFUNDED = 'charge.refunded'


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str
    amount: int
    currency: str
    status: str
    payment_method: str | None = None
    last_error: str = ''
    metadata: dict = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return self.status == INTENT_SUCCEEDED

    @property
    def failed(self) -> bool:
        # Stripe moves a declined intent back to requires_payment_method
        return self.status == INTENT_CANCELED or (
            self.status == INTENT_REQUIRES_PAYMENT_METHOD and bool(self.last_error)
        )


@dataclass(frozen=True)
class RefundResult:
    id: str
    payment_intent_id: str
    amount: int
    status: str


@dataclass(frozen=True)
class WebhookEvent:
    id: str
    type: str
    payment_intent_id: str | None
    payment_method: str | None = None
    failure_message: str = ''


class PaymentGateway(ABC):
    """Payment provider boundary"""

    @abstractmethod
    def create_intent(self, amount: Money, metadata: dict, idempotency_key: str | None = None) -> PaymentIntent:
        ...

    @abstractmethod
    def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        ...

    @abstractmethod
    def refund(
        self, intent_id: str, amount: Money | None = None, idempotency_key: str | None = None,
    ) -> RefundResult:
        """
        Refund an intent in full, or partially when amount is given

        A repeated call with the same idempotency_key returns the first
        refund instead of issuing a second one.
        """

    @abstractmethod
    def parse_webhook(self, payload: bytes, signature: str | None) -> WebhookEvent:
        """
        Verify and decode a webhook delivery

        Raises:
            ValidationFailed: if the signature does not verify
        """


def _event_from_object(event_id: str, event_type: str, obj: dict) -> WebhookEvent:
    if event_type == EVENT_CHARGE_REFUNDED:
        intent_id = obj.get('payment_intent')
    elif event_type.startswith('payment_intent.'):
        intent_id = obj.get('id')
    else:
        intent_id = None

    method_types = obj.get('payment_method_types') or []
    last_error = obj.get('last_payment_error') or {}
    return WebhookEvent(
        id=event_id,
        type=event_type,
        payment_intent_id=intent_id,
        payment_method=method_types[0] if method_types else None,
        failure_message=last_error.get('message', '') if isinstance(last_error, dict) else '',
    )


class StripeGateway(PaymentGateway):
    """
    Stripe implementation

    Every SDK error is converted into PaymentGatewayError so callers only
    deal with domain errors. Without a secret key every call fails with
    PaymentsNotConfigured.
    """

    def __init__(self, secret_key: str, webhook_secret: str = ''):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret

    def _require_key(self):
        if not self.secret_key:
            raise PaymentsNotConfigured()

    def _to_intent(self, intent) -> PaymentIntent:
        method_types = getattr(intent, 'payment_method_types', None) or []
        last_error = getattr(intent, 'last_payment_error', None)
        metadata = getattr(intent, 'metadata', None)
        return PaymentIntent(
            id=intent.id,
            client_secret=getattr(intent, 'client_secret', None) or '',
            amount=intent.amount,
            currency=intent.currency.upper(),
            status=intent.status,
            payment_method=method_types[0] if method_types else None,
            last_error=(getattr(last_error, 'message', None) or '') if last_error else '',
            metadata={key: metadata[key] for key in metadata.keys()} if metadata else {},
        )

    def create_intent(self, amount: Money, metadata: dict, idempotency_key: str | None = None) -> PaymentIntent:
        self._require_key()
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount.minor_units,
                currency=amount.currency.lower(),
                metadata=metadata,
                description=f"Booking {metadata.get('booking_reference', '')}".strip(),
                api_key=self.secret_key,
                idempotency_key=idempotency_key,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe PaymentIntent creation failed: {e}")
            raise PaymentGatewayError(str(e.user_message or e))
        return self._to_intent(intent)

    def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        self._require_key()
        try:
            intent = stripe.PaymentIntent.retrieve(intent_id, api_key=self.secret_key)
        except stripe.StripeError as e:
            logger.error(f"Stripe PaymentIntent {intent_id} retrieval failed: {e}")
            raise PaymentGatewayError(str(e.user_message or e))
        return self._to_intent(intent)

    def refund(
        self, intent_id: str, amount: Money | None = None, idempotency_key: str | None = None,
    ) -> RefundResult:
        self._require_key()
        params = {
            'payment_intent': intent_id,
            'api_key': self.secret_key,
            'idempotency_key': idempotency_key,
        }
        if amount is not None:
            params['amount'] = amount.minor_units
        try:
            refund = stripe.Refund.create(**params)
        except stripe.StripeError as e:
            logger.error(f"Stripe refund for {intent_id} failed: {e}")
            raise PaymentGatewayError(str(e.user_message or e))
        return RefundResult(
            id=refund.id,
            payment_intent_id=intent_id,
            amount=refund.amount,
            status=refund.status,
        )

    def parse_webhook(self, payload: bytes, signature: str | None) -> WebhookEvent:
        if not self.webhook_secret:
            raise PaymentsNotConfigured("Webhook secret is not configured")
        try:
            stripe.Webhook.construct_event(payload, signature or '', self.webhook_secret)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise ValidationFailed("Webhook signature verification failed")
        # signature verified; decode the raw payload as plain dicts
        event = json.loads(payload)
        return _event_from_object(event['id'], event['type'], event['data']['object'])


class SimulatedGateway(PaymentGateway):
    """
    In-memory gateway for development and tests

    Intents are created as requires_payment_method and report succeeded
    once retrieved, mimicking a customer completing checkout. Individual
    intents can be pinned to another status with set_status.
    Webhooks are plain JSON in Stripe's event shape, without signatures.
    """

    def __init__(self):
        self._intents: dict[str, PaymentIntent] = {}
        self._pinned: dict[str, str] = {}
        self._lock = threading.Lock()
        self.refunds: list[RefundResult] = []
        self._refund_keys: dict[str, RefundResult] = {}

    def create_intent(self, amount: Money, metadata: dict, idempotency_key: str | None = None) -> PaymentIntent:
        intent_id = f"pi_sim_{uuid4().hex[:24]}"
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_{uuid4().hex[:12]}",
            amount=amount.minor_units,
            currency=amount.currency,
            status=INTENT_REQUIRES_PAYMENT_METHOD,
            metadata=dict(metadata),
        )
        with self._lock:
            self._intents[intent_id] = intent
        logger.info(f"Simulated payment intent {intent_id} for {amount}")
        return intent

    def set_status(self, intent_id: str, status: str, last_error: str = ''):
        with self._lock:
            self._pinned[intent_id] = status
            intent = self._intents[intent_id]
            self._intents[intent_id] = PaymentIntent(
                id=intent.id,
                client_secret=intent.client_secret,
                amount=intent.amount,
                currency=intent.currency,
                status=status,
                last_error=last_error,
                metadata=intent.metadata,
            )

    def retrieve_intent(self, intent_id: str) -> PaymentIntent:
        with self._lock:
            intent = self._intents.get(intent_id)
            if intent is None:
                raise PaymentGatewayError(f"No such payment intent: {intent_id}")
            if intent_id in self._pinned:
                return intent
            return PaymentIntent(
                id=intent.id,
                client_secret=intent.client_secret,
                amount=intent.amount,
                currency=intent.currency,
                status=INTENT_SUCCEEDED,
                payment_method='card',
                metadata=intent.metadata,
            )

    def refund(
        self, intent_id: str, amount: Money | None = None, idempotency_key: str | None = None,
    ) -> RefundResult:
        with self._lock:
            intent = self._intents.get(intent_id)
            if intent is None:
                raise PaymentGatewayError(f"No such payment intent: {intent_id}")
            if idempotency_key in self._refund_keys:
                logger.info(f"Simulated refund replayed for key {idempotency_key}")
                return self._refund_keys[idempotency_key]
            result = RefundResult(
                id=f"re_sim_{uuid4().hex[:24]}",
                payment_intent_id=intent_id,
                amount=amount.minor_units if amount is not None else intent.amount,
                status='succeeded',
            )
            self.refunds.append(result)
            if idempotency_key:
                self._refund_keys[idempotency_key] = result
        logger.info(f"Simulated refund {result.id} of {result.amount} for {intent_id}")
        return result

    def parse_webhook(self, payload: bytes, signature: str | None) -> WebhookEvent:
        try:
            event = json.loads(payload)
            return _event_from_object(event['id'], event['type'], event['data']['object'])
        except (ValueError, KeyError, TypeError):
            raise ValidationFailed("Malformed webhook payload")
