"""API views for payments."""

from __future__ import annotations

from apps.bookings.serializers import BookingSerializer
from apps.payments.serializers import (
    BookingReferenceSerializer,
    IssuedIntentSerializer,
    PaymentStatusSerializer,
    RefundRequestSerializer,
)
from shared.infrastructure.api import success
from shared.infrastructure.views import ContextAPIView


class CreatePaymentIntentView(ContextAPIView):
    tenant_mode = None

    def post(self, request):
        params = self.validated(BookingReferenceSerializer, request.data)
        issued = self.container.issue_intent.handle(self.request_context(request), params['booking_id'])
        return success(IssuedIntentSerializer(issued).data)


class ConfirmPaymentView(ContextAPIView):
    tenant_mode = None

    def post(self, request):
        params = self.validated(BookingReferenceSerializer, request.data)
        booking = self.container.confirm_payment.handle(self.request_context(request), params['booking_id'])
        return success(BookingSerializer(booking).data)


class PaymentWebhookView(ContextAPIView):
    """Provider notifications; authenticated by signature, not by bearer token."""

    authentication_classes = []
    tenant_mode = None

    def post(self, request):
        outcome = self.container.webhooks.handle(
            request.body, request.META.get('HTTP_STRIPE_SIGNATURE'),
        )
        return success({'received': True, 'outcome': outcome})


class PaymentStatusView(ContextAPIView):
    tenant_mode = None

    def get(self, request, booking_id: str):
        view = self.container.payment_queries.status(self.request_context(request), booking_id)
        return success(PaymentStatusSerializer(view).data)


class RefundPaymentView(ContextAPIView):
    tenant_mode = None

    def post(self, request, booking_id: str):
        params = self.validated(RefundRequestSerializer, request.data)
        booking = self.container.refund_payment.handle(
            self.request_context(request), booking_id, params.get('amount'),
        )
        return success(BookingSerializer(booking).data, message="Payment refunded")
