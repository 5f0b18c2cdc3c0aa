"""URL routing for payments."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import (
    ConfirmPaymentView,
    CreatePaymentIntentView,
    PaymentStatusView,
    PaymentWebhookView,
    RefundPaymentView,
)

urlpatterns = [
    path("create-intent/", CreatePaymentIntentView.as_view(), name="payment-create-intent"),
    path("confirm/", ConfirmPaymentView.as_view(), name="payment-confirm"),
    path("webhook/", PaymentWebhookView.as_view(), name="payment-webhook"),
    path("<str:booking_id>/status/", PaymentStatusView.as_view(), name="payment-status"),
    path("<str:booking_id>/refund/", RefundPaymentView.as_view(), name="payment-refund"),
]
