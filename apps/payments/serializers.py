"""Serializers for payments."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from shared.infrastructure.serializers import MoneyField


class BookingReferenceSerializer(serializers.Serializer):
    booking_id = serializers.CharField(max_length=64)


class RefundRequestSerializer(serializers.Serializer):
    amount = MoneyField(required=False, min_value=0)


class IssuedIntentSerializer(serializers.Serializer):
    client_secret = serializers.CharField()
    payment_intent_id = serializers.CharField()
    amount = MoneyField()
    currency = serializers.CharField()


class PaymentStatusSerializer(serializers.Serializer):
    booking_id = serializers.CharField()
    reference = serializers.CharField()
    payment_status = serializers.CharField()
    booking_status = serializers.CharField()
    amount = MoneyField()
    currency = serializers.CharField()
