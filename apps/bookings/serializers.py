"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.application.command_handlers import CreateBookingCommand
from apps.bookings.domain.entities import BookingStatus, GuestDetails, PaymentStatus, Quantities
from apps.bookings.domain.pricing import RequestedItem
from shared.infrastructure.serializers import EnumField, MoneyField


class QuantitiesSerializer(serializers.Serializer):
    adults = serializers.IntegerField(min_value=0, default=0)
    children = serializers.IntegerField(min_value=0, default=0)
    infants = serializers.IntegerField(min_value=0, default=0)

    def validate(self, attrs):  # type: ignore
        if attrs['adults'] + attrs['children'] + attrs['infants'] < 1:
            raise serializers.ValidationError("At least one guest is required.")
        return attrs


class RequestedItemSerializer(serializers.Serializer):
    """
    A line as submitted by the client.

    option_name, unit_price and total_price are accepted but ignored; the
    server prices every line from the catalog.
    """

    option_id = serializers.CharField(max_length=64)
    date = serializers.DateField()
    time = serializers.CharField(max_length=10, required=False, allow_null=True, allow_blank=True)
    quantities = QuantitiesSerializer()
    option_name = serializers.CharField(required=False, allow_blank=True)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)


class GuestDetailsSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True, default='')
    country = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    special_requests = serializers.CharField(required=False, allow_blank=True, default='')


class BookingCreateSerializer(serializers.Serializer):
    attraction_id = serializers.CharField(max_length=64)
    items = RequestedItemSerializer(many=True, allow_empty=False)
    guest_details = GuestDetailsSerializer(required=False, allow_null=True)
    promo_code = serializers.CharField(max_length=50, required=False, allow_blank=True, default='')

    def to_command(self) -> CreateBookingCommand:
        data = self.validated_data
        guest = data.get('guest_details')
        return CreateBookingCommand(
            attraction_id=data['attraction_id'],
            items=[
                RequestedItem(
                    option_id=item['option_id'],
                    date=item['date'].isoformat(),
                    time=item.get('time') or None,
                    quantities=Quantities(**item['quantities']),
                    option_name=item.get('option_name'),
                    unit_price=item.get('unit_price'),
                    total_price=item.get('total_price'),
                )
                for item in data['items']
            ],
            guest_details=GuestDetails(**guest) if guest else None,
            promo_code=data['promo_code'],
        )


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='', max_length=500)


class BookingListQuerySerializer(serializers.Serializer):
    status = EnumField(BookingStatus, required=False)
    search = serializers.CharField(required=False, allow_blank=True, default='')
    created_from = serializers.DateTimeField(required=False)
    created_to = serializers.DateTimeField(required=False)


class MyBookingsQuerySerializer(serializers.Serializer):
    status = EnumField(BookingStatus, required=False)


# ----- read side -----

class QuantitiesReadSerializer(serializers.Serializer):
    adults = serializers.IntegerField()
    children = serializers.IntegerField()
    infants = serializers.IntegerField()


class LineItemSerializer(serializers.Serializer):
    option_id = serializers.CharField()
    option_name = serializers.CharField()
    date = serializers.CharField()
    time = serializers.CharField(allow_null=True)
    quantities = QuantitiesReadSerializer()
    unit_price = MoneyField()
    total_price = MoneyField()


class BookingSerializer(serializers.Serializer):
    id = serializers.CharField()
    reference = serializers.CharField()
    tenant_id = serializers.CharField()
    attraction_id = serializers.CharField()
    user_id = serializers.CharField(allow_null=True)
    items = LineItemSerializer(many=True)
    guest_details = GuestDetailsSerializer(allow_null=True)
    promo_code = serializers.CharField()
    subtotal = MoneyField()
    fees = MoneyField()
    discount = MoneyField()
    total = MoneyField()
    currency = serializers.CharField()
    status = EnumField(BookingStatus)
    payment_status = EnumField(PaymentStatus)
    payment_intent_id = serializers.CharField(allow_null=True)
    ticket_url = serializers.CharField(allow_null=True)
    cancellation_reason = serializers.CharField()
    confirmed_at = serializers.DateTimeField(allow_null=True)
    cancelled_at = serializers.DateTimeField(allow_null=True)
    refunded_at = serializers.DateTimeField(allow_null=True)
    completed_at = serializers.DateTimeField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class TicketSerializer(serializers.Serializer):
    booking_id = serializers.CharField()
    reference = serializers.CharField()
    ticket_url = serializers.CharField(allow_null=True)
    ready = serializers.BooleanField()
