"""Django store for bookings."""

from __future__ import annotations

from apps.bookings.domain.entities import (
    Booking,
    BookingStatus,
    GuestDetails,
    LineItem,
    PaymentStatus,
)
from apps.bookings.models import Booking as BookingModel
from shared.infrastructure.django_repository import DjangoRepository


class DjangoBookingRepository(DjangoRepository[Booking]):
    """
    The unique index on reference turns a colliding insert into
    DuplicateReference; the create handler regenerates and retries.
    """

    model = BookingModel

    def to_domain(self, row: BookingModel) -> Booking:
        return Booking(
            id=row.id,
            reference=row.reference,
            user_id=row.user_id,
            tenant_id=row.tenant_id,
            attraction_id=row.attraction_id,
            items=[LineItem.from_dict(item) for item in row.items],
            guest_details=GuestDetails(**row.guest_details) if row.guest_details else None,
            promo_code=row.promo_code,
            subtotal=row.subtotal,
            fees=row.fees,
            discount=row.discount,
            total=row.total,
            currency=row.currency,
            status=BookingStatus(row.status),
            payment_status=PaymentStatus(row.payment_status),
            payment_intent_id=row.payment_intent_id,
            payment_method=row.payment_method,
            ticket_url=row.ticket_url,
            cancellation_reason=row.cancellation_reason,
            confirmed_at=row.confirmed_at,
            cancelled_at=row.cancelled_at,
            refunded_at=row.refunded_at,
            completed_at=row.completed_at,
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_fields(self, entity: Booking) -> dict:
        return {
            'id': entity.id,
            'reference': entity.reference,
            'user_id': entity.user_id,
            'tenant_id': entity.tenant_id,
            'attraction_id': entity.attraction_id,
            'items': [item.to_dict() for item in entity.items],
            'guest_details': entity.guest_details.to_dict() if entity.guest_details else None,
            'promo_code': entity.promo_code,
            'subtotal': entity.subtotal,
            'fees': entity.fees,
            'discount': entity.discount,
            'total': entity.total,
            'currency': entity.currency,
            'status': entity.status.value,
            'payment_status': entity.payment_status.value,
            'payment_intent_id': entity.payment_intent_id,
            'version': entity.version,
            'created_at': entity.created_at,
            'updated_at': entity.updated_at,
        }
