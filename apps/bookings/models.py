"""Booking storage model."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.domain.entities import BookingStatus, PaymentStatus


class Booking(models.Model):
    """
    Reservation of an attraction.

    items holds the priced line items exactly as the pricing engine produced
    them; money fields are fixed-point with two decimal places.
    """

    STATUS_CHOICES = [(s.value, s.name.title()) for s in BookingStatus]
    PAYMENT_STATUS_CHOICES = [(s.value, s.name.title()) for s in PaymentStatus]

    id = models.CharField(primary_key=True, max_length=32)
    reference = models.CharField(max_length=24, unique=True)
    user = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bookings",
    )
    tenant = models.ForeignKey(
        "tenants.Tenant",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    attraction = models.ForeignKey(
        "attractions.Attraction",
        on_delete=models.PROTECT,
        related_name="bookings",
    )

    items = models.JSONField(default=list)
    guest_details = models.JSONField(null=True, blank=True)
    promo_code = models.CharField(max_length=50, blank=True)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    fees = models.DecimalField(max_digits=12, decimal_places=2)
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3)

    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=BookingStatus.PENDING.value, db_index=True
    )
    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PaymentStatus.PENDING.value, db_index=True
    )
    payment_intent_id = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    payment_method = models.CharField(max_length=50, null=True, blank=True)
    ticket_url = models.CharField(max_length=500, null=True, blank=True)
    cancellation_reason = models.TextField(blank=True)

    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    refunded_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["tenant", "status"]),
            models.Index(fields=["user", "status"]),
        ]

    def __str__(self) -> str:
        return f"{self.reference} ({self.status}/{self.payment_status})"
