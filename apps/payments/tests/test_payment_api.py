"""API tests for payment endpoints."""

from __future__ import annotations

import json

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.access.context import RequestContext
from apps.bookings.application.command_handlers import CreateBookingCommand
from apps.users.domain.entities import Role
from config.container import set_container
from shared.testing import (
    bearer,
    in_memory_container,
    make_attraction,
    make_tenant,
    make_user,
    requested,
)


class PaymentAPITests(APITestCase):
    def setUp(self) -> None:
        self.container = in_memory_container()
        set_container(self.container)
        make_tenant(self.container, 'tenant-1')
        attraction = make_attraction(self.container)
        self.customer = make_user(self.container)
        self.booking = self.container.create_booking.handle(
            RequestContext(identity=self.customer.to_identity()),
            CreateBookingCommand(attraction_id=attraction.id, items=[requested()]),
        )
        self.client.credentials(HTTP_AUTHORIZATION=bearer(self.customer))

    def tearDown(self) -> None:
        set_container(None)

    def test_create_intent_then_status(self) -> None:
        response = self.client.post(
            reverse("payment-create-intent"), {"booking_id": self.booking.id}, format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["data"]["client_secret"])

        response = self.client.get(reverse("payment-status", args=[self.booking.id]))
        self.assertEqual(response.data["data"]["payment_status"], "processing")
        self.assertEqual(response.data["data"]["booking_status"], "pending")

    def test_second_intent_conflicts(self) -> None:
        url = reverse("payment-create-intent")
        self.client.post(url, {"booking_id": self.booking.id}, format="json")
        response = self.client.post(url, {"booking_id": self.booking.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"], "Payment already processed")

    def test_missing_booking_id(self) -> None:
        response = self.client.post(reverse("payment-create-intent"), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("booking_id", response.data["details"])

    def test_webhook_needs_no_bearer_token(self) -> None:
        self.client.post(reverse("payment-create-intent"), {"booking_id": self.booking.id}, format="json")
        intent_id = self.container.booking_repo.get(self.booking.id).payment_intent_id
        self.client.credentials()

        body = json.dumps({
            "id": "evt_1",
            "type": "payment_intent.succeeded",
            "data": {"object": {"id": intent_id}},
        })
        response = self.client.post(reverse("payment-webhook"), body, content_type="application/json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["data"], {"received": True, "outcome": "processed"})
        self.assertEqual(self.container.booking_repo.get(self.booking.id).status.value, "confirmed")

    def test_refund_requires_tenant_admin(self) -> None:
        self.client.post(reverse("payment-create-intent"), {"booking_id": self.booking.id}, format="json")
        self.client.post(reverse("payment-confirm"), {"booking_id": self.booking.id}, format="json")
        url = reverse("payment-refund", args=[self.booking.id])

        response = self.client.post(url, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        admin = make_user(self.container, Role.BRAND_ADMIN, tenants=["tenant-1"])
        self.client.credentials(HTTP_AUTHORIZATION=bearer(admin))
        response = self.client.post(url, {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["message"], "Payment refunded")
        self.assertEqual(response.data["data"]["status"], "refunded")
