"""Tests for per-tenant statistics."""

from __future__ import annotations

from decimal import Decimal

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.access.context import RequestContext
from apps.bookings.application.command_handlers import CreateBookingCommand
from apps.users.domain.entities import Role
from config.container import set_container
from shared.testing import bearer, in_memory_container, make_attraction, make_tenant, make_user, requested


class TenantStatsTests(APITestCase):
    def setUp(self) -> None:
        self.container = in_memory_container()
        set_container(self.container)
        make_tenant(self.container, 'tenant-1')
        make_tenant(self.container, 'tenant-2')
        attraction = make_attraction(self.container)
        make_attraction(self.container, tenant_ids=('tenant-2',))

        customer = make_user(self.container)
        context = RequestContext(identity=customer.to_identity())
        for _ in range(2):
            booking = self.container.create_booking.handle(
                context, CreateBookingCommand(attraction_id=attraction.id, items=[requested()]),
            )
        self.container.issue_intent.handle(context, booking.id)
        self.container.confirm_payment.handle(context, booking.id)

    def tearDown(self) -> None:
        set_container(None)

    def get(self, user, tenant_id='tenant-1', **params):
        self.client.credentials(HTTP_AUTHORIZATION=bearer(user))
        return self.client.get(reverse("tenant-stats", args=[tenant_id]), params)

    def test_tenant_admin_sees_stats(self) -> None:
        admin = make_user(self.container, Role.VIEWER, tenants=["tenant-1"])
        response = self.get(admin, period="7d")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        data = response.data["data"]
        self.assertEqual(data["period"], "7d")
        self.assertEqual(data["total_attractions"], 1)
        self.assertEqual(data["total_bookings"], 2)
        self.assertEqual(data["confirmed_bookings"], 1)
        self.assertEqual(data["revenue"], Decimal("52.50"))

    def test_admin_of_another_tenant_is_forbidden(self) -> None:
        admin = make_user(self.container, Role.BRAND_ADMIN, tenants=["tenant-2"])
        self.assertEqual(self.get(admin).status_code, status.HTTP_403_FORBIDDEN)

    def test_customer_is_forbidden(self) -> None:
        self.assertEqual(self.get(make_user(self.container)).status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_tenant_and_period(self) -> None:
        admin = make_user(self.container, Role.SUPER_ADMIN)
        self.assertEqual(self.get(admin, "nowhere").status_code, status.HTTP_404_NOT_FOUND)
        response = self.get(admin, period="1y")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["details"], {"period": ["7d", "30d", "90d"]})
