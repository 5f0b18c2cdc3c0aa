"""
Tenant Queries

Admin listing and detail (scoped by the access engine), per-tenant
statistics, and the public tenant directory (active and coming-soon
tenants only).
"""

from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal
import logging

from apps.access.context import RequestContext
from apps.access.engine import admin_scope, ensure_tenant_access
from apps.attractions.domain.entities import AttractionStatus
from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.tenants.domain.entities import PUBLIC_STATUSES, Tenant, TenantStatus
from shared.application.repository import Page, PageRequest
from shared.domain.base import utcnow
from shared.domain.exceptions import NotFound, ValidationFailed

logger = logging.getLogger(__name__)

PERIODS = {'7d': 7, '30d': 30, '90d': 90}


@dataclass(frozen=True)
class TenantStats:
    tenant_id: str
    period: str
    total_attractions: int
    total_bookings: int
    confirmed_bookings: int
    revenue: Decimal

    def to_dict(self) -> dict:
        return {
            'tenant_id': self.tenant_id,
            'period': self.period,
            'total_attractions': self.total_attractions,
            'total_bookings': self.total_bookings,
            'confirmed_bookings': self.confirmed_bookings,
            'revenue': self.revenue,
        }


@dataclass(frozen=True)
class TenantDetail:
    tenant: Tenant
    total_attractions: int
    total_bookings: int
    total_revenue: Decimal


class TenantQueries:
    def __init__(self, tenant_repo, attraction_repo, booking_repo):
        self.tenant_repo = tenant_repo
        self.attraction_repo = attraction_repo
        self.booking_repo = booking_repo

    def stats(self, context: RequestContext, tenant_id: str, period: str = '30d') -> TenantStats:
        if period not in PERIODS:
            raise ValidationFailed(f"Unsupported period: {period}", {'period': list(PERIODS)})

        tenant = self.tenant_repo.get(tenant_id)
        if tenant is None:
            raise NotFound("Tenant not found")
        ensure_tenant_access(context.identity, tenant.id, 'tenants.stats')

        since = utcnow() - timedelta(days=PERIODS[period])
        bookings = {'tenant_id': tenant.id, 'created_at__gte': since}

        return TenantStats(
            tenant_id=tenant.id,
            period=period,
            total_attractions=self.attraction_repo.count({
                'tenant_ids__contains': tenant.id,
                'status': AttractionStatus.ACTIVE,
            }),
            total_bookings=self.booking_repo.count(bookings),
            confirmed_bookings=self.booking_repo.count({**bookings, 'status': BookingStatus.CONFIRMED}),
            revenue=self.booking_repo.sum('total', {**bookings, 'payment_status': PaymentStatus.SUCCEEDED}),
        )

    # ----- admin -----

    def list_tenants(
        self,
        context: RequestContext,
        status: TenantStatus | None = None,
        search: str = '',
        page: PageRequest | None = None,
    ) -> Page[Tenant]:
        page = page or PageRequest(order_by='name')
        scope = admin_scope(context.identity, None, 'tenants.list')
        if scope.is_empty:
            return Page.empty(page)

        filters = scope.filters(tenant_field='id')
        if status is not None:
            filters['status'] = status
        if search:
            filters['name__icontains'] = search
        return self.tenant_repo.find(filters, page)

    def get_tenant(self, context: RequestContext, tenant_id: str) -> TenantDetail:
        tenant = self.tenant_repo.get(tenant_id)
        if tenant is None:
            raise NotFound("Tenant not found")
        ensure_tenant_access(context.identity, tenant.id, 'tenants.get')

        return TenantDetail(
            tenant=tenant,
            total_attractions=self.attraction_repo.count({
                'tenant_ids__contains': tenant.id,
                'status': AttractionStatus.ACTIVE,
            }),
            total_bookings=self.booking_repo.count({'tenant_id': tenant.id}),
            total_revenue=self.booking_repo.sum('total', {
                'tenant_id': tenant.id, 'payment_status': PaymentStatus.SUCCEEDED,
            }),
        )

    # ----- public directory -----

    def public_tenants(self, page: PageRequest | None = None) -> Page[Tenant]:
        return self.tenant_repo.find(
            {'status__in': sorted(PUBLIC_STATUSES, key=lambda s: s.value)},
            page or PageRequest(order_by='name', limit=100),
        )

    def public_tenant(self, id_or_slug: str) -> Tenant:
        tenant = self.tenant_repo.get(id_or_slug) or self.tenant_repo.first({'slug': id_or_slug})
        if tenant is None or not tenant.is_public:
            raise NotFound("Tenant not found")
        return tenant
