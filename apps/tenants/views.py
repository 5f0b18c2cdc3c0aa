"""API views for tenants."""

from __future__ import annotations

from rest_framework import status  # type: ignore

from shared.infrastructure.api import paginated, success
from shared.infrastructure.views import ContextAPIView

from .application.services import CreateTenantCommand
from .domain.entities import TenantPatch
from .serializers import (
    PublicTenantSerializer,
    TenantCreateSerializer,
    TenantListQuerySerializer,
    TenantSerializer,
    TenantStatsQuerySerializer,
    TenantUpdateSerializer,
    tenant_detail,
)


class TenantListView(ContextAPIView):
    tenant_mode = None

    def get(self, request):
        params = self.validated(TenantListQuerySerializer, request.query_params)
        page = self.container.tenant_queries.list_tenants(
            self.request_context(request),
            status=params.get('status'),
            search=params['search'].strip(),
            page=self.page_request(request, order_by='name'),
        )
        return paginated(page, TenantSerializer(page.items, many=True).data)

    def post(self, request):
        data = self.validated(TenantCreateSerializer, request.data)
        tenant = self.container.tenants.create(self.request_context(request), CreateTenantCommand(**data))
        return success(
            TenantSerializer(tenant).data,
            message="Tenant created successfully",
            status_code=status.HTTP_201_CREATED,
        )


class TenantDetailView(ContextAPIView):
    tenant_mode = None

    def get(self, request, tenant_id: str):
        detail = self.container.tenant_queries.get_tenant(self.request_context(request), tenant_id)
        return success(tenant_detail(detail))

    def patch(self, request, tenant_id: str):
        data = self.validated(TenantUpdateSerializer, request.data)
        tenant = self.container.tenants.update(self.request_context(request), tenant_id, TenantPatch(**data))
        return success(TenantSerializer(tenant).data, message="Tenant updated successfully")

    def delete(self, request, tenant_id: str):
        self.container.tenants.deactivate(self.request_context(request), tenant_id)
        return success(None, message="Tenant deactivated successfully")


class TenantSettingsView(ContextAPIView):
    tenant_mode = None

    def patch(self, request, tenant_id: str):
        values = request.data if isinstance(request.data, dict) else {}
        tenant = self.container.tenants.update_settings(self.request_context(request), tenant_id, values)
        return success(TenantSerializer(tenant).data, message="Settings updated successfully")


class PublicTenantListView(ContextAPIView):
    tenant_mode = None

    def get(self, request):
        page = self.container.tenant_queries.public_tenants(self.page_request(request, default_limit=100, order_by='name'))
        return paginated(page, PublicTenantSerializer(page.items, many=True).data)


class PublicTenantDetailView(ContextAPIView):
    tenant_mode = None

    def get(self, request, id_or_slug: str):
        tenant = self.container.tenant_queries.public_tenant(id_or_slug)
        return success(PublicTenantSerializer(tenant).data)


class TenantStatsView(ContextAPIView):
    tenant_mode = None

    def get(self, request, tenant_id: str):
        params = self.validated(TenantStatsQuerySerializer, request.query_params)
        stats = self.container.tenant_queries.stats(
            self.request_context(request), tenant_id, params['period'],
        )
        return success(stats.to_dict())
