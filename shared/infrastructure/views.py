"""
Base API view

Views stay thin: they build the RequestContext (identity from the
authentication class, tenant from the tenant resolver), validate request
shape with a serializer and call one application handler.
"""

from __future__ import annotations

from rest_framework import permissions, serializers  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.access.context import RequestContext
from apps.users.domain.entities import Identity
from shared.application.repository import PageRequest
from shared.domain.exceptions import ValidationFailed

TENANT_STRICT = 'strict'
TENANT_OPTIONAL = 'optional'


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


class ContextAPIView(APIView):
    # access decisions are made by the access control engine, not DRF
    permission_classes = [permissions.AllowAny]
    tenant_mode: str | None = TENANT_OPTIONAL

    @property
    def container(self):
        from config.container import get_container

        return get_container()

    def get_tenant_mode(self, request) -> str | None:
        return self.tenant_mode

    def request_context(self, request) -> RequestContext:
        identity = request.user if isinstance(request.user, Identity) else None
        tenant = None
        mode = self.get_tenant_mode(request)
        if mode is not None:
            tenant = self.container.tenant_resolver.resolve_request(request, strict=mode == TENANT_STRICT)
        return RequestContext(identity=identity, tenant=tenant)

    def validated(self, serializer_class, data) -> dict:
        serializer = serializer_class(data=data)
        if not serializer.is_valid():
            raise ValidationFailed(details=serializer.errors)
        return serializer.validated_data

    def page_request(self, request, default_limit: int = 20, order_by: str = '-created_at') -> PageRequest:
        params = self.validated(PageQuerySerializer, request.query_params)
        return PageRequest(
            page=params['page'],
            limit=params.get('limit') or default_limit,
            order_by=order_by,
        )
