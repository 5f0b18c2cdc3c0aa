"""
Tenant Resolver

Determines which tenant a request is made for, independently of who is
calling. Identifier sources, first match wins:

1. X-Tenant-ID header
2. tenantId query parameter
3. host subdomain of a sub.domain.tld host (strict mode only; www, api and
   localhost are ignored)

An identifier may be a tenant id, slug, domain or custom domain, and only
active tenants resolve.
"""

from __future__ import annotations

import logging
from typing import Mapping

from apps.tenants.domain.entities import Tenant, TenantStatus
from shared.domain.exceptions import NotFound

logger = logging.getLogger(__name__)

TENANT_HEADER = 'HTTP_X_TENANT_ID'
TENANT_QUERY_PARAM = 'tenantId'
IGNORED_SUBDOMAINS = frozenset({'www', 'api', 'localhost'})


class TenantResolver:
    def __init__(self, tenant_repo):
        self.tenant_repo = tenant_repo

    @staticmethod
    def identifier_from(meta: Mapping[str, str], query: Mapping[str, str], host: str = '', use_host: bool = True) -> str | None:
        header = (meta.get(TENANT_HEADER) or '').strip()
        if header:
            return header
        param = (query.get(TENANT_QUERY_PARAM) or '').strip()
        if param:
            return param
        if use_host and host:
            labels = host.split(':')[0].lower().split('.')
            # only sub.domain.tld carries a subdomain
            if len(labels) > 2 and labels[0] and not labels[0].isdigit() and labels[0] not in IGNORED_SUBDOMAINS:
                return labels[0]
        return None

    def lookup(self, identifier: str, include_custom_domain: bool = True) -> Tenant | None:
        tenant = self.tenant_repo.get(identifier)
        if tenant is not None:
            return tenant if tenant.is_active else None

        fields = ['slug', 'domain']
        if include_custom_domain:
            fields.append('custom_domain')
        for field_name in fields:
            tenant = self.tenant_repo.first({field_name: identifier, 'status': TenantStatus.ACTIVE})
            if tenant is not None:
                return tenant
        return None

    def resolve(self, meta: Mapping[str, str], query: Mapping[str, str], host: str = '') -> Tenant | None:
        """
        Strict mode

        Returns None when the request names no tenant.

        Raises:
            NotFound: the request names a tenant that is unknown or not active
        """
        identifier = self.identifier_from(meta, query, host)
        if identifier is None:
            return None
        tenant = self.lookup(identifier)
        if tenant is None:
            logger.info(f"Tenant '{identifier}' not found")
            raise NotFound("Tenant not found")
        return tenant

    def resolve_optional(self, meta: Mapping[str, str], query: Mapping[str, str]) -> Tenant | None:
        """Optional mode: explicit identifiers only, unknown ones are ignored"""
        identifier = self.identifier_from(meta, query, use_host=False)
        if identifier is None:
            return None
        return self.lookup(identifier, include_custom_domain=False)

    def resolve_request(self, request, strict: bool = True) -> Tenant | None:
        if strict:
            return self.resolve(request.META, request.query_params, request.get_host())
        return self.resolve_optional(request.META, request.query_params)
