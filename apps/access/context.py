"""Explicit request context passed into every core operation."""

from __future__ import annotations

from dataclasses import dataclass

from apps.tenants.domain.entities import Tenant
from apps.users.domain.entities import Identity


@dataclass(frozen=True)
class RequestContext:
    """
    Who is calling, and for which tenant

    Both parts are optional: anonymous callers have no identity, and
    requests without a tenant identifier have no tenant.
    """

    identity: Identity | None = None
    tenant: Tenant | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @property
    def tenant_id(self) -> str | None:
        return self.tenant.id if self.tenant else None

    @property
    def user_id(self) -> str | None:
        return self.identity.id if self.identity else None
