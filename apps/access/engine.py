"""
Access Control Engine

Every authorization decision goes through the predicates below:

- has_tenant_access: may the identity administer this tenant?
- can_access_owned_resource: may the identity act on a resource owned by a
  user and a tenant?
- scope_filter: which tenants (or which owner) a list or aggregate query
  must be narrowed to
- can_manage_users: may the identity grant a role over a set of tenants?
- has_any_tenant_access: may the identity administer a resource shared by
  several tenants?

Role comparisons live only in this module. The ensure_* helpers turn a
failed predicate into Unauthenticated or Forbidden and write the denial to
the audit log.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet

import structlog

from apps.users.domain.entities import Identity, Role
from shared.domain.exceptions import Forbidden, Unauthenticated

audit_logger = structlog.get_logger("apps.access.audit")

ADMIN_ROLES: FrozenSet[Role] = frozenset({
    Role.SUPER_ADMIN,
    Role.BRAND_ADMIN,
    Role.MANAGER,
    Role.EDITOR,
    Role.VIEWER,
})

SCOPED_ADMIN_ROLES: FrozenSet[Role] = ADMIN_ROLES - {Role.SUPER_ADMIN}

# may create and edit attractions
CATALOG_EDITOR_ROLES: FrozenSet[Role] = frozenset({
    Role.SUPER_ADMIN,
    Role.BRAND_ADMIN,
    Role.MANAGER,
    Role.EDITOR,
})

# may also archive them
CATALOG_MANAGER_ROLES: FrozenSet[Role] = CATALOG_EDITOR_ROLES - {Role.EDITOR}


def is_super_admin(identity: Identity | None) -> bool:
    return identity is not None and identity.role == Role.SUPER_ADMIN


def is_admin(identity: Identity | None) -> bool:
    return identity is not None and identity.role in ADMIN_ROLES


def has_role(identity: Identity | None, roles: FrozenSet[Role]) -> bool:
    return identity is not None and identity.role in roles


def has_any_tenant_access(identity: Identity | None, tenant_ids) -> bool:
    """For resources shared by several tenants: reaching one of them is enough."""
    return any(has_tenant_access(identity, t) for t in tenant_ids) or is_super_admin(identity)


def has_tenant_access(identity: Identity | None, tenant_id: str | None) -> bool:
    """Super admins reach every tenant; scoped admins only their assigned ones."""
    if identity is None:
        return False
    if identity.role == Role.SUPER_ADMIN:
        return True
    if identity.role not in SCOPED_ADMIN_ROLES or not tenant_id:
        return False
    return tenant_id in identity.assigned_tenants


def can_access_owned_resource(
    identity: Identity | None,
    owner_user_id: str | None = None,
    tenant_id: str | None = None,
) -> bool:
    """Owners reach their own resources; admins also reach their tenants' resources."""
    if identity is None:
        return False
    if identity.role == Role.SUPER_ADMIN:
        return True

    is_owner = owner_user_id is not None and owner_user_id == identity.id
    if identity.role in SCOPED_ADMIN_ROLES:
        return is_owner or has_tenant_access(identity, tenant_id)
    return is_owner


class ScopeKind(Enum):
    ALL = 'all'
    TENANTS = 'tenants'
    SELF = 'self'
    PUBLIC = 'public'


@dataclass(frozen=True)
class Scope:
    """
    Result of scope_filter

    TENANTS with an empty tenant set matches nothing; it is never widened
    to an unscoped query.
    """

    kind: ScopeKind
    tenant_ids: FrozenSet[str] = field(default_factory=frozenset)
    user_id: str | None = None

    @property
    def is_admin_scope(self) -> bool:
        return self.kind in (ScopeKind.ALL, ScopeKind.TENANTS)

    @property
    def is_empty(self) -> bool:
        return self.kind == ScopeKind.TENANTS and not self.tenant_ids

    def narrow_to_tenant(self, tenant_id: str) -> 'Scope':
        """Restrict an admin scope to a single tenant"""
        if self.kind == ScopeKind.ALL:
            return Scope(ScopeKind.TENANTS, frozenset({tenant_id}))
        if self.kind == ScopeKind.TENANTS:
            return Scope(ScopeKind.TENANTS, self.tenant_ids & {tenant_id})
        return self

    def filters(self, tenant_field: str = 'tenant_id', owner_field: str = 'user_id', many: bool = False) -> dict:
        """
        Store filters for this scope

        many=True is for resources that belong to several tenants
        (tenant_field holds a collection).
        """
        if self.kind == ScopeKind.ALL:
            return {}
        if self.kind == ScopeKind.TENANTS:
            lookup = 'overlap' if many else 'in'
            return {f'{tenant_field}__{lookup}': sorted(self.tenant_ids)}
        if self.kind == ScopeKind.SELF:
            return {owner_field: self.user_id}
        return {}


def scope_filter(identity: Identity | None) -> Scope:
    if identity is None:
        return Scope(ScopeKind.PUBLIC)
    if identity.role == Role.SUPER_ADMIN:
        return Scope(ScopeKind.ALL)
    if identity.role in SCOPED_ADMIN_ROLES:
        return Scope(ScopeKind.TENANTS, frozenset(identity.assigned_tenants))
    return Scope(ScopeKind.SELF, user_id=identity.id)


def _deny(identity: Identity | None, operation: str, message: str, **details):
    audit_logger.warning(
        "access_denied",
        operation=operation,
        user_id=identity.id if identity else None,
        role=identity.role.value if identity else None,
        **details,
    )
    raise Forbidden(message)


def require_identity(identity: Identity | None, operation: str = '') -> Identity:
    if identity is None:
        audit_logger.info("unauthenticated", operation=operation)
        raise Unauthenticated()
    return identity


def ensure_tenant_access(
    identity: Identity | None,
    tenant_id: str | None,
    operation: str,
    message: str = 'Access denied to this tenant',
) -> Identity:
    identity = require_identity(identity, operation)
    if not has_tenant_access(identity, tenant_id):
        _deny(identity, operation, message, tenant_id=tenant_id)
    return identity


def ensure_role(
    identity: Identity | None,
    roles: FrozenSet[Role],
    operation: str,
    message: str = 'Insufficient permissions',
) -> Identity:
    identity = require_identity(identity, operation)
    if not has_role(identity, roles):
        _deny(identity, operation, message)
    return identity


def ensure_super_admin(identity: Identity | None, operation: str) -> Identity:
    return ensure_role(identity, frozenset({Role.SUPER_ADMIN}), operation, 'Super admin access required')


def ensure_shared_resource_access(
    identity: Identity | None,
    tenant_ids,
    operation: str,
    message: str = 'Not authorized to access this resource',
) -> Identity:
    identity = require_identity(identity, operation)
    if not has_any_tenant_access(identity, tenant_ids):
        _deny(identity, operation, message, tenant_ids=sorted(tenant_ids))
    return identity


def ensure_owned_resource_access(
    identity: Identity | None,
    owner_user_id: str | None,
    tenant_id: str | None,
    operation: str,
    message: str = 'Not authorized to access this resource',
) -> Identity:
    identity = require_identity(identity, operation)
    if not can_access_owned_resource(identity, owner_user_id, tenant_id):
        _deny(identity, operation, message, owner_user_id=owner_user_id, tenant_id=tenant_id)
    return identity


def admin_scope(identity: Identity | None, tenant_id: str | None, operation: str) -> Scope:
    """
    Scope for admin list/aggregate endpoints

    Non-admin callers are forbidden. A tenant from the request context
    narrows the scope, and requires tenant access.
    """
    identity = require_identity(identity, operation)
    scope = scope_filter(identity)
    if not scope.is_admin_scope:
        _deny(identity, operation, 'Admin access required')
    if tenant_id:
        ensure_tenant_access(identity, tenant_id, operation)
        scope = scope.narrow_to_tenant(tenant_id)
    return scope


def can_manage_users(identity: Identity | None, role: Role, tenant_ids) -> bool:
    """
    May the identity grant role over tenant_ids (invite, deactivate)?

    Super admins manage everyone. Brand admins manage scoped admin roles
    inside tenants they have access to. Nobody else manages users.
    """
    if identity is None:
        return False
    if identity.role == Role.SUPER_ADMIN:
        return True
    if identity.role != Role.BRAND_ADMIN or role not in SCOPED_ADMIN_ROLES:
        return False
    tenant_ids = set(tenant_ids)
    return bool(tenant_ids) and all(has_tenant_access(identity, t) for t in tenant_ids)


def ensure_can_manage_users(identity: Identity | None, role: Role, tenant_ids, operation: str) -> Identity:
    identity = require_identity(identity, operation)
    if not can_manage_users(identity, role, tenant_ids):
        _deny(
            identity, operation, 'Not authorized to manage this user',
            target_role=role.value, tenant_ids=sorted(tenant_ids),
        )
    return identity
