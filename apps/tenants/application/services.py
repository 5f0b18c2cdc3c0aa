"""
Tenant Services

Tenants are created, edited and deactivated by super admins only; they are
never deleted. Tenant admins may edit the presentation settings of the
tenants they have access to, restricted to SETTINGS_FIELDS.
"""

from dataclasses import dataclass, field, replace
from typing import Callable
import logging

from apps.access.context import RequestContext
from apps.access.engine import ensure_super_admin, ensure_tenant_access
from apps.tenants.domain.entities import SETTINGS_FIELDS, Tenant, TenantPatch, TenantStatus
from shared.application.uow import InMemoryUnitOfWork
from shared.domain.exceptions import AlreadyExists, DuplicateReference, NotFound, ValidationFailed

logger = logging.getLogger(__name__)


@dataclass
class CreateTenantCommand:
    slug: str
    name: str
    domain: str = ''
    custom_domain: str = ''
    status: TenantStatus = TenantStatus.PENDING
    reference_prefix: str = ''
    settings: dict = field(default_factory=dict)


class TenantService:
    def __init__(self, tenant_repo, uow_factory: Callable = InMemoryUnitOfWork):
        self.tenant_repo = tenant_repo
        self.uow_factory = uow_factory

    def _get(self, tenant_id: str) -> Tenant:
        tenant = self.tenant_repo.get(tenant_id)
        if tenant is None:
            raise NotFound("Tenant not found")
        return tenant

    def _save(self, tenant: Tenant, patch: TenantPatch) -> Tenant:
        try:
            with self.uow_factory():
                tenant.version = self.tenant_repo.update(tenant.id, tenant.version, patch)
        except DuplicateReference:
            raise AlreadyExists("Tenant with this slug already exists")
        return tenant

    def create(self, context: RequestContext, command: CreateTenantCommand) -> Tenant:
        identity = ensure_super_admin(context.identity, 'tenants.create')
        slug = command.slug.strip().lower()
        if self.tenant_repo.first({'slug': slug}) is not None:
            raise AlreadyExists("Tenant with this slug already exists")

        tenant = Tenant(
            slug=slug,
            name=command.name,
            domain=command.domain,
            custom_domain=command.custom_domain,
            status=command.status,
            reference_prefix=command.reference_prefix.upper(),
            settings=dict(command.settings),
        )
        try:
            with self.uow_factory():
                self.tenant_repo.add(tenant)
        except DuplicateReference:
            raise AlreadyExists("Tenant with this slug already exists")
        logger.info(f"Tenant {tenant.slug} created by {identity.id}")
        return tenant

    def update(self, context: RequestContext, tenant_id: str, patch: TenantPatch) -> Tenant:
        ensure_super_admin(context.identity, 'tenants.update')
        tenant = self._get(tenant_id)
        if patch.slug is not None:
            patch = replace(patch, slug=patch.slug.strip().lower())
            existing = self.tenant_repo.first({'slug': patch.slug})
            if existing is not None and existing.id != tenant.id:
                raise AlreadyExists("Tenant with this slug already exists")
        if patch.reference_prefix is not None:
            patch = replace(patch, reference_prefix=patch.reference_prefix.upper())
        if not patch:
            return tenant

        for name, value in patch.changes().items():
            setattr(tenant, name, value)
        self._save(tenant, patch)
        logger.info(f"Tenant {tenant.slug} updated: {sorted(patch.changes())}")
        return tenant

    def deactivate(self, context: RequestContext, tenant_id: str) -> Tenant:
        ensure_super_admin(context.identity, 'tenants.deactivate')
        tenant = self._get(tenant_id)
        if tenant.status == TenantStatus.INACTIVE:
            return tenant

        tenant.status = TenantStatus.INACTIVE
        self._save(tenant, TenantPatch(status=TenantStatus.INACTIVE))
        logger.info(f"Tenant {tenant.slug} deactivated by {context.user_id}")
        return tenant

    def update_settings(self, context: RequestContext, tenant_id: str, values: dict) -> Tenant:
        """Merge the allow-listed keys of values into the tenant settings"""
        tenant = self._get(tenant_id)
        ensure_tenant_access(context.identity, tenant.id, 'tenants.settings')

        accepted = {key: value for key, value in values.items() if key in SETTINGS_FIELDS}
        if not accepted:
            raise ValidationFailed("No valid fields to update", {'allowed': sorted(SETTINGS_FIELDS)})
        ignored = sorted(set(values) - set(accepted))
        if ignored:
            logger.info(f"Ignoring settings outside the allow-list for tenant {tenant.slug}: {ignored}")

        tenant.settings = {**tenant.settings, **accepted}
        self._save(tenant, TenantPatch(settings=tenant.settings))
        logger.info(f"Settings {sorted(accepted)} updated for tenant {tenant.slug} by {context.user_id}")
        return tenant
