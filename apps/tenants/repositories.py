"""Django store for tenants."""

from __future__ import annotations

from apps.tenants.domain.entities import Tenant, TenantStatus
from apps.tenants.models import Tenant as TenantModel
from shared.infrastructure.django_repository import DjangoRepository


class DjangoTenantRepository(DjangoRepository[Tenant]):
    model = TenantModel

    def to_domain(self, row: TenantModel) -> Tenant:
        return Tenant(
            id=row.id,
            slug=row.slug,
            name=row.name,
            domain=row.domain,
            custom_domain=row.custom_domain,
            status=TenantStatus(row.status),
            reference_prefix=row.reference_prefix,
            settings=row.settings or {},
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_fields(self, entity: Tenant) -> dict:
        return {
            'id': entity.id,
            'slug': entity.slug,
            'name': entity.name,
            'domain': entity.domain,
            'custom_domain': entity.custom_domain,
            'status': entity.status.value,
            'reference_prefix': entity.reference_prefix,
            'settings': entity.settings,
            'version': entity.version,
            'created_at': entity.created_at,
            'updated_at': entity.updated_at,
        }
