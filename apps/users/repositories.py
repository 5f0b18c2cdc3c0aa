"""Django store for user accounts."""

from __future__ import annotations

from apps.users.domain.entities import Role, User, UserStatus
from apps.users.models import User as UserModel
from shared.infrastructure.django_repository import DjangoRepository


class DjangoUserRepository(DjangoRepository[User]):
    model = UserModel
    field_map = {
        'assigned_tenants__contains': 'assigned_tenants__id',
        'assigned_tenants__overlap': 'assigned_tenants__id__in',
    }
    relation_fields = {'assigned_tenants': 'assigned_tenants'}
    distinct = True

    def base_queryset(self):
        return UserModel.objects.prefetch_related('assigned_tenants')

    def to_domain(self, row: UserModel) -> User:
        return User(
            id=row.id,
            email=row.email,
            role=Role(row.role),
            status=UserStatus(row.status),
            first_name=row.first_name,
            last_name=row.last_name,
            phone=row.phone,
            password_hash=row.password_hash,
            assigned_tenants=sorted(t.id for t in row.assigned_tenants.all()),
            invitation_token_hash=row.invitation_token_hash,
            invitation_expires_at=row.invitation_expires_at,
            reset_token_hash=row.reset_token_hash,
            reset_expires_at=row.reset_expires_at,
            invited_by=row.invited_by,
            version=row.version,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def to_fields(self, entity: User) -> dict:
        return {
            'id': entity.id,
            'email': entity.email,
            'role': entity.role.value,
            'status': entity.status.value,
            'first_name': entity.first_name,
            'last_name': entity.last_name,
            'phone': entity.phone,
            'password_hash': entity.password_hash,
            'invitation_token_hash': entity.invitation_token_hash,
            'invitation_expires_at': entity.invitation_expires_at,
            'reset_token_hash': entity.reset_token_hash,
            'reset_expires_at': entity.reset_expires_at,
            'invited_by': entity.invited_by,
            'version': entity.version,
            'created_at': entity.created_at,
            'updated_at': entity.updated_at,
        }
