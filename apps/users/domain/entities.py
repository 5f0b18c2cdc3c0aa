"""
Identity Domain Entities

- Role: the seven platform roles
- UserStatus: account lifecycle; only ACTIVE accounts authenticate
- User: persisted account aggregate
- Identity: the verified caller passed into every core operation
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet

from shared.application.repository import Patch
from shared.domain.base import Aggregate, ValueObject


class Role(Enum):
    SUPER_ADMIN = 'super-admin'
    BRAND_ADMIN = 'brand-admin'
    MANAGER = 'manager'
    EDITOR = 'editor'
    VIEWER = 'viewer'
    CUSTOMER = 'customer'
    GUEST = 'guest'


class UserStatus(Enum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'
    PENDING = 'pending'
    SUSPENDED = 'suspended'


@dataclass(frozen=True)
class Identity(ValueObject):
    """
    Verified caller

    assigned_tenants is only meaningful for the admin roles; customers and
    guests always carry an empty set.
    """
    id: str
    role: Role
    status: UserStatus = UserStatus.ACTIVE
    assigned_tenants: FrozenSet[str] = frozenset()
    email: str = ''

    # DRF checks request.user.is_authenticated
    is_authenticated = True

    def __post_init__(self):
        object.__setattr__(self, 'assigned_tenants', frozenset(self.assigned_tenants))


@dataclass(kw_only=True, eq=False)
class User(Aggregate):
    """
    User Aggregate Root

    Accounts are never deleted; deactivation flips status to INACTIVE.
    Invitation and password reset tokens are stored hashed.
    """
    email: str
    role: Role = Role.CUSTOMER
    status: UserStatus = UserStatus.ACTIVE
    first_name: str = ''
    last_name: str = ''
    phone: str = ''
    password_hash: str = ''
    assigned_tenants: list = field(default_factory=list)
    invitation_token_hash: str = ''
    invitation_expires_at: datetime | None = None
    reset_token_hash: str = ''
    reset_expires_at: datetime | None = None
    invited_by: str | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email

    def to_identity(self) -> Identity:
        return Identity(
            id=self.id,
            role=self.role,
            status=self.status,
            assigned_tenants=frozenset(self.assigned_tenants),
            email=self.email,
        )

    def __str__(self):
        return f"User {self.email} ({self.role.value}, {self.status.value})"


@dataclass(frozen=True)
class UserPatch(Patch):
    """Mutable fields of a User"""
    status: UserStatus | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    password_hash: str | None = None
    invitation_token_hash: str | None = None
    invitation_expires_at: datetime | None = None
    reset_token_hash: str | None = None
    reset_expires_at: datetime | None = None
