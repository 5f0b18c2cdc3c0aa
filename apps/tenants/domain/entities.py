"""
Tenant Domain Entities

A tenant is an isolated brand/storefront. Presentation fields are opaque
to the core and carried in settings.
"""

from dataclasses import dataclass, field
from enum import Enum

from shared.application.repository import Patch
from shared.domain.base import Aggregate


class TenantStatus(Enum):
    ACTIVE = 'active'
    INACTIVE = 'inactive'
    PENDING = 'pending'
    SUSPENDED = 'suspended'
    COMING_SOON = 'coming_soon'


# listed on the public tenant directory
PUBLIC_STATUSES = frozenset({TenantStatus.ACTIVE, TenantStatus.COMING_SOON})

# presentation settings a tenant admin may edit
SETTINGS_FIELDS = frozenset({
    'contact_info',
    'social_links',
    'payment_settings',
    'seo_settings',
    'theme',
    'fonts',
    'design_mode',
    'tagline',
    'description',
    'logo',
    'logo_dark',
    'favicon',
    'default_currency',
    'default_language',
    'supported_languages',
    'timezone',
})


@dataclass(kw_only=True, eq=False)
class Tenant(Aggregate):
    slug: str
    name: str = ''
    domain: str = ''
    custom_domain: str = ''
    status: TenantStatus = TenantStatus.ACTIVE
    reference_prefix: str = ''
    settings: dict = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.ACTIVE

    @property
    def is_public(self) -> bool:
        return self.status in PUBLIC_STATUSES

    def identifiers(self) -> set:
        """Values a request may use to name this tenant"""
        return {v for v in (self.id, self.slug, self.domain, self.custom_domain) if v}

    def __str__(self):
        return f"Tenant {self.slug} ({self.status.value})"


@dataclass(frozen=True)
class TenantPatch(Patch):
    slug: str | None = None
    name: str | None = None
    domain: str | None = None
    custom_domain: str | None = None
    status: TenantStatus | None = None
    reference_prefix: str | None = None
    settings: dict | None = None
