"""
Builders for the test suites

Every helper writes straight into the stores of the container it is given,
so a test reads as a list of the tenants, users and attractions it needs.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from django.contrib.auth.hashers import make_password  # type: ignore
from django.core.files.storage import InMemoryStorage  # type: ignore

from apps.attractions.domain.entities import Attraction, AttractionStatus, PricingOption
from apps.bookings.domain.entities import Quantities
from apps.bookings.domain.pricing import RequestedItem
from apps.notifications.services import Notifier
from apps.notifications.tickets import TicketRenderer, TicketStore
from apps.payments.gateway import SimulatedGateway
from apps.tenants.domain.entities import Tenant, TenantStatus
from apps.users.domain.entities import Identity, Role, User, UserStatus
from apps.users.identity import issue_access_token
from config.container import Container, build_in_memory_container

DEFAULT_OPTIONS = (
    PricingOption(id='opt-adult', name='Adult', price=Decimal('50.00')),
    PricingOption(id='opt-vip', name='VIP', price=Decimal('120.00')),
)


def make_tenant(container, tenant_id: str = 'tenant-1', **fields) -> Tenant:
    fields.setdefault('slug', tenant_id)
    fields.setdefault('name', tenant_id.replace('-', ' ').title())
    fields.setdefault('status', TenantStatus.ACTIVE)
    tenant = Tenant(id=tenant_id, **fields)
    container.tenant_repo.add(tenant)
    return tenant


def make_user(
    container,
    role: Role = Role.CUSTOMER,
    email: str | None = None,
    tenants: Iterable[str] = (),
    status: UserStatus = UserStatus.ACTIVE,
    password: str | None = None,
    **fields,
) -> User:
    user = User(
        email=email or f"{role.value}-{container.user_repo.count({}) + 1}@example.com",
        role=role,
        status=status,
        assigned_tenants=list(tenants),
        password_hash=make_password(password) if password else '',
        **fields,
    )
    container.user_repo.add(user)
    return user


def make_attraction(
    container,
    tenant_ids: Iterable[str] = ('tenant-1',),
    options: Iterable[PricingOption] = DEFAULT_OPTIONS,
    **fields,
) -> Attraction:
    fields.setdefault('title', 'Harbour Cruise')
    fields.setdefault('status', AttractionStatus.ACTIVE)
    attraction = Attraction(
        tenant_ids=list(tenant_ids),
        pricing_options=list(options),
        **fields,
    )
    container.attraction_repo.add(attraction)
    return attraction


def identity_of(user: User) -> Identity:
    return user.to_identity()


def bearer(user: User) -> str:
    return f"Bearer {issue_access_token(user)}"


def requested(
    option_id: str = 'opt-adult',
    date: str = '2030-06-01',
    adults: int = 1,
    children: int = 0,
    infants: int = 0,
    **cosmetic,
) -> RequestedItem:
    return RequestedItem(
        option_id=option_id,
        date=date,
        quantities=Quantities(adults=adults, children=children, infants=infants),
        **cosmetic,
    )


class RecordingNotifier(Notifier):
    """Keeps every message instead of sending it"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.confirmations: list = []
        self.password_resets: list = []
        self.invitations: list = []

    def send_booking_confirmation(self, email, details, ticket_bytes=None) -> bool:
        self.confirmations.append((email, details, ticket_bytes))
        return not self.fail

    def send_password_reset(self, email, name, reset_url) -> bool:
        self.password_resets.append((email, name, reset_url))
        return not self.fail

    def send_invitation(self, email, inviter_name, role, accept_url) -> bool:
        self.invitations.append((email, inviter_name, role, accept_url))
        return not self.fail


class StaticTicketRenderer(TicketRenderer):
    def __init__(self, content: bytes = b'%PDF-1.4 test ticket', fail: bool = False):
        self.content = content
        self.fail = fail
        self.rendered: list = []

    def render_ticket(self, details) -> bytes:
        if self.fail:
            raise RuntimeError("ticket renderer unavailable")
        self.rendered.append(details.reference)
        return self.content


def in_memory_container(notifier=None, renderer=None, gateway=None, **options) -> Container:
    """In-memory container with recording side-effect adapters"""
    return build_in_memory_container(
        gateway=gateway or SimulatedGateway(),
        notifier=notifier or RecordingNotifier(),
        renderer=renderer or StaticTicketRenderer(),
        ticket_store=TicketStore('tickets', storage=InMemoryStorage()),
        **options,
    )
