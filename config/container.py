"""
Composition root

Wires stores, the payment gateway, the notifier and the application
handlers together. Views, the authentication class and Celery tasks get
everything they need from get_container(); tests swap in an in-memory
container with set_container().
"""

from __future__ import annotations

import functools
import logging
from decimal import Decimal
from typing import Callable

from django.conf import settings  # type: ignore

from apps.attractions.application.queries import CatalogQueries
from apps.attractions.application.services import CatalogService
from apps.bookings.application.command_handlers import (
    CancelBookingHandler,
    CompleteBookingHandler,
    CompleteFinishedBookingsHandler,
    CreateBookingHandler,
)
from apps.bookings.application.queries import BookingQueries
from apps.bookings.domain.events import BookingConfirmed
from apps.bookings.domain.pricing import PricingEngine
from apps.notifications.handlers import TicketIssuer, dispatch_ticket_task
from apps.notifications.services import EmailNotifier, Notifier
from apps.notifications.tickets import PdfTicketRenderer, TicketRenderer, TicketStore
from apps.payments.application.handlers import (
    ConfirmPaymentHandler,
    HandleWebhookHandler,
    IssuePaymentIntentHandler,
    PaymentQueries,
    RefundPaymentHandler,
)
from apps.payments.gateway import PaymentGateway, SimulatedGateway, StripeGateway
from apps.reviews.application.queries import ReviewQueries
from apps.reviews.application.services import ReviewService
from apps.tenants.application.queries import TenantQueries
from apps.tenants.application.services import TenantService
from apps.tenants.resolver import TenantResolver
from apps.users.application.services import AccountService
from apps.users.identity import IdentityResolver
from shared.application.message_bus import MessageBus
from shared.application.uow import DjangoUnitOfWork, InMemoryUnitOfWork
from shared.infrastructure.memory import InMemoryRepository

logger = logging.getLogger(__name__)


class Container:
    def __init__(
        self,
        *,
        tenant_repo,
        user_repo,
        attraction_repo,
        destination_repo,
        category_repo,
        review_repo,
        booking_repo,
        gateway: PaymentGateway,
        notifier: Notifier,
        renderer: TicketRenderer,
        ticket_store: TicketStore,
        bus: MessageBus,
        uow_factory: Callable,
        fee_rate: Decimal = Decimal('0.05'),
        reference_prefix: str = 'ATT',
        reference_attempts: int = 5,
        frontend_url: str = 'http://localhost:3000',
        notifications_async: bool = False,
    ):
        self.tenant_repo = tenant_repo
        self.user_repo = user_repo
        self.attraction_repo = attraction_repo
        self.destination_repo = destination_repo
        self.category_repo = category_repo
        self.review_repo = review_repo
        self.booking_repo = booking_repo
        self.gateway = gateway
        self.notifier = notifier
        self.bus = bus
        self.uow_factory = uow_factory

        # identity and tenancy
        self.identity_resolver = IdentityResolver(user_repo)
        self.tenant_resolver = TenantResolver(tenant_repo)
        self.accounts = AccountService(user_repo, tenant_repo, notifier, uow_factory, frontend_url)
        self.tenants = TenantService(tenant_repo, uow_factory)
        self.tenant_queries = TenantQueries(tenant_repo, attraction_repo, booking_repo)

        # catalog
        self.catalog = CatalogQueries(attraction_repo, destination_repo, booking_repo, category_repo)
        self.catalog_admin = CatalogService(
            attraction_repo, destination_repo, category_repo, tenant_repo, uow_factory,
        )

        # reviews
        self.reviews = ReviewService(review_repo, self.catalog, uow_factory)
        self.review_queries = ReviewQueries(review_repo, self.catalog)

        # bookings
        self.create_booking = CreateBookingHandler(
            booking_repo,
            attraction_repo,
            uow_factory,
            pricing=PricingEngine(fee_rate),
            reference_prefix=reference_prefix,
            max_attempts=reference_attempts,
        )
        self.cancel_booking = CancelBookingHandler(booking_repo, gateway, uow_factory)
        self.complete_booking = CompleteBookingHandler(booking_repo, uow_factory)
        self.complete_finished = CompleteFinishedBookingsHandler(booking_repo, uow_factory)
        self.booking_queries = BookingQueries(booking_repo)

        # payments
        self.issue_intent = IssuePaymentIntentHandler(booking_repo, gateway, uow_factory)
        self.confirm_payment = ConfirmPaymentHandler(booking_repo, gateway, uow_factory)
        self.webhooks = HandleWebhookHandler(booking_repo, gateway, uow_factory)
        self.refund_payment = RefundPaymentHandler(booking_repo, gateway, uow_factory)
        self.payment_queries = PaymentQueries(booking_repo)

        # notifications
        self.ticket_issuer = TicketIssuer(
            booking_repo, attraction_repo, user_repo, renderer, ticket_store, notifier, uow_factory,
        )
        if notifications_async:
            bus.register_event_handler(BookingConfirmed, dispatch_ticket_task)
        else:
            bus.register_event_handler(BookingConfirmed, self.ticket_issuer)


def build_gateway() -> PaymentGateway:
    choice = getattr(settings, 'PAYMENTS_GATEWAY', '') or ''
    if choice == 'stripe' or (not choice and settings.STRIPE_SECRET_KEY and not settings.DEBUG):
        return StripeGateway(settings.STRIPE_SECRET_KEY, settings.STRIPE_WEBHOOK_SECRET)
    logger.info("Using simulated payment gateway")
    return SimulatedGateway()


def build_django_container() -> Container:
    from apps.attractions.repositories import (
        DjangoAttractionRepository,
        DjangoCategoryRepository,
        DjangoDestinationRepository,
    )
    from apps.bookings.repositories import DjangoBookingRepository
    from apps.reviews.repositories import DjangoReviewRepository
    from apps.tenants.repositories import DjangoTenantRepository
    from apps.users.repositories import DjangoUserRepository

    bus = MessageBus()
    return Container(
        tenant_repo=DjangoTenantRepository(),
        user_repo=DjangoUserRepository(),
        attraction_repo=DjangoAttractionRepository(),
        destination_repo=DjangoDestinationRepository(),
        category_repo=DjangoCategoryRepository(),
        review_repo=DjangoReviewRepository(),
        booking_repo=DjangoBookingRepository(),
        gateway=build_gateway(),
        notifier=EmailNotifier(),
        renderer=PdfTicketRenderer(),
        ticket_store=TicketStore(settings.TICKET_STORAGE_PREFIX),
        bus=bus,
        uow_factory=functools.partial(DjangoUnitOfWork, bus),
        fee_rate=Decimal(str(settings.BOOKING_SERVICE_FEE_RATE)),
        reference_prefix=settings.BOOKING_REFERENCE_PREFIX,
        reference_attempts=settings.BOOKING_REFERENCE_MAX_ATTEMPTS,
        frontend_url=settings.FRONTEND_URL,
        notifications_async=settings.NOTIFICATIONS_ASYNC,
    )


def build_in_memory_container(
    gateway: PaymentGateway | None = None,
    notifier: Notifier | None = None,
    renderer: TicketRenderer | None = None,
    ticket_store: TicketStore | None = None,
    **options,
) -> Container:
    """Container over in-memory stores; every call starts empty"""
    bus = MessageBus()
    return Container(
        tenant_repo=InMemoryRepository(unique_fields=('slug',)),
        user_repo=InMemoryRepository(unique_fields=('email',)),
        attraction_repo=InMemoryRepository(),
        destination_repo=InMemoryRepository(),
        category_repo=InMemoryRepository(unique_fields=('slug',)),
        review_repo=InMemoryRepository(),
        booking_repo=InMemoryRepository(unique_fields=('reference',)),
        gateway=gateway or SimulatedGateway(),
        notifier=notifier or EmailNotifier(),
        renderer=renderer or PdfTicketRenderer(),
        ticket_store=ticket_store or TicketStore('tickets'),
        bus=bus,
        uow_factory=functools.partial(InMemoryUnitOfWork, bus),
        **options,
    )


_container: Container | None = None


def get_container() -> Container:
    global _container
    if _container is None:
        _container = build_django_container()
    return _container


def set_container(container: Container | None):
    """Replace the process-wide container (None rebuilds it lazily)"""
    global _container
    _container = container
