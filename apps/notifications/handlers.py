"""Event handlers reacting to confirmed bookings."""

from __future__ import annotations

import logging
from typing import Callable

from apps.bookings.application.command_handlers import BookingTransition
from apps.bookings.domain.events import BookingConfirmed
from apps.notifications.services import Notifier
from apps.notifications.tickets import TicketRenderer, TicketStore, ticket_details
from shared.application.uow import InMemoryUnitOfWork

logger = logging.getLogger(__name__)


class TicketIssuer:
    """
    Render, store and e-mail the ticket of a confirmed booking

    Each step is best-effort: a rendering or storage failure still sends the
    confirmation (without attachment), and nothing here can affect the
    booking's confirmed state.
    """

    def __init__(
        self,
        booking_repo,
        attraction_repo,
        user_repo,
        renderer: TicketRenderer,
        store: TicketStore,
        notifier: Notifier,
        uow_factory: Callable = InMemoryUnitOfWork,
    ):
        self.booking_repo = booking_repo
        self.attraction_repo = attraction_repo
        self.user_repo = user_repo
        self.renderer = renderer
        self.store = store
        self.notifier = notifier
        self.transition = BookingTransition(booking_repo, uow_factory)

    def __call__(self, event: BookingConfirmed):
        self.issue(event.booking_id)

    def _contact_email(self, booking) -> str:
        if booking.contact_email:
            return booking.contact_email
        if booking.user_id:
            user = self.user_repo.get(booking.user_id)
            if user is not None:
                return user.email
        return ''

    def issue(self, booking_id: str) -> bool:
        booking = self.booking_repo.get(booking_id)
        if booking is None:
            logger.warning(f"Cannot issue ticket: booking {booking_id} not found")
            return False

        attraction = self.attraction_repo.get(booking.attraction_id)
        email = self._contact_email(booking)
        details = ticket_details(booking, attraction, fallback_email=email)

        pdf = None
        try:
            pdf = self.renderer.render_ticket(details)
            url = self.store.save(booking.reference, pdf)
            self.transition.apply(booking.id, lambda b: b.attach_ticket(url))
        except Exception as e:
            logger.error(f"Ticket generation failed for booking {booking.reference}: {e}", exc_info=True)

        return self.notifier.send_booking_confirmation(email, details, pdf)


def dispatch_ticket_task(event: BookingConfirmed):
    """Bus handler used when notifications run on Celery"""
    from apps.notifications.tasks import issue_booking_ticket

    issue_booking_ticket.delay(event.booking_id)
