"""Celery tasks for notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

logger = logging.getLogger(__name__)


@shared_task(name="notifications.issue_booking_ticket", ignore_result=True)
def issue_booking_ticket(booking_id: str) -> bool:
    """Render, store and e-mail the ticket of a confirmed booking."""
    from config.container import get_container

    sent = get_container().ticket_issuer.issue(booking_id)
    if not sent:
        logger.warning(f"Confirmation e-mail for booking {booking_id} was not sent")
    return sent
