"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from apps.bookings.application.command_handlers import CompleteFinishedBookings

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Complete confirmed bookings whose last visit date has passed.

    Runs hourly.

    Returns:
        dict: {"completed": number of bookings moved to COMPLETED}
    """
    from config.container import get_container

    today = timezone.localdate()
    completed = get_container().complete_finished.handle(CompleteFinishedBookings(today=today))
    if completed:
        logger.info(f"Completed {completed} bookings")
    return {"completed": completed}
