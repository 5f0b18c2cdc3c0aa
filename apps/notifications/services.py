"""Notification services: transactional e-mails.

Every send is fire-and-forget. Failures are logged and reported as a False
return value, never raised to the caller.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.core.mail import EmailMultiAlternatives  # type: ignore
from django.utils.html import strip_tags  # type: ignore

if TYPE_CHECKING:  # pragma: no cover
    from apps.notifications.tickets import TicketDetails

logger = logging.getLogger(__name__)


class Notifier(ABC):
    @abstractmethod
    def send_booking_confirmation(
        self, email: str, details: "TicketDetails", ticket_bytes: bytes | None = None
    ) -> bool:
        ...

    @abstractmethod
    def send_password_reset(self, email: str, name: str, reset_url: str) -> bool:
        ...

    @abstractmethod
    def send_invitation(self, email: str, inviter_name: str, role: str, accept_url: str) -> bool:
        ...


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    html_message: str,
    *,
    attachments: list[tuple[str, bytes, str]] | None = None,
) -> bool:
    """
    Send a single HTML e-mail with a plain-text alternative.

    Args:
        recipient_email: recipient address
        subject: subject line
        html_message: HTML body; the text body is derived from it
        attachments: (filename, content, mimetype) triples

    Returns:
        bool: True if the message was handed to the mail backend
    """
    if not recipient_email:
        logger.warning(f"Skipping e-mail without recipient: {subject}")
        return False

    try:
        message = EmailMultiAlternatives(
            subject=subject,
            body=strip_tags(html_message),
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[recipient_email],
        )
        message.attach_alternative(html_message, "text/html")
        for filename, content, mimetype in attachments or []:
            message.attach(filename, content, mimetype)
        message.send(fail_silently=False)

        logger.info(f"Email sent successfully to {recipient_email}: {subject}")
        return True

    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False


class EmailNotifier(Notifier):
    """Notifier backed by Django's configured e-mail backend"""

    def send_booking_confirmation(
        self, email: str, details: "TicketDetails", ticket_bytes: bytes | None = None
    ) -> bool:
        subject = f"Booking {details.reference} confirmed"
        rows = "".join(
            f"<li>{line.option_name}: {line.date}"
            f"{' ' + line.time if line.time else ''} ({line.guests})</li>"
            for line in details.lines
        )
        ticket_note = (
            "Your ticket is attached to this e-mail."
            if ticket_bytes
            else "Your ticket will be available in your account shortly."
        )
        html_message = f"""
        <html>
        <body>
            <h2>Hello {details.guest_name or email},</h2>
            <p>Your booking for <strong>{details.attraction_title}</strong> is confirmed.</p>

            <h3>Booking details:</h3>
            <ul>
                <li><strong>Reference:</strong> {details.reference}</li>
                {rows}
                <li><strong>Total:</strong> {details.total:,.2f} {details.currency}</li>
            </ul>

            <p>{ticket_note}</p>
        </body>
        </html>
        """

        attachments = None
        if ticket_bytes:
            attachments = [(f"ticket-{details.reference}.pdf", ticket_bytes, "application/pdf")]

        return send_email_notification(email, subject, html_message, attachments=attachments)

    def send_password_reset(self, email: str, name: str, reset_url: str) -> bool:
        html_message = f"""
        <html>
        <body>
            <h2>Hello {name},</h2>
            <p>We received a request to reset your password.</p>
            <p><a href="{reset_url}">Reset your password</a></p>
            <p>This link expires in one hour. If you did not ask for a reset, ignore this e-mail.</p>
        </body>
        </html>
        """
        return send_email_notification(email, "Reset your password", html_message)

    def send_invitation(self, email: str, inviter_name: str, role: str, accept_url: str) -> bool:
        html_message = f"""
        <html>
        <body>
            <h2>You have been invited</h2>
            <p>{inviter_name} invited you to join the team as <strong>{role}</strong>.</p>
            <p><a href="{accept_url}">Accept the invitation</a></p>
        </body>
        </html>
        """
        return send_email_notification(email, "You have been invited", html_message)
