"""Tests for ticket issuing and confirmation e-mails."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch

from django.core import mail
from django.test import SimpleTestCase

from apps.access.context import RequestContext
from apps.bookings.application.command_handlers import CreateBookingCommand
from apps.bookings.domain.entities import BookingStatus, GuestDetails
from apps.bookings.domain.events import BookingConfirmed
from apps.notifications.handlers import dispatch_ticket_task
from apps.notifications.services import EmailNotifier
from apps.notifications.tasks import issue_booking_ticket
from apps.notifications.tickets import PdfTicketRenderer, TicketDetails, TicketLine, ticket_details
from config.container import set_container
from shared.testing import (
    RecordingNotifier,
    StaticTicketRenderer,
    in_memory_container,
    make_attraction,
    make_tenant,
    make_user,
    requested,
)


def details(**overrides) -> TicketDetails:
    fields = dict(
        reference='ATT-ABCDE-1234',
        attraction_title='Harbour Cruise',
        guest_name='Ana Lopez',
        email='ana@example.com',
        total=Decimal('157.50'),
        currency='USD',
        meeting_point='Pier 39',
        lines=[TicketLine('Adult', '2030-06-01', '10:00', 2, 1, 0)],
    )
    fields.update(overrides)
    return TicketDetails(**fields)


class PdfTicketRendererTests(SimpleTestCase):
    def test_renders_a_pdf(self):
        pdf = PdfTicketRenderer().render_ticket(details())
        self.assertTrue(pdf.startswith(b'%PDF'))

    def test_renders_without_lines_or_meeting_point(self):
        pdf = PdfTicketRenderer().render_ticket(details(lines=[], meeting_point='', guest_name=''))
        self.assertTrue(pdf.startswith(b'%PDF'))

    def test_guest_summary(self):
        self.assertEqual(TicketLine('A', '2030-06-01', None, 2, 1, 0).guests, '2 adult(s), 1 child(ren)')


class EmailNotifierTests(SimpleTestCase):
    def test_confirmation_with_attachment(self):
        sent = EmailNotifier().send_booking_confirmation('ana@example.com', details(), b'%PDF-1.4')

        self.assertTrue(sent)
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.subject, 'Booking ATT-ABCDE-1234 confirmed')
        self.assertEqual(message.attachments[0][0], 'ticket-ATT-ABCDE-1234.pdf')
        self.assertIn('Harbour Cruise', message.alternatives[0][0])

    def test_confirmation_without_ticket(self):
        EmailNotifier().send_booking_confirmation('ana@example.com', details())
        self.assertEqual(mail.outbox[0].attachments, [])
        self.assertIn('available in your account shortly', mail.outbox[0].body)

    def test_missing_recipient_is_not_sent(self):
        self.assertFalse(EmailNotifier().send_booking_confirmation('', details()))
        self.assertEqual(mail.outbox, [])

    def test_backend_failure_is_reported_not_raised(self):
        with patch('django.core.mail.EmailMultiAlternatives.send', side_effect=OSError('smtp down')):
            self.assertFalse(EmailNotifier().send_password_reset('a@example.com', 'A', 'http://x/reset'))


class TicketIssuerTests(SimpleTestCase):
    def setUp(self):
        self.notifier = RecordingNotifier()
        self.renderer = StaticTicketRenderer()
        self.container = in_memory_container(notifier=self.notifier, renderer=self.renderer)
        make_tenant(self.container, 'tenant-1')
        self.attraction = make_attraction(self.container, meeting_point='Pier 39')
        self.customer = make_user(self.container)

    def book_and_pay(self, guest_details=None):
        context = RequestContext(identity=self.customer.to_identity())
        booking = self.container.create_booking.handle(
            context,
            CreateBookingCommand(
                attraction_id=self.attraction.id, items=[requested()], guest_details=guest_details,
            ),
        )
        self.container.issue_intent.handle(context, booking.id)
        self.container.confirm_payment.handle(context, booking.id)
        return self.container.booking_repo.get(booking.id)

    def test_ticket_details_come_from_booking_and_attraction(self):
        booking = self.book_and_pay()
        built = ticket_details(booking, self.attraction, fallback_email='x@example.com')
        self.assertEqual(built.attraction_title, 'Harbour Cruise')
        self.assertEqual(built.meeting_point, 'Pier 39')
        self.assertEqual(built.email, 'x@example.com')
        self.assertEqual(built.lines[0].option_name, 'Adult')

    def test_guest_contact_wins_over_account_email(self):
        self.book_and_pay(GuestDetails(first_name='Ana', last_name='Lopez', email='ana@example.com'))
        email, sent_details, _ = self.notifier.confirmations[0]
        self.assertEqual(email, 'ana@example.com')
        self.assertEqual(sent_details.guest_name, 'Ana Lopez')

    def test_renderer_failure_still_sends_confirmation(self):
        self.renderer.fail = True
        booking = self.book_and_pay()

        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertIsNone(booking.ticket_url)
        email, _, pdf = self.notifier.confirmations[0]
        self.assertEqual(email, self.customer.email)
        self.assertIsNone(pdf)

    def test_notifier_failure_does_not_affect_the_booking(self):
        self.notifier.fail = True
        booking = self.book_and_pay()
        self.assertEqual(booking.status, BookingStatus.CONFIRMED)
        self.assertTrue(booking.ticket_url)

    def test_missing_booking(self):
        self.assertFalse(self.container.ticket_issuer.issue('missing'))
        self.assertEqual(self.notifier.confirmations, [])

    def test_async_mode_dispatches_a_task(self):
        container = in_memory_container(notifier=self.notifier, notifications_async=True)
        handlers = container.bus.handlers_for(BookingConfirmed)
        self.assertEqual(handlers, [dispatch_ticket_task])

        with patch('apps.notifications.tasks.issue_booking_ticket.delay') as delay:
            dispatch_ticket_task(BookingConfirmed(booking_id='b1', reference='R', tenant_id='t', user_id=None))
        delay.assert_called_once_with('b1')

    def test_task_issues_through_the_container(self):
        booking = self.book_and_pay()
        set_container(self.container)
        try:
            self.assertTrue(issue_booking_ticket(booking.id))
        finally:
            set_container(None)
        self.assertEqual(len(self.notifier.confirmations), 2)
