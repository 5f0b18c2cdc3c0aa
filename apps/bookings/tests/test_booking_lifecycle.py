"""Tests for the booking and payment state machines."""

from __future__ import annotations

from decimal import Decimal

from django.test import SimpleTestCase

from apps.bookings.domain.entities import (
    Booking,
    BookingStatus,
    LineItem,
    PaymentStatus,
    Quantities,
)
from apps.bookings.domain.events import BookingCancelled, BookingConfirmed, BookingRefunded
from apps.bookings.domain.references import generate_reference, is_valid_reference
from shared.domain.exceptions import InvalidState


def booking(**overrides) -> Booking:
    fields = dict(
        reference='ATT-ABCDE-1234',
        tenant_id='tenant-1',
        attraction_id='attr-1',
        user_id='u-1',
        items=[LineItem(
            option_id='adult-option',
            option_name='Adult Ticket',
            date='2030-06-01',
            quantities=Quantities(adults=2),
            unit_price=Decimal('50'),
            total_price=Decimal('100'),
        )],
        subtotal=Decimal('100.00'),
        fees=Decimal('5.00'),
        total=Decimal('105.00'),
        currency='USD',
    )
    fields.update(overrides)
    return Booking(**fields)


def paid_booking() -> Booking:
    b = booking()
    b.issue_payment_intent('pi_123')
    b.confirm_payment('card')
    b.clear_events()
    return b


class BookingLifecycleTests(SimpleTestCase):
    def test_new_booking_is_pending_pending(self) -> None:
        b = booking()
        self.assertEqual(b.status, BookingStatus.PENDING)
        self.assertEqual(b.payment_status, PaymentStatus.PENDING)

    def test_issue_intent_moves_payment_to_processing(self) -> None:
        b = booking()
        b.issue_payment_intent('pi_123')
        self.assertEqual(b.payment_status, PaymentStatus.PROCESSING)
        self.assertEqual(b.payment_intent_id, 'pi_123')

    def test_second_intent_is_rejected(self) -> None:
        b = booking()
        b.issue_payment_intent('pi_123')
        with self.assertRaisesMessage(InvalidState, 'Payment already processed'):
            b.issue_payment_intent('pi_456')

    def test_confirm_payment_confirms_booking(self) -> None:
        b = booking()
        b.issue_payment_intent('pi_123')
        b.confirm_payment('card')

        self.assertEqual(b.status, BookingStatus.CONFIRMED)
        self.assertEqual(b.payment_status, PaymentStatus.SUCCEEDED)
        self.assertIsNotNone(b.confirmed_at)
        self.assertEqual([type(e) for e in b.events][-1], BookingConfirmed)

    def test_confirm_from_pending_payment_is_allowed(self) -> None:
        b = booking()
        b.confirm_payment()
        self.assertEqual(b.payment_status, PaymentStatus.SUCCEEDED)

    def test_confirming_twice_is_invalid(self) -> None:
        b = paid_booking()
        with self.assertRaises(InvalidState):
            b.confirm_payment('card')
        self.assertEqual(b.events, [])

    def test_failed_payment_is_terminal(self) -> None:
        b = booking()
        b.issue_payment_intent('pi_123')
        b.fail_payment('card_declined')
        self.assertEqual(b.payment_status, PaymentStatus.FAILED)
        with self.assertRaises(InvalidState):
            b.confirm_payment('card')

    def test_fail_requires_processing(self) -> None:
        with self.assertRaises(InvalidState):
            booking().fail_payment('nope')

    def test_cancel_unpaid_booking(self) -> None:
        b = booking()
        refund = b.cancel('changed plans')
        self.assertFalse(refund)
        self.assertEqual(b.status, BookingStatus.CANCELLED)
        self.assertEqual(b.payment_status, PaymentStatus.PENDING)
        self.assertEqual(b.cancellation_reason, 'changed plans')

    def test_cancel_paid_booking_cascades_refund(self) -> None:
        b = paid_booking()
        refund = b.cancel()

        self.assertTrue(refund)
        self.assertEqual(b.status, BookingStatus.CANCELLED)
        self.assertEqual(b.payment_status, PaymentStatus.REFUNDED)
        self.assertIsNotNone(b.refunded_at)
        event = b.events[-1]
        self.assertIsInstance(event, BookingCancelled)
        self.assertTrue(event.refunded)
        self.assertEqual(event.old_status, 'confirmed')

    def test_cancel_terminal_booking_is_invalid(self) -> None:
        b = paid_booking()
        b.complete()
        with self.assertRaises(InvalidState):
            b.cancel()
        self.assertEqual(b.status, BookingStatus.COMPLETED)

    def test_refund_requires_succeeded_payment(self) -> None:
        with self.assertRaisesMessage(InvalidState, 'Payment cannot be refunded'):
            booking().refund()

    def test_refund_moves_both_statuses(self) -> None:
        b = paid_booking()
        b.refund()
        self.assertEqual(b.status, BookingStatus.REFUNDED)
        self.assertEqual(b.payment_status, PaymentStatus.REFUNDED)
        self.assertIsInstance(b.events[-1], BookingRefunded)

    def test_late_payment_on_cancelled_booking_is_refunded(self) -> None:
        b = booking()
        b.issue_payment_intent('pi_123')
        self.assertFalse(b.cancel())
        self.assertTrue(b.awaits_late_refund)

        b.refund_late_payment('card')

        self.assertEqual(b.status, BookingStatus.CANCELLED)
        self.assertEqual(b.payment_status, PaymentStatus.REFUNDED)
        self.assertEqual(b.payment_method, 'card')
        self.assertIsInstance(b.events[-1], BookingRefunded)
        self.assertFalse(b.awaits_late_refund)

    def test_late_refund_requires_cancelled_booking_in_flight(self) -> None:
        with self.assertRaises(InvalidState):
            paid_booking().refund_late_payment()
        unpaid = booking()
        unpaid.cancel()
        with self.assertRaises(InvalidState):
            unpaid.refund_late_payment()

    def test_completed_booking_cannot_be_refunded(self) -> None:
        b = paid_booking()
        b.complete()
        with self.assertRaises(InvalidState):
            b.refund()

    def test_complete_requires_confirmed(self) -> None:
        with self.assertRaises(InvalidState):
            booking().complete()

    def test_ticket_is_never_issued_for_unconfirmed_booking(self) -> None:
        with self.assertRaisesMessage(InvalidState, 'Ticket not available. Booking is not confirmed.'):
            booking().ticket()
        with self.assertRaises(InvalidState):
            booking().attach_ticket('/media/tickets/x.pdf')

    def test_ticket_in_progress_then_ready(self) -> None:
        b = paid_booking()
        self.assertIsNone(b.ticket())
        b.attach_ticket('/media/tickets/ticket.pdf')
        self.assertEqual(b.ticket(), '/media/tickets/ticket.pdf')

    def test_patch_carries_only_mutable_fields(self) -> None:
        changes = paid_booking().patch().changes()
        self.assertNotIn('total', changes)
        self.assertNotIn('reference', changes)
        self.assertEqual(changes['status'], BookingStatus.CONFIRMED)


class ReferenceTests(SimpleTestCase):
    def test_generated_references_match_the_format(self) -> None:
        for prefix in ('ATT', 'tb', 'LONDON'):
            reference = generate_reference(prefix)
            self.assertTrue(is_valid_reference(reference), reference)
            self.assertTrue(reference.startswith(prefix.upper() + '-'))

    def test_invalid_references(self) -> None:
        for value in ('', 'ATT-abcde-1234', 'ATT-ABCD-1234', 'ATTABCDE1234', None):
            self.assertFalse(is_valid_reference(value), value)
