"""Tests for booking use cases over the in-memory container."""

from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.test import SimpleTestCase

from apps.access.context import RequestContext
from apps.attractions.domain.entities import AttractionStatus
from apps.bookings.application.command_handlers import (
    BookingTransition,
    CancelBookingCommand,
    CompleteBookingCommand,
    CompleteFinishedBookings,
    CreateBookingCommand,
)
from apps.bookings.application.queries import BookingFilters
from apps.bookings.domain.entities import BookingStatus, GuestDetails, PaymentStatus
from apps.bookings.domain.references import is_valid_reference
from apps.bookings.tasks import complete_finished_bookings
from apps.users.domain.entities import Role
from config.container import set_container
from shared.domain.exceptions import (
    DuplicateReference,
    Forbidden,
    InvalidState,
    NotFound,
    Unauthenticated,
    UnknownPricingOption,
)
from shared.testing import (
    RecordingNotifier,
    in_memory_container,
    make_attraction,
    make_tenant,
    make_user,
    requested,
)


def ctx(user=None, tenant=None) -> RequestContext:
    return RequestContext(identity=user.to_identity() if user else None, tenant=tenant)


class BookingTestCase(SimpleTestCase):
    def setUp(self):
        self.notifier = RecordingNotifier()
        self.container = in_memory_container(notifier=self.notifier)
        self.tenant = make_tenant(self.container, 'tenant-1')
        self.other_tenant = make_tenant(self.container, 'tenant-2')
        self.attraction = make_attraction(self.container)
        self.customer = make_user(self.container)
        self.super_admin = make_user(self.container, Role.SUPER_ADMIN)

    def create(self, user=None, tenant=None, attraction=None, items=None, **command):
        return self.container.create_booking.handle(
            ctx(user or self.customer, tenant if tenant is not None else self.tenant),
            CreateBookingCommand(
                attraction_id=(attraction or self.attraction).id,
                items=items or [requested(adults=2)],
                **command,
            ),
        )

    def pay(self, booking, user=None):
        context = ctx(user or self.customer)
        self.container.issue_intent.handle(context, booking.id)
        return self.container.confirm_payment.handle(context, booking.id)

    def stored(self, booking):
        return self.container.booking_repo.get(booking.id)


class CreateBookingTests(BookingTestCase):
    def test_creates_pending_booking_priced_from_catalog(self):
        booking = self.create(items=[
            requested('opt-adult', adults=2, unit_price=Decimal('1.00'), option_name='Cheap'),
        ])

        stored = self.stored(booking)
        self.assertEqual(stored.status, BookingStatus.PENDING)
        self.assertEqual(stored.payment_status, PaymentStatus.PENDING)
        self.assertEqual(stored.user_id, self.customer.id)
        self.assertEqual(stored.tenant_id, 'tenant-1')
        self.assertEqual(stored.items[0].option_name, 'Adult')
        self.assertEqual(stored.subtotal, Decimal('100.00'))
        self.assertEqual(stored.fees, Decimal('5.00'))
        self.assertEqual(stored.total, Decimal('105.00'))
        self.assertTrue(is_valid_reference(stored.reference))
        self.assertTrue(stored.reference.startswith('ATT-'))

    def test_guest_checkout_without_identity(self):
        guest = GuestDetails(first_name='Ana', last_name='Lopez', email='ana@example.com')
        booking = self.container.create_booking.handle(
            RequestContext(tenant=self.tenant),
            CreateBookingCommand(attraction_id=self.attraction.id, items=[requested()], guest_details=guest),
        )
        self.assertIsNone(booking.user_id)
        self.assertEqual(self.stored(booking).contact_email, 'ana@example.com')

    def test_tenant_defaults_to_the_attraction_owner(self):
        booking = self.container.create_booking.handle(
            ctx(self.customer), CreateBookingCommand(attraction_id=self.attraction.id, items=[requested()]),
        )
        self.assertEqual(booking.tenant_id, 'tenant-1')

    def test_attraction_not_offered_by_request_tenant_is_forbidden(self):
        with self.assertRaises(Forbidden):
            self.create(tenant=self.other_tenant)
        self.assertEqual(self.container.booking_repo.count({}), 0)

    def test_shared_attraction_is_booked_under_the_request_tenant(self):
        shared = make_attraction(self.container, tenant_ids=('tenant-1', 'tenant-2'))
        booking = self.create(tenant=self.other_tenant, attraction=shared)
        self.assertEqual(booking.tenant_id, 'tenant-2')

    def test_unknown_or_inactive_attraction_is_not_found(self):
        draft = make_attraction(self.container, status=AttractionStatus.DRAFT)
        with self.assertRaises(NotFound):
            self.create(attraction=draft)
        with self.assertRaises(NotFound):
            self.container.create_booking.handle(
                ctx(self.customer), CreateBookingCommand(attraction_id='missing', items=[requested()]),
            )

    def test_unknown_option_creates_nothing(self):
        with self.assertRaises(UnknownPricingOption):
            self.create(items=[requested('opt-adult'), requested('opt-ghost')])
        self.assertEqual(self.container.booking_repo.count({}), 0)

    def test_tenant_reference_prefix(self):
        branded = make_tenant(self.container, 'tenant-3', reference_prefix='LDN')
        attraction = make_attraction(self.container, tenant_ids=('tenant-3',))
        booking = self.create(tenant=branded, attraction=attraction)
        self.assertTrue(booking.reference.startswith('LDN-'))

    def test_reference_collision_is_retried(self):
        first = self.create()
        target = 'apps.bookings.application.command_handlers.generate_reference'
        with patch(target, side_effect=[first.reference, 'ATT-BBBBB-1111']):
            second = self.create()
        self.assertEqual(second.reference, 'ATT-BBBBB-1111')
        self.assertEqual(self.container.booking_repo.count({}), 2)

    def test_reference_allocation_gives_up_after_max_attempts(self):
        first = self.create()
        target = 'apps.bookings.application.command_handlers.generate_reference'
        with patch(target, return_value=first.reference) as generate:
            with self.assertRaises(DuplicateReference):
                self.create()
        self.assertEqual(generate.call_count, 5)
        self.assertEqual(self.container.booking_repo.count({}), 1)


class CancelBookingTests(BookingTestCase):
    def test_owner_cancels_unpaid_booking(self):
        booking = self.create()
        self.container.cancel_booking.handle(
            ctx(self.customer), CancelBookingCommand(booking.id, 'plans changed'),
        )

        stored = self.stored(booking)
        self.assertEqual(stored.status, BookingStatus.CANCELLED)
        self.assertEqual(stored.payment_status, PaymentStatus.PENDING)
        self.assertEqual(stored.cancellation_reason, 'plans changed')
        self.assertEqual(self.container.gateway.refunds, [])

    def test_cancelling_paid_booking_refunds_it(self):
        booking = self.create()
        self.pay(booking)

        self.container.cancel_booking.handle(ctx(self.customer), CancelBookingCommand(booking.id))

        stored = self.stored(booking)
        self.assertEqual(stored.status, BookingStatus.CANCELLED)
        self.assertEqual(stored.payment_status, PaymentStatus.REFUNDED)
        self.assertEqual(len(self.container.gateway.refunds), 1)
        self.assertEqual(self.container.gateway.refunds[0].payment_intent_id, stored.payment_intent_id)

    def test_cancel_that_loses_a_race_refunds_once(self):
        booking = self.create()
        self.pay(booking)
        gateway = self.container.gateway
        provider_refund = gateway.refund
        transition = BookingTransition(self.container.booking_repo, self.container.uow_factory)
        raced = []

        def refund_while_ticket_is_attached(*args, **kwargs):
            if not raced:
                # the ticket worker writes between our read and our write
                raced.append(transition.apply(
                    booking.id, lambda b: b.attach_ticket('https://tickets.example.com/x.pdf'),
                ))
            return provider_refund(*args, **kwargs)

        with patch.object(gateway, 'refund', side_effect=refund_while_ticket_is_attached) as refund:
            self.container.cancel_booking.handle(ctx(self.customer), CancelBookingCommand(booking.id))

        stored = self.stored(booking)
        self.assertEqual(stored.status, BookingStatus.CANCELLED)
        self.assertEqual(stored.payment_status, PaymentStatus.REFUNDED)
        self.assertEqual(refund.call_count, 2)
        keys = {call.kwargs['idempotency_key'] for call in refund.call_args_list}
        self.assertEqual(keys, {f"booking-{booking.id}-refund"})
        self.assertEqual(len(gateway.refunds), 1)

    def test_admin_of_another_tenant_cannot_cancel(self):
        booking = self.create()
        admin = make_user(self.container, Role.BRAND_ADMIN, tenants=['tenant-2'])

        with self.assertRaises(Forbidden):
            self.container.cancel_booking.handle(ctx(admin), CancelBookingCommand(booking.id))

        stored = self.stored(booking)
        self.assertEqual(stored.status, BookingStatus.PENDING)
        self.assertEqual(stored.version, booking.version)

    def test_tenant_admin_cancels_booking_of_their_tenant(self):
        booking = self.create()
        manager = make_user(self.container, Role.MANAGER, tenants=['tenant-1'])
        self.container.cancel_booking.handle(ctx(manager), CancelBookingCommand(booking.id))
        self.assertEqual(self.stored(booking).status, BookingStatus.CANCELLED)

    def test_other_customer_cannot_cancel(self):
        booking = self.create()
        stranger = make_user(self.container)
        with self.assertRaises(Forbidden):
            self.container.cancel_booking.handle(ctx(stranger), CancelBookingCommand(booking.id))

    def test_anonymous_caller_is_unauthenticated(self):
        booking = self.create()
        with self.assertRaises(Unauthenticated):
            self.container.cancel_booking.handle(RequestContext(), CancelBookingCommand(booking.id))

    def test_cancelling_twice_is_invalid(self):
        booking = self.create()
        self.container.cancel_booking.handle(ctx(self.customer), CancelBookingCommand(booking.id))
        with self.assertRaises(InvalidState):
            self.container.cancel_booking.handle(ctx(self.customer), CancelBookingCommand(booking.id))

    def test_missing_booking(self):
        with self.assertRaises(NotFound):
            self.container.cancel_booking.handle(ctx(self.customer), CancelBookingCommand('nope'))


class ConfirmationTests(BookingTestCase):
    def test_confirmation_issues_ticket_and_email(self):
        booking = self.create()
        self.pay(booking)

        stored = self.stored(booking)
        self.assertEqual(stored.status, BookingStatus.CONFIRMED)
        self.assertEqual(stored.payment_status, PaymentStatus.SUCCEEDED)
        self.assertTrue(stored.ticket_url.endswith('.pdf'))
        self.assertEqual(len(self.notifier.confirmations), 1)
        email, details, pdf = self.notifier.confirmations[0]
        self.assertEqual(email, self.customer.email)
        self.assertEqual(details.reference, booking.reference)
        self.assertTrue(pdf.startswith(b'%PDF'))

    def test_confirming_twice_sends_one_confirmation(self):
        booking = self.create()
        self.pay(booking)

        with self.assertRaises(InvalidState):
            self.container.confirm_payment.handle(ctx(self.customer), booking.id)
        self.assertEqual(len(self.notifier.confirmations), 1)

    def test_writer_that_loses_a_race_sees_the_winner(self):
        booking = self.create()
        transition = BookingTransition(self.container.booking_repo, self.container.uow_factory)
        seen = []

        def step(b):
            seen.append(b.status)
            if len(seen) == 1:
                # a concurrent request confirms between our read and our write
                transition.apply(booking.id, lambda other: other.confirm_payment('card'))
            b.confirm_payment('card')

        with self.assertRaises(InvalidState):
            transition.apply(booking.id, step)

        self.assertEqual(seen, [BookingStatus.PENDING, BookingStatus.CONFIRMED])
        self.assertEqual(len(self.notifier.confirmations), 1)

    def test_parallel_confirmations_apply_once(self):
        booking = self.create()
        self.container.issue_intent.handle(ctx(self.customer), booking.id)
        barrier = threading.Barrier(2)
        outcomes = []

        def confirm():
            barrier.wait()
            try:
                self.container.confirm_payment.handle(ctx(self.customer), booking.id)
                outcomes.append('confirmed')
            except InvalidState:
                outcomes.append('invalid')

        threads = [threading.Thread(target=confirm) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(outcomes), ['confirmed', 'invalid'])
        self.assertEqual(self.stored(booking).status, BookingStatus.CONFIRMED)
        self.assertEqual(len(self.notifier.confirmations), 1)


class CompleteBookingTests(BookingTestCase):
    def test_admin_completes_confirmed_booking(self):
        booking = self.create()
        self.pay(booking)
        self.container.complete_booking.handle(ctx(self.super_admin), CompleteBookingCommand(booking.id))
        self.assertEqual(self.stored(booking).status, BookingStatus.COMPLETED)

    def test_customer_cannot_complete(self):
        booking = self.create()
        self.pay(booking)
        with self.assertRaises(Forbidden):
            self.container.complete_booking.handle(ctx(self.customer), CompleteBookingCommand(booking.id))

    def test_pending_booking_cannot_complete(self):
        booking = self.create()
        with self.assertRaises(InvalidState):
            self.container.complete_booking.handle(ctx(self.super_admin), CompleteBookingCommand(booking.id))

    def test_job_completes_only_past_confirmed_bookings(self):
        past = self.create(items=[requested(date='2024-03-01')])
        future = self.create(items=[requested(date='2024-03-01'), requested(date='2030-01-01')])
        unpaid = self.create(items=[requested(date='2024-03-01')])
        self.pay(past)
        self.pay(future)

        completed = self.container.complete_finished.handle(CompleteFinishedBookings(today=date(2025, 1, 1)))

        self.assertEqual(completed, 1)
        self.assertEqual(self.stored(past).status, BookingStatus.COMPLETED)
        self.assertEqual(self.stored(future).status, BookingStatus.CONFIRMED)
        self.assertEqual(self.stored(unpaid).status, BookingStatus.PENDING)

    def test_periodic_task_runs_against_the_container(self):
        self.pay(self.create(items=[requested(date='2024-03-01')]))
        set_container(self.container)
        try:
            self.assertEqual(complete_finished_bookings(), {'completed': 1})
            self.assertEqual(complete_finished_bookings(), {'completed': 0})
        finally:
            set_container(None)


class BookingQueryTests(BookingTestCase):
    def setUp(self):
        super().setUp()
        shared = make_attraction(self.container, tenant_ids=('tenant-1', 'tenant-2'))
        self.first = self.create()
        self.second = self.create(tenant=self.other_tenant, attraction=shared)
        self.pay(self.first)

    def test_owner_and_admins_see_a_booking(self):
        admin = make_user(self.container, Role.VIEWER, tenants=['tenant-1'])
        for user in (self.customer, admin, self.super_admin):
            found = self.container.booking_queries.get(ctx(user), self.first.id)
            self.assertEqual(found.reference, self.first.reference)

    def test_other_tenant_admin_is_forbidden(self):
        admin = make_user(self.container, Role.BRAND_ADMIN, tenants=['tenant-2'])
        with self.assertRaises(Forbidden):
            self.container.booking_queries.get(ctx(admin), self.first.id)

    def test_lookup_by_reference_is_case_insensitive(self):
        found = self.container.booking_queries.get_by_reference(
            ctx(self.customer), self.first.reference.lower(),
        )
        self.assertEqual(found.id, self.first.id)

    def test_guest_booking_is_reachable_by_admins_only(self):
        guest = self.container.create_booking.handle(
            RequestContext(tenant=self.tenant),
            CreateBookingCommand(
                attraction_id=self.attraction.id,
                items=[requested()],
                guest_details=GuestDetails(first_name='A', last_name='B', email='a@example.com'),
            ),
        )
        with self.assertRaises(Forbidden):
            self.container.booking_queries.get(ctx(self.customer), guest.id)
        with self.assertRaises(Unauthenticated):
            self.container.booking_queries.get(RequestContext(), guest.id)
        self.assertEqual(self.container.booking_queries.get(ctx(self.super_admin), guest.id).id, guest.id)

    def test_my_bookings_lists_own_only(self):
        stranger = make_user(self.container)
        self.create(user=stranger)
        page = self.container.booking_queries.my_bookings(ctx(self.customer))
        self.assertEqual({b.id for b in page.items}, {self.first.id, self.second.id})
        confirmed = self.container.booking_queries.my_bookings(ctx(self.customer), BookingStatus.CONFIRMED)
        self.assertEqual([b.id for b in confirmed.items], [self.first.id])

    def test_admin_list_is_scoped_to_assigned_tenants(self):
        admin = make_user(self.container, Role.MANAGER, tenants=['tenant-2'])
        page = self.container.booking_queries.list(ctx(admin))
        self.assertEqual([b.id for b in page.items], [self.second.id])
        self.assertEqual(page.total, 1)

    def test_super_admin_list_narrowed_by_request_tenant(self):
        everything = self.container.booking_queries.list(ctx(self.super_admin))
        narrowed = self.container.booking_queries.list(ctx(self.super_admin, self.tenant))
        self.assertEqual(everything.total, 2)
        self.assertEqual([b.id for b in narrowed.items], [self.first.id])

    def test_admin_without_tenants_sees_nothing(self):
        admin = make_user(self.container, Role.BRAND_ADMIN)
        self.assertEqual(self.container.booking_queries.list(ctx(admin)).total, 0)
        stats = self.container.booking_queries.stats(ctx(admin))
        self.assertEqual(stats.total_bookings, 0)
        self.assertEqual(stats.total_revenue, Decimal('0.00'))

    def test_customers_cannot_list_or_aggregate(self):
        with self.assertRaises(Forbidden):
            self.container.booking_queries.list(ctx(self.customer))
        with self.assertRaises(Forbidden):
            self.container.booking_queries.stats(ctx(self.customer))

    def test_search_by_reference_and_email(self):
        by_reference = self.container.booking_queries.list(
            ctx(self.super_admin), BookingFilters(search=self.first.reference[4:9].lower()),
        )
        self.assertEqual([b.id for b in by_reference.items], [self.first.id])

        guest = self.container.create_booking.handle(
            RequestContext(tenant=self.tenant),
            CreateBookingCommand(
                attraction_id=self.attraction.id,
                items=[requested()],
                guest_details=GuestDetails(first_name='A', last_name='B', email='Find.Me@example.com'),
            ),
        )
        by_email = self.container.booking_queries.list(
            ctx(self.super_admin), BookingFilters(search='find.me@'),
        )
        self.assertEqual([b.id for b in by_email.items], [guest.id])

    def test_stats_count_statuses_and_paid_revenue(self):
        stats = self.container.booking_queries.stats(ctx(self.super_admin))
        self.assertEqual(stats.total_bookings, 2)
        self.assertEqual(stats.confirmed_bookings, 1)
        self.assertEqual(stats.pending_bookings, 1)
        self.assertEqual(stats.total_revenue, Decimal('105.00'))

    def test_ticket_status(self):
        ticket = self.container.booking_queries.ticket(ctx(self.customer), self.first.id)
        self.assertTrue(ticket.ready)
        with self.assertRaises(InvalidState):
            self.container.booking_queries.ticket(ctx(self.customer), self.second.id)
