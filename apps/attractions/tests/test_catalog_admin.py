"""Tests for catalog management, availability and categories."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import SimpleTestCase

from apps.access.context import RequestContext
from apps.attractions.application.services import (
    CreateAttractionCommand,
    CreateCategoryCommand,
    CreateDestinationCommand,
)
from apps.attractions.domain.entities import (
    AttractionPatch,
    AttractionStatus,
    AvailabilityType,
    CategoryPatch,
    DestinationPatch,
    PricingOption,
)
from apps.users.domain.entities import Role
from shared.domain.exceptions import AlreadyExists, Forbidden, NotFound, Unauthenticated, ValidationFailed
from shared.testing import in_memory_container, make_attraction, make_tenant, make_user


def ctx(user=None, tenant=None) -> RequestContext:
    return RequestContext(identity=user.to_identity() if user else None, tenant=tenant)


OPTIONS = [PricingOption(id='adult', name='Adult', price=Decimal('30.00'))]


class CatalogAdminTestCase(SimpleTestCase):
    def setUp(self):
        self.container = in_memory_container()
        self.service = self.container.catalog_admin
        self.tenant = make_tenant(self.container, 'tenant-1')
        self.other_tenant = make_tenant(self.container, 'tenant-2')
        self.super_admin = make_user(self.container, Role.SUPER_ADMIN)
        self.editor = make_user(self.container, Role.EDITOR, tenants=['tenant-1'])
        self.manager = make_user(self.container, Role.MANAGER, tenants=['tenant-1'])


class CreateAttractionTests(CatalogAdminTestCase):
    def create(self, user, **command):
        command.setdefault('title', 'Sunset Kayak Tour')
        command.setdefault('tenant_ids', ['tenant-1'])
        command.setdefault('pricing_options', OPTIONS)
        return self.service.create_attraction(ctx(user), CreateAttractionCommand(**command))

    def test_editor_creates_a_draft_for_their_tenant(self):
        attraction = self.create(self.editor, currency='eur', category='water-sports')

        self.assertEqual(attraction.slug, 'sunset-kayak-tour')
        self.assertEqual(attraction.status, AttractionStatus.DRAFT)
        self.assertEqual(attraction.currency, 'EUR')
        stored = self.container.attraction_repo.get(attraction.id)
        self.assertEqual(stored.tenant_ids, ['tenant-1'])
        self.assertEqual(stored.category, 'water-sports')

    def test_tenant_outside_the_assignment_is_forbidden(self):
        with self.assertRaises(Forbidden):
            self.create(self.editor, tenant_ids=['tenant-1', 'tenant-2'])
        self.assertEqual(self.container.attraction_repo.count({}), 0)

    def test_viewer_and_customer_cannot_create(self):
        viewer = make_user(self.container, Role.VIEWER, tenants=['tenant-1'])
        with self.assertRaises(Forbidden):
            self.create(viewer)
        with self.assertRaises(Forbidden):
            self.create(make_user(self.container))
        with self.assertRaises(Unauthenticated):
            self.create(None)

    def test_unknown_tenant_is_rejected(self):
        with self.assertRaises(ValidationFailed):
            self.create(self.super_admin, tenant_ids=['tenant-9'])

    def test_empty_tenants_are_rejected(self):
        with self.assertRaises(ValidationFailed):
            self.create(self.super_admin, tenant_ids=[])

    def test_duplicate_option_ids_are_rejected(self):
        with self.assertRaises(ValidationFailed):
            self.create(self.super_admin, pricing_options=OPTIONS * 2)

    def test_taken_slug_is_rejected(self):
        self.create(self.editor)
        with self.assertRaises(AlreadyExists):
            self.create(self.editor)


class UpdateAttractionTests(CatalogAdminTestCase):
    def setUp(self):
        super().setUp()
        self.attraction = make_attraction(self.container, slug='harbour-cruise')
        self.shared = make_attraction(self.container, tenant_ids=('tenant-1', 'tenant-2'), slug='river-cruise')

    def test_editor_updates_fields_and_version(self):
        updated = self.service.update_attraction(
            ctx(self.editor), self.attraction.id,
            AttractionPatch(title='Harbour Cruise at Dusk', pricing_options=OPTIONS),
        )

        stored = self.container.attraction_repo.get(self.attraction.id)
        self.assertEqual(stored.title, 'Harbour Cruise at Dusk')
        self.assertEqual([o.id for o in stored.pricing_options], ['adult'])
        self.assertEqual(stored.version, self.attraction.version + 1)
        self.assertEqual(updated.version, stored.version)

    def test_shared_attraction_is_reachable_through_one_tenant(self):
        self.service.update_attraction(ctx(self.editor), self.shared.id, AttractionPatch(city='Oslo'))
        self.assertEqual(self.container.attraction_repo.get(self.shared.id).city, 'Oslo')

    def test_attraction_of_another_tenant_is_forbidden(self):
        foreign = make_attraction(self.container, tenant_ids=('tenant-2',))
        with self.assertRaises(Forbidden):
            self.service.update_attraction(ctx(self.editor), foreign.id, AttractionPatch(city='Oslo'))

    def test_removing_a_tenant_you_do_not_manage_is_forbidden(self):
        with self.assertRaises(Forbidden):
            self.service.update_attraction(
                ctx(self.editor), self.shared.id, AttractionPatch(tenant_ids=['tenant-1']),
            )
        self.assertEqual(self.container.attraction_repo.get(self.shared.id).tenant_ids, ['tenant-1', 'tenant-2'])

    def test_super_admin_moves_an_attraction_between_tenants(self):
        self.service.update_attraction(
            ctx(self.super_admin), self.attraction.id, AttractionPatch(tenant_ids=['tenant-2']),
        )
        self.assertEqual(self.container.attraction_repo.get(self.attraction.id).tenant_ids, ['tenant-2'])

    def test_slug_of_another_attraction_is_rejected(self):
        with self.assertRaises(AlreadyExists):
            self.service.update_attraction(ctx(self.editor), self.attraction.id, AttractionPatch(slug='river-cruise'))

    def test_missing_attraction(self):
        with self.assertRaises(NotFound):
            self.service.update_attraction(ctx(self.editor), 'missing', AttractionPatch(city='Oslo'))

    def test_empty_patch_changes_nothing(self):
        self.service.update_attraction(ctx(self.editor), self.attraction.id, AttractionPatch())
        self.assertEqual(self.container.attraction_repo.get(self.attraction.id).version, self.attraction.version)


class ArchiveAttractionTests(CatalogAdminTestCase):
    def test_manager_archives_and_archiving_again_is_harmless(self):
        attraction = make_attraction(self.container)

        self.service.archive_attraction(ctx(self.manager), attraction.id)
        self.service.archive_attraction(ctx(self.manager), attraction.id)

        stored = self.container.attraction_repo.get(attraction.id)
        self.assertEqual(stored.status, AttractionStatus.ARCHIVED)
        self.assertEqual(stored.version, attraction.version + 1)

    def test_editor_cannot_archive(self):
        attraction = make_attraction(self.container)
        with self.assertRaises(Forbidden):
            self.service.archive_attraction(ctx(self.editor), attraction.id)

    def test_archived_attraction_leaves_the_public_catalog(self):
        attraction = make_attraction(self.container, slug='harbour-cruise')
        self.service.archive_attraction(ctx(self.super_admin), attraction.id)

        with self.assertRaises(NotFound):
            self.container.catalog.get_attraction(ctx(), 'harbour-cruise')
        admin_view = self.container.catalog.admin_get_attraction(ctx(self.editor), attraction.id)
        self.assertEqual(admin_view.status, AttractionStatus.ARCHIVED)


class AdminGetAttractionTests(CatalogAdminTestCase):
    def test_draft_is_visible_to_its_tenant_admins_only(self):
        draft = make_attraction(self.container, status=AttractionStatus.DRAFT)

        self.assertEqual(self.container.catalog.admin_get_attraction(ctx(self.editor), draft.id).id, draft.id)
        outsider = make_user(self.container, Role.BRAND_ADMIN, tenants=['tenant-2'])
        with self.assertRaises(Forbidden):
            self.container.catalog.admin_get_attraction(ctx(outsider), draft.id)
        with self.assertRaises(Forbidden):
            self.container.catalog.admin_get_attraction(ctx(make_user(self.container)), draft.id)


class DestinationManagementTests(CatalogAdminTestCase):
    def test_super_admin_manages_destinations(self):
        destination = self.service.create_destination(
            ctx(self.super_admin),
            CreateDestinationCommand(name='Lake Bled', country='Slovenia', tenant_ids=['tenant-2', 'tenant-1']),
        )
        self.assertEqual(destination.slug, 'lake-bled')
        self.assertEqual(destination.tenant_ids, ['tenant-1', 'tenant-2'])

        self.service.update_destination(ctx(self.super_admin), destination.id, DestinationPatch(city='Bled'))
        self.service.archive_destination(ctx(self.super_admin), destination.id)

        stored = self.container.destination_repo.get(destination.id)
        self.assertEqual(stored.city, 'Bled')
        self.assertEqual(stored.status, AttractionStatus.ARCHIVED)

    def test_tenant_admins_cannot_manage_destinations(self):
        brand_admin = make_user(self.container, Role.BRAND_ADMIN, tenants=['tenant-1'])
        with self.assertRaises(Forbidden):
            self.service.create_destination(ctx(brand_admin), CreateDestinationCommand(name='Lake Bled'))

    def test_destination_slugs_are_unique(self):
        self.service.create_destination(ctx(self.super_admin), CreateDestinationCommand(name='Lake Bled'))
        with self.assertRaises(AlreadyExists):
            self.service.create_destination(ctx(self.super_admin), CreateDestinationCommand(name='Lake  Bled'))


class CategoryTests(CatalogAdminTestCase):
    def setUp(self):
        super().setUp()
        admin = ctx(self.super_admin)
        self.tours = self.service.create_category(admin, CreateCategoryCommand(name='Tours', sort_order=2))
        self.museums = self.service.create_category(admin, CreateCategoryCommand(name='Museums', sort_order=1))
        self.empty = self.service.create_category(admin, CreateCategoryCommand(name='Zoos', sort_order=3))
        make_attraction(self.container, category='tours')
        make_attraction(self.container, tenant_ids=('tenant-2',), category='tours')
        make_attraction(self.container, tenant_ids=('tenant-2',), category='museums')
        make_attraction(self.container, category='museums', status=AttractionStatus.DRAFT)

    def counts(self, context) -> list:
        return [(c.category.slug, c.count) for c in self.container.catalog.list_categories(context)]

    def test_public_list_is_ordered_and_counts_active_attractions(self):
        self.assertEqual(self.counts(ctx()), [('museums', 1), ('tours', 2), ('zoos', 0)])

    def test_tenant_list_drops_empty_categories(self):
        self.assertEqual(self.counts(ctx(tenant=self.tenant)), [('tours', 1)])

    def test_scoped_admin_counts_within_their_tenants(self):
        self.assertEqual(self.counts(ctx(self.editor)), [('tours', 1)])
        self.assertEqual(self.counts(ctx(make_user(self.container, Role.EDITOR))), [])

    def test_get_by_slug(self):
        counted = self.container.catalog.get_category(ctx(tenant=self.other_tenant), 'tours')
        self.assertEqual((counted.category.id, counted.count), (self.tours.id, 1))
        with self.assertRaises(NotFound):
            self.container.catalog.get_category(ctx(), 'gardens')

    def test_category_in_use_cannot_be_deactivated_or_renamed(self):
        with self.assertRaises(ValidationFailed):
            self.service.deactivate_category(ctx(self.super_admin), self.tours.id)
        with self.assertRaises(ValidationFailed):
            self.service.update_category(ctx(self.super_admin), self.tours.id, CategoryPatch(slug='guided-tours'))

    def test_deactivated_category_is_hidden(self):
        self.service.update_category(ctx(self.super_admin), self.empty.id, CategoryPatch(icon='paw'))
        self.service.deactivate_category(ctx(self.super_admin), self.empty.id)

        self.assertNotIn('zoos', [slug for slug, _ in self.counts(ctx())])
        with self.assertRaises(NotFound):
            self.container.catalog.get_category(ctx(), 'zoos')
        self.assertEqual(self.container.category_repo.get(self.empty.id).icon, 'paw')

    def test_only_super_admins_manage_categories(self):
        with self.assertRaises(Forbidden):
            self.service.create_category(ctx(self.manager), CreateCategoryCommand(name='Parks'))
        with self.assertRaises(AlreadyExists):
            self.service.create_category(ctx(self.super_admin), CreateCategoryCommand(name='Tours'))


class AvailabilityTests(CatalogAdminTestCase):
    def setUp(self):
        super().setUp()
        self.tour = make_attraction(self.container, slug='harbour-cruise')
        self.pass_ = make_attraction(
            self.container, slug='city-pass', availability_type=AvailabilityType.DATE_ONLY,
        )

    def test_default_range_lists_default_slots(self):
        days = self.container.catalog.availability(ctx(), 'harbour-cruise', today=date(2030, 6, 1))

        self.assertEqual(len(days), 31)
        self.assertEqual((days[0].date, days[-1].date), (date(2030, 6, 1), date(2030, 7, 1)))
        self.assertTrue(all(day.available for day in days))
        self.assertEqual(
            [slot.time for slot in days[0].time_slots],
            ['09:00', '10:00', '11:00', '14:00', '15:00', '16:00'],
        )
        self.assertEqual(days[0].time_slots[0].spots_left, 25)

    def test_date_only_attractions_have_no_slots(self):
        days = self.container.catalog.availability(ctx(), self.pass_.id, start=date(2030, 6, 1))
        self.assertEqual(days[0].time_slots, ())

    def test_month_runs_to_its_last_day(self):
        days = self.container.catalog.availability(ctx(), 'harbour-cruise', start=date(2030, 2, 1), month='2030-02')
        self.assertEqual((days[0].date, days[-1].date), (date(2030, 2, 1), date(2030, 2, 28)))

        days = self.container.catalog.availability(ctx(), 'harbour-cruise', month='2030-02', today=date(2030, 1, 20))
        self.assertEqual((days[0].date, len(days)), (date(2030, 1, 20), 40))

    def test_invalid_ranges(self):
        catalog = self.container.catalog
        with self.assertRaises(ValidationFailed):
            catalog.availability(ctx(), 'harbour-cruise', month='2030-13')
        with self.assertRaises(ValidationFailed):
            catalog.availability(ctx(), 'harbour-cruise', start=date(2030, 3, 1), month='2030-02')
        with self.assertRaises(ValidationFailed):
            catalog.availability(ctx(), 'harbour-cruise', start=date(2030, 1, 1), month='2030-04')

    def test_hidden_attractions_have_no_availability(self):
        draft = make_attraction(self.container, status=AttractionStatus.DRAFT)
        with self.assertRaises(NotFound):
            self.container.catalog.availability(ctx(), draft.id)
        with self.assertRaises(NotFound):
            self.container.catalog.availability(ctx(tenant=self.other_tenant), 'harbour-cruise')
