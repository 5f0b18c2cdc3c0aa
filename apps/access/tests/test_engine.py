"""Tests for the access control predicates and scope filters."""

from __future__ import annotations

from django.test import SimpleTestCase

from apps.access.engine import (
    CATALOG_EDITOR_ROLES,
    CATALOG_MANAGER_ROLES,
    ScopeKind,
    admin_scope,
    can_access_owned_resource,
    can_manage_users,
    ensure_owned_resource_access,
    ensure_role,
    ensure_shared_resource_access,
    ensure_super_admin,
    has_any_tenant_access,
    has_tenant_access,
    scope_filter,
)
from apps.users.domain.entities import Identity, Role
from shared.domain.exceptions import Forbidden, Unauthenticated


def who(role: Role, user_id: str = 'u-1', tenants=()) -> Identity:
    return Identity(id=user_id, role=role, assigned_tenants=frozenset(tenants))


class TenantAccessTests(SimpleTestCase):
    def test_super_admin_reaches_every_tenant(self) -> None:
        self.assertTrue(has_tenant_access(who(Role.SUPER_ADMIN), 'tenant-9'))

    def test_scoped_admins_reach_only_assigned_tenants(self) -> None:
        for role in (Role.BRAND_ADMIN, Role.MANAGER, Role.EDITOR, Role.VIEWER):
            admin = who(role, tenants={'tenant-1'})
            self.assertTrue(has_tenant_access(admin, 'tenant-1'), role)
            self.assertFalse(has_tenant_access(admin, 'tenant-2'), role)

    def test_customers_and_anonymous_have_no_tenant_access(self) -> None:
        self.assertFalse(has_tenant_access(who(Role.CUSTOMER, tenants={'tenant-1'}), 'tenant-1'))
        self.assertFalse(has_tenant_access(who(Role.GUEST), 'tenant-1'))
        self.assertFalse(has_tenant_access(None, 'tenant-1'))

    def test_missing_tenant_is_denied_for_scoped_admins(self) -> None:
        self.assertFalse(has_tenant_access(who(Role.MANAGER, tenants={'tenant-1'}), None))


class OwnedResourceTests(SimpleTestCase):
    def test_owner_can_access(self) -> None:
        self.assertTrue(can_access_owned_resource(who(Role.CUSTOMER, 'u-1'), 'u-1', 'tenant-1'))

    def test_other_customer_cannot_access(self) -> None:
        self.assertFalse(can_access_owned_resource(who(Role.CUSTOMER, 'u-2'), 'u-1', 'tenant-1'))

    def test_admin_of_the_tenant_can_access(self) -> None:
        viewer = who(Role.VIEWER, 'u-9', tenants={'tenant-1'})
        self.assertTrue(can_access_owned_resource(viewer, 'u-1', 'tenant-1'))

    def test_admin_of_another_tenant_cannot_access(self) -> None:
        brand_admin = who(Role.BRAND_ADMIN, 'u-9', tenants={'tenant-2'})
        self.assertFalse(can_access_owned_resource(brand_admin, 'u-1', 'tenant-1'))

    def test_guest_resources_are_only_reachable_by_admins(self) -> None:
        self.assertFalse(can_access_owned_resource(who(Role.CUSTOMER), None, 'tenant-1'))
        self.assertTrue(can_access_owned_resource(who(Role.SUPER_ADMIN), None, 'tenant-1'))

    def test_anonymous_caller_is_unauthenticated_not_forbidden(self) -> None:
        with self.assertRaises(Unauthenticated):
            ensure_owned_resource_access(None, 'u-1', 'tenant-1', 'bookings.view')

    def test_denial_raises_forbidden_with_message(self) -> None:
        with self.assertRaisesMessage(Forbidden, 'Not authorized to view this booking'):
            ensure_owned_resource_access(
                who(Role.CUSTOMER, 'u-2'), 'u-1', 'tenant-1',
                'bookings.view', 'Not authorized to view this booking',
            )


class ScopeFilterTests(SimpleTestCase):
    def test_scope_kinds_by_role(self) -> None:
        self.assertEqual(scope_filter(None).kind, ScopeKind.PUBLIC)
        self.assertEqual(scope_filter(who(Role.SUPER_ADMIN)).kind, ScopeKind.ALL)
        self.assertEqual(scope_filter(who(Role.EDITOR, tenants={'t'})).kind, ScopeKind.TENANTS)
        self.assertEqual(scope_filter(who(Role.CUSTOMER)).kind, ScopeKind.SELF)

    def test_filters(self) -> None:
        self.assertEqual(scope_filter(who(Role.SUPER_ADMIN)).filters(), {})
        self.assertEqual(
            scope_filter(who(Role.MANAGER, tenants={'b', 'a'})).filters(),
            {'tenant_id__in': ['a', 'b']},
        )
        self.assertEqual(
            scope_filter(who(Role.MANAGER, tenants={'a'})).filters(tenant_field='tenant_ids', many=True),
            {'tenant_ids__overlap': ['a']},
        )
        self.assertEqual(scope_filter(who(Role.CUSTOMER, 'u-7')).filters(), {'user_id': 'u-7'})

    def test_admin_without_tenants_gets_an_empty_scope(self) -> None:
        scope = scope_filter(who(Role.MANAGER))
        self.assertTrue(scope.is_empty)
        self.assertEqual(scope.filters(), {'tenant_id__in': []})

    def test_admin_scope_rejects_non_admins(self) -> None:
        with self.assertRaises(Forbidden):
            admin_scope(who(Role.CUSTOMER), None, 'bookings.list')
        with self.assertRaises(Unauthenticated):
            admin_scope(None, None, 'bookings.list')

    def test_admin_scope_narrows_to_request_tenant(self) -> None:
        scope = admin_scope(who(Role.SUPER_ADMIN), 'tenant-1', 'bookings.list')
        self.assertEqual(scope.tenant_ids, frozenset({'tenant-1'}))

        with self.assertRaises(Forbidden):
            admin_scope(who(Role.MANAGER, tenants={'tenant-2'}), 'tenant-1', 'bookings.list')


class ManageUsersTests(SimpleTestCase):
    def test_super_admin_manages_everyone(self) -> None:
        self.assertTrue(can_manage_users(who(Role.SUPER_ADMIN), Role.SUPER_ADMIN, []))

    def test_brand_admin_manages_scoped_roles_in_own_tenants(self) -> None:
        brand_admin = who(Role.BRAND_ADMIN, tenants={'tenant-1'})
        self.assertTrue(can_manage_users(brand_admin, Role.MANAGER, ['tenant-1']))
        self.assertFalse(can_manage_users(brand_admin, Role.MANAGER, ['tenant-1', 'tenant-2']))
        self.assertFalse(can_manage_users(brand_admin, Role.MANAGER, []))
        self.assertFalse(can_manage_users(brand_admin, Role.SUPER_ADMIN, ['tenant-1']))

    def test_other_roles_manage_nobody(self) -> None:
        self.assertFalse(can_manage_users(who(Role.MANAGER, tenants={'tenant-1'}), Role.VIEWER, ['tenant-1']))
        self.assertFalse(can_manage_users(None, Role.VIEWER, ['tenant-1']))


class SharedResourceTests(SimpleTestCase):
    def test_one_reachable_tenant_is_enough(self) -> None:
        editor = who(Role.EDITOR, tenants={'tenant-2'})
        self.assertTrue(has_any_tenant_access(editor, ['tenant-1', 'tenant-2']))
        self.assertFalse(has_any_tenant_access(editor, ['tenant-1']))
        self.assertFalse(has_any_tenant_access(editor, []))

    def test_super_admin_reaches_resources_without_tenants(self) -> None:
        self.assertTrue(has_any_tenant_access(who(Role.SUPER_ADMIN), []))

    def test_denial(self) -> None:
        with self.assertRaises(Unauthenticated):
            ensure_shared_resource_access(None, ['tenant-1'], 'attractions.update')
        with self.assertRaises(Forbidden) as raised:
            ensure_shared_resource_access(
                who(Role.CUSTOMER), ['tenant-1'], 'attractions.update', 'Access denied to this attraction',
            )
        self.assertEqual(raised.exception.message, 'Access denied to this attraction')


class RoleTests(SimpleTestCase):
    def test_catalog_roles(self) -> None:
        self.assertIn(Role.EDITOR, CATALOG_EDITOR_ROLES)
        self.assertNotIn(Role.EDITOR, CATALOG_MANAGER_ROLES)
        self.assertNotIn(Role.VIEWER, CATALOG_EDITOR_ROLES)
        self.assertEqual(ensure_role(who(Role.MANAGER), CATALOG_MANAGER_ROLES, 'attractions.archive').role, Role.MANAGER)

        with self.assertRaises(Forbidden):
            ensure_role(who(Role.VIEWER), CATALOG_EDITOR_ROLES, 'attractions.create')

    def test_super_admin_only(self) -> None:
        ensure_super_admin(who(Role.SUPER_ADMIN), 'tenants.create')
        with self.assertRaises(Forbidden) as raised:
            ensure_super_admin(who(Role.BRAND_ADMIN, tenants={'tenant-1'}), 'tenants.create')
        self.assertEqual(raised.exception.message, 'Super admin access required')
        with self.assertRaises(Unauthenticated):
            ensure_super_admin(None, 'tenants.create')
