# rbac/tests/test_seed.py
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from rbac import defaults
from rbac.models import Permission, Role, RolePermission


class SeedDataTest(TestCase):
    """The data migration has already run against the test database"""

    def test_roles_and_permissions_seeded(self):
        self.assertEqual(set(Role.objects.values_list('name', flat=True)), set(defaults.ROLES))
        self.assertEqual(set(Permission.objects.values_list('name', flat=True)), set(defaults.PERMISSIONS))
        expected_links = sum(len(names) for names in defaults.ROLE_PERMISSIONS.values())
        self.assertEqual(RolePermission.objects.count(), expected_links)

    def test_sensitive_flags_follow_defaults(self):
        sensitive = set(Permission.objects.filter(is_sensitive=True).values_list('name', flat=True))
        self.assertEqual(sensitive, {'VIEW_CLIENT_PHI', 'VIEW_BILLING', 'VIEW_AUDIT_LOGS', 'MANAGE_ROLES'})

    def test_seed_command_is_idempotent(self):
        out = StringIO()
        call_command('seed_rbac', stdout=out)
        self.assertIn('(0 new role-permission links)', out.getvalue())
        self.assertEqual(Role.objects.count(), len(defaults.ROLES))

    def test_seed_command_restores_missing_links(self):
        RolePermission.objects.filter(role__name='CLIENT', permission__name='MANAGE_CONSENT').delete()
        out = StringIO()
        call_command('seed_rbac', stdout=out)
        self.assertIn('(1 new role-permission links)', out.getvalue())
        self.assertTrue(
            RolePermission.objects.filter(role__name='CLIENT', permission__name='MANAGE_CONSENT').exists()
        )
