# rbac/tests/test_services.py
from datetime import timedelta
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from rbac.exceptions import RoleNotFound
from rbac.models import Permission, RolePermission, UserRole
from rbac.services import PermissionService
from users.actors import LawFirm, MedicalProvider, Patient
from users.models import CustomUser
from users.tests.helpers import make_user


class PermissionServiceTest(TestCase):

    def setUp(self):
        self.patient = make_user('patient')
        self.firm = make_user('firm', CustomUser.LAWFIRM)
        self.other_firm = make_user('otherfirm', CustomUser.LAWFIRM)
        self.provider = make_user('provider', CustomUser.MEDICAL_PROVIDER)

    def test_new_clients_get_client_role(self):
        self.assertTrue(PermissionService.check_permission(self.patient.pk, 'MANAGE_CONSENT'))
        self.assertTrue(PermissionService.check_permission(self.patient.pk, 'VIEW_CLIENT_PHI', 'client'))
        self.assertFalse(PermissionService.check_permission(self.patient.pk, 'VIEW_AUDIT_LOGS'))

    def test_firm_permissions_ignore_account_id(self):
        for permission in ('VIEW_GRANTED_CONSENTS', 'VIEW_CLIENT_PHI', 'MANAGE_CONSENT', 'MANAGE_ROLES'):
            results = {
                PermissionService.check_permission(firm_id, permission, 'lawfirm')
                for firm_id in (self.firm.pk, self.other_firm.pk, 987654)
            }
            self.assertEqual(len(results), 1, permission)

        self.assertTrue(PermissionService.check_permission(self.firm.pk, 'VIEW_GRANTED_CONSENTS', 'lawfirm'))
        self.assertFalse(PermissionService.check_permission(self.firm.pk, 'MANAGE_CONSENT', 'lawfirm'))

    def test_firm_role_rows_are_not_consulted(self):
        PermissionService.assign_role(self.firm.pk, 'PLATFORM_ADMIN')
        self.assertFalse(PermissionService.check_permission(self.firm.pk, 'VIEW_AUDIT_LOGS', 'lawfirm'))

    def test_provider_uses_provider_admin_role(self):
        self.assertTrue(PermissionService.check_actor_permission(MedicalProvider(self.provider.pk), 'VIEW_BILLING'))
        self.assertFalse(PermissionService.check_actor_permission(MedicalProvider(self.provider.pk), 'MANAGE_ROLES'))

    def test_unknown_actor_type_raises(self):
        with self.assertRaises(TypeError):
            PermissionService.check_actor_permission(object(), 'VIEW_BILLING')

    def test_expired_role_grants_nothing(self):
        PermissionService.assign_role(self.patient.pk, 'PLATFORM_ADMIN')
        self.assertTrue(PermissionService.check_permission(self.patient.pk, 'VIEW_AUDIT_LOGS'))

        UserRole.objects.filter(user=self.patient, role__name='PLATFORM_ADMIN').update(
            expires_at=timezone.now() - timedelta(seconds=1)
        )
        self.assertFalse(PermissionService.check_permission(self.patient.pk, 'VIEW_AUDIT_LOGS'))
        self.assertNotIn('PLATFORM_ADMIN', [a.role.name for a in PermissionService.get_user_roles(self.patient.pk)])
        self.assertNotIn('MANAGE_ROLES', [p.name for p in PermissionService.get_user_permissions(self.patient.pk)])

    def test_future_expiry_still_grants(self):
        PermissionService.assign_role(
            self.patient.pk, 'PLATFORM_ADMIN', expires_at=timezone.now() + timedelta(days=1)
        )
        self.assertTrue(PermissionService.check_permission(self.patient.pk, 'MANAGE_ROLES'))

    def test_assign_role_upserts(self):
        first = PermissionService.assign_role(self.patient.pk, 'PLATFORM_ADMIN')
        later = timezone.now() + timedelta(days=30)
        second = PermissionService.assign_role(
            self.patient.pk, 'PLATFORM_ADMIN', assigned_by=self.firm.pk, expires_at=later
        )
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(UserRole.objects.filter(user=self.patient, role__name='PLATFORM_ADMIN').count(), 1)
        second.refresh_from_db()
        self.assertEqual(second.expires_at, later)
        self.assertEqual(second.assigned_by_id, self.firm.pk)

    def test_assign_unknown_role(self):
        with self.assertRaises(RoleNotFound):
            PermissionService.assign_role(self.patient.pk, 'SUPERHERO')

    def test_remove_role(self):
        self.assertTrue(PermissionService.remove_role(self.patient.pk, 'CLIENT'))
        self.assertFalse(PermissionService.remove_role(self.patient.pk, 'CLIENT'))
        self.assertFalse(PermissionService.check_permission(self.patient.pk, 'MANAGE_CONSENT'))

    def test_any_and_all(self):
        self.assertTrue(PermissionService.check_any_permission(self.patient.pk, ['MANAGE_ROLES', 'MANAGE_CONSENT']))
        self.assertFalse(PermissionService.check_any_permission(self.patient.pk, ['MANAGE_ROLES', 'VIEW_AUDIT_LOGS']))
        self.assertTrue(PermissionService.check_all_permissions(self.patient.pk, ['MANAGE_CONSENT', 'VIEW_BILLING']))
        self.assertFalse(PermissionService.check_all_permissions(self.patient.pk, ['MANAGE_CONSENT', 'MANAGE_ROLES']))

    def test_all_permissions_short_circuits(self):
        with mock.patch.object(PermissionService, 'check_permission', return_value=False) as check:
            self.assertFalse(PermissionService.check_all_permissions(self.patient.pk, ['A', 'B', 'C']))
        check.assert_called_once_with(self.patient.pk, 'A')

    def test_user_permissions_listing(self):
        names = [p.name for p in PermissionService.get_user_permissions(self.patient.pk)]
        self.assertEqual(sorted(names), ['MANAGE_CONSENT', 'VIEW_BILLING', 'VIEW_CLIENT_PHI'])

    def test_actor_access(self):
        roles, permissions = PermissionService.get_actor_access(LawFirm(self.firm.pk))
        self.assertEqual(roles, ['LAW_FIRM_ADMIN'])
        self.assertIn('VIEW_GRANTED_CONSENTS', permissions)

        roles, permissions = PermissionService.get_actor_access(Patient(self.patient.pk))
        self.assertEqual(roles, ['CLIENT'])

    def test_sensitive_flags(self):
        self.assertTrue(PermissionService.is_sensitive_permission('VIEW_CLIENT_PHI'))
        self.assertFalse(PermissionService.is_sensitive_permission('MANAGE_CONSENT'))
        self.assertFalse(PermissionService.is_sensitive_permission('NOT_A_PERMISSION'))

    def test_permission_catalogue_grouped(self):
        grouped = PermissionService.get_all_permissions()
        self.assertEqual(set(grouped), {'consent', 'phi', 'audit', 'admin'})
        self.assertEqual([p.name for p in grouped['audit']], ['VIEW_AUDIT_LOGS'])


class PermissionFailClosedTest(TestCase):

    def setUp(self):
        self.patient = make_user('patient')

    def test_client_lookup_error_denies(self):
        with mock.patch.object(UserRole.objects, 'filter', side_effect=DatabaseError('down')):
            with self.assertLogs('rbac.services', level='ERROR'):
                self.assertFalse(PermissionService.check_permission(self.patient.pk, 'MANAGE_CONSENT'))
                self.assertFalse(PermissionService.check_any_permission(self.patient.pk, ['MANAGE_CONSENT']))
                self.assertEqual(PermissionService.get_user_permissions(self.patient.pk), [])

    def test_firm_lookup_error_denies(self):
        with mock.patch.object(RolePermission.objects, 'filter', side_effect=DatabaseError('down')):
            with self.assertLogs('rbac.services', level='ERROR'):
                self.assertFalse(PermissionService.check_permission(1, 'VIEW_CLIENT_PHI', 'lawfirm'))

    def test_sensitivity_lookup_error(self):
        with mock.patch.object(Permission.objects, 'filter', side_effect=DatabaseError('down')):
            with self.assertLogs('rbac.services', level='ERROR'):
                self.assertFalse(PermissionService.is_sensitive_permission('VIEW_CLIENT_PHI'))
