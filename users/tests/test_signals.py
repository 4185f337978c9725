# users/tests/test_signals.py
from django.test import TestCase

from rbac.models import UserRole
from rbac.services import PermissionService
from users.models import CustomUser, LawFirmProfile, MedicalProviderProfile
from users.tests.helpers import make_user


class UserSignalsTest(TestCase):
    """Test signals fired when accounts are created"""

    def test_client_gets_client_role(self):
        user = make_user('patient')
        self.assertEqual(PermissionService.get_user_roles(user.pk)[0].role.name, 'CLIENT')
        self.assertTrue(PermissionService.check_permission(user.pk, 'MANAGE_CONSENT'))

    def test_lawfirm_gets_profile_and_no_role_rows(self):
        user = make_user('firm', CustomUser.LAWFIRM, first_name='Smith', last_name='Legal')
        profile = LawFirmProfile.objects.get(user=user)
        self.assertEqual(profile.firm_name, 'Smith Legal')
        self.assertFalse(UserRole.objects.filter(user_id=user.pk).exists())

    def test_provider_gets_profile(self):
        user = make_user('provider', CustomUser.MEDICAL_PROVIDER, first_name='City', last_name='Clinic')
        self.assertEqual(MedicalProviderProfile.objects.get(user=user).provider_name, 'City Clinic')

    def test_signal_only_on_create(self):
        user = make_user('patient')
        PermissionService.remove_role(user.pk, 'CLIENT')
        user.first_name = 'Changed'
        user.save()
        self.assertEqual(PermissionService.get_user_roles(user.pk), [])
