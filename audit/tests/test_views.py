# audit/tests/test_views.py
from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from audit.models import AuditLogEntry
from audit.services import AuditLogger
from users.models import CustomUser
from users.tests.helpers import authenticated_client, make_platform_admin, make_user


class AuditViewsTest(TestCase):

    def setUp(self):
        self.admin_client = authenticated_client(make_platform_admin())
        self.patient = make_user('patient')
        self.firm = make_user('firm', CustomUser.LAWFIRM)

    def test_phi_access_logs(self):
        for _ in range(3):
            AuditLogger.log_phi_access(user_id=self.firm.pk, user_type='lawfirm', action='VIEW_PHI',
                                       patient_id=self.patient.pk, record_type='PatientRecord')

        response = self.admin_client.get(
            reverse('audit-phi-access', args=[self.patient.pk]), {'limit': 2}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)
        self.assertEqual(response.data['logs'][0]['target_user_id'], self.patient.pk)

    def test_failed_logins(self):
        for _ in range(3):
            AuditLogger.log_auth(email='x@example.com', action='LOGIN_FAILED', ip_address='10.0.0.1',
                                 success=False)
        response = self.admin_client.get(reverse('audit-failed-logins'), {'hours': 1})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['attempts'][0]['attempt_count'], 3)

    def test_suspicious_activity(self):
        for _ in range(3):
            AuditLogger.log_phi_access(user_id=self.firm.pk, user_type='lawfirm', action='VIEW_PHI',
                                       patient_id=self.patient.pk, record_type='PatientRecord')
        response = self.admin_client.get(reverse('audit-suspicious-activity'), {'threshold': 2})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['actors'][0]['actor_id'], self.firm.pk)
        self.assertEqual(response.data['actors'][0]['total_accesses'], 3)

    def test_invalid_query(self):
        response = self.admin_client.get(reverse('audit-failed-logins'), {'hours': 'soon'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_requires_audit_permission(self):
        for user in (self.patient, self.firm):
            response = authenticated_client(user).get(reverse('audit-phi-access', args=[self.patient.pk]))
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(AuditLogEntry.objects.filter(action='PERMISSION_DENIED').count(), 2)

    def test_sensitive_permission_use_is_audited(self):
        self.admin_client.get(reverse('audit-failed-logins'))
        entry = AuditLogEntry.objects.get(action='SENSITIVE_PERMISSION_USED')
        self.assertEqual(entry.metadata['permissions'], ['VIEW_AUDIT_LOGS'])
