# consent/tests/test_views.py
from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from audit.models import AuditLogEntry
from consent.models import ConsentRecord
from consent.services import ConsentService
from users.models import CustomUser, LawFirmProfile
from users.tests.helpers import authenticated_client, make_user


class ConsentViewTestBase(TestCase):

    def setUp(self):
        self.patient = make_user('patient', first_name='Pat', last_name='Client')
        self.other_patient = make_user('otherpatient')
        self.firm = make_user('firm', CustomUser.LAWFIRM, first_name='Smith', last_name='Legal')
        self.provider = make_user('provider', CustomUser.MEDICAL_PROVIDER)

        self.patient_client = authenticated_client(self.patient)
        self.firm_client = authenticated_client(self.firm)

    def grant(self, grantee, consent_type=ConsentRecord.FULL_ACCESS, patient=None):
        return ConsentService.grant_consent(
            (patient or self.patient).pk, grantee.user_type, grantee.pk, consent_type
        )


class GrantConsentViewTest(ConsentViewTestBase):

    def test_grant_full_access(self):
        response = self.patient_client.post(reverse('consent-grant'), {
            'grantedToType': 'lawfirm',
            'grantedToId': self.firm.pk,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Consent granted successfully')
        consent = ConsentRecord.objects.get(pk=response.data['consent']['id'])
        self.assertEqual(consent.patient_id, self.patient.pk)
        self.assertEqual(consent.consent_type, ConsentRecord.FULL_ACCESS)
        self.assertGreater(consent.expires_at, timezone.now() + timedelta(days=364))

        entry = AuditLogEntry.objects.get(action='CONSENT_GRANTED')
        self.assertEqual(entry.status, AuditLogEntry.SUCCESS)
        self.assertEqual(entry.entity_id, str(consent.pk))
        self.assertEqual(entry.actor_id, self.patient.pk)

    def test_grant_without_expiry(self):
        response = self.patient_client.post(reverse('consent-grant'), {
            'grantedToType': 'medical_provider',
            'grantedToId': self.provider.pk,
            'consentType': 'MEDICAL_RECORDS_ONLY',
            'expiresInDays': None,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['consent']['expires_at'])

    def test_grant_custom(self):
        response = self.patient_client.post(reverse('consent-grant'), {
            'grantedToType': 'lawfirm',
            'grantedToId': self.firm.pk,
            'consentType': 'CUSTOM',
            'customDataTypes': [{'type': 'billing', 'canView': True}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(ConsentService.check_consent(self.patient.pk, 'lawfirm', self.firm.pk, 'billing'))
        self.assertFalse(ConsentService.check_consent(self.patient.pk, 'lawfirm', self.firm.pk, 'litigation'))

    def test_custom_without_data_types(self):
        response = self.patient_client.post(reverse('consent-grant'), {
            'grantedToType': 'lawfirm',
            'grantedToId': self.firm.pk,
            'consentType': 'CUSTOM',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('customDataTypes', response.data)

    def test_custom_with_repeated_data_type(self):
        response = self.patient_client.post(reverse('consent-grant'), {
            'grantedToType': 'lawfirm',
            'grantedToId': self.firm.pk,
            'consentType': 'CUSTOM',
            'customDataTypes': [{'type': 'billing'}, {'type': 'billing', 'canEdit': True}],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('billing', str(response.data['customDataTypes']))
        self.assertFalse(ConsentRecord.objects.exists())
        self.assertFalse(AuditLogEntry.objects.filter(action='CONSENT_GRANTED').exists())

    def test_missing_or_invalid_grantee_type(self):
        response = self.patient_client.post(reverse('consent-grant'), {'grantedToId': self.firm.pk}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.patient_client.post(reverse('consent-grant'), {
            'grantedToType': 'insurer',
            'grantedToId': self.firm.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('grantedToType', response.data)
        self.assertFalse(ConsentRecord.objects.exists())

    def test_grantee_must_exist_with_that_type(self):
        response = self.patient_client.post(reverse('consent-grant'), {
            'grantedToType': 'medical_provider',
            'grantedToId': self.firm.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('grantedToId', response.data)

    def test_firm_cannot_grant(self):
        response = self.firm_client.post(reverse('consent-grant'), {
            'grantedToType': 'lawfirm',
            'grantedToId': self.firm.pk,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(AuditLogEntry.objects.filter(action='PERMISSION_DENIED').count(), 1)

    def test_unauthenticated(self):
        response = APIClient().post(reverse('consent-grant'), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class FirmCodeConsentViewTest(ConsentViewTestBase):

    def setUp(self):
        super().setUp()
        LawFirmProfile.objects.filter(user=self.firm).update(firm_code='SMITH01')

    def test_links_client_to_firm(self):
        response = self.patient_client.post(reverse('consent-firm-code'), {'firmCode': 'smith01'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        consent = ConsentRecord.objects.get(pk=response.data['consent']['id'])
        self.assertEqual(consent.granted_to_id, self.firm.pk)
        self.assertEqual(consent.consent_type, ConsentRecord.FULL_ACCESS)
        self.assertEqual(consent.consent_method, 'automatic')
        self.assertTrue(ConsentService.check_consent(self.patient.pk, 'lawfirm', self.firm.pk, 'billing'))

        entry = AuditLogEntry.objects.get(action='CONSENT_AUTO_GRANTED')
        self.assertEqual(entry.actor_id, self.patient.pk)
        self.assertEqual(entry.metadata['grantedToId'], self.firm.pk)

    def test_unknown_code(self):
        response = self.patient_client.post(reverse('consent-firm-code'), {'firmCode': 'NOPE'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertFalse(ConsentRecord.objects.exists())

    def test_missing_code(self):
        response = self.patient_client.post(reverse('consent-firm-code'), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_firm_cannot_use_codes(self):
        response = self.firm_client.post(reverse('consent-firm-code'), {'firmCode': 'SMITH01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(ConsentRecord.objects.exists())


class RevokeConsentViewTest(ConsentViewTestBase):

    def test_revoke_own_consent(self):
        consent = self.grant(self.firm)
        response = self.patient_client.post(
            reverse('consent-revoke', args=[consent.pk]), {'reason': 'Case closed'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['consent']['status'], ConsentRecord.REVOKED)
        self.assertEqual(response.data['consent']['revoked_reason'], 'Case closed')

        entry = AuditLogEntry.objects.get(action='CONSENT_REVOKED')
        self.assertEqual(entry.metadata['reason'], 'Case closed')

    def test_revoke_someone_elses_consent(self):
        consent = self.grant(self.firm, patient=self.other_patient)
        response = self.patient_client.post(reverse('consent-revoke', args=[consent.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        consent.refresh_from_db()
        self.assertEqual(consent.status, ConsentRecord.ACTIVE)
        self.assertFalse(AuditLogEntry.objects.filter(action='CONSENT_REVOKED').exists())

    def test_revoke_unknown(self):
        response = self.patient_client.post(reverse('consent-revoke', args=[424242]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_revoke_twice(self):
        consent = self.grant(self.firm)
        self.patient_client.post(reverse('consent-revoke', args=[consent.pk]))
        response = self.patient_client.post(reverse('consent-revoke', args=[consent.pk]))
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(AuditLogEntry.objects.filter(action='CONSENT_REVOKED').count(), 1)


class PatientConsentViewsTest(ConsentViewTestBase):

    def test_my_consents(self):
        self.grant(self.firm)
        revoked = self.grant(self.provider)
        ConsentService.revoke_consent(revoked.pk)
        self.grant(self.firm, patient=self.other_patient)

        response = self.patient_client.get(reverse('consent-mine'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)

        response = self.patient_client.get(reverse('consent-mine'), {'status': 'active'})
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['consents'][0]['granted_to_name'], 'Smith Legal')

    def test_consent_detail(self):
        consent = ConsentService.grant_consent(
            self.patient.pk, 'lawfirm', self.firm.pk, ConsentRecord.CUSTOM,
            custom_data_types=[{'type': 'litigation'}]
        )
        response = self.patient_client.get(reverse('consent-detail', args=[consent.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['consent']['scope'][0]['data_type'], 'litigation')

    def test_consent_detail_not_owner(self):
        consent = self.grant(self.firm, patient=self.other_patient)
        response = self.patient_client.get(reverse('consent-detail', args=[consent.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_consent_detail_unknown(self):
        response = self.patient_client.get(reverse('consent-detail', args=[424242]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class GranteeConsentViewsTest(ConsentViewTestBase):

    def test_granted_consents(self):
        self.grant(self.firm)
        self.grant(self.firm, patient=self.other_patient)
        self.grant(self.provider)

        response = self.firm_client.get(reverse('consent-granted'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total'], 2)
        emails = {consent['email'] for consent in response.data['consents']}
        self.assertEqual(emails, {'patient@example.com', 'otherpatient@example.com'})

    def test_patient_cannot_list_granted(self):
        response = self.patient_client.get(reverse('consent-granted'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_consent_status(self):
        self.grant(self.firm, ConsentRecord.BILLING_ONLY)
        url = reverse('consent-status', args=[self.patient.pk])

        response = self.firm_client.get(url, {'dataType': 'billing'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'hasConsent': True,
            'patientId': self.patient.pk,
            'dataType': 'billing',
            'grantedToType': 'lawfirm',
            'grantedToId': self.firm.pk,
        })

        response = self.firm_client.get(url, {'dataType': 'medical_records'})
        self.assertFalse(response.data['hasConsent'])

        response = self.firm_client.get(url)
        self.assertTrue(response.data['hasConsent'])
        self.assertEqual(response.data['dataType'], 'all')

    def test_consent_status_patient_forbidden(self):
        response = self.patient_client.get(reverse('consent-status', args=[self.other_patient.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
