# consent/services.py
import logging
from datetime import timedelta

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from audit.services import AuditLogger
from users.actors import GRANTEE_TYPES
from users.directory import grantee_display_name, patient_identity
from .exceptions import ConsentNotFound, ConsentStateError
from .models import ConsentRecord, ConsentScope

logger = logging.getLogger(__name__)

# Fixed consent types and the single data type each one covers
SCOPED_CONSENT_TYPES = {
    ConsentRecord.MEDICAL_RECORDS_ONLY: 'medical_records',
    ConsentRecord.BILLING_ONLY: 'billing',
    ConsentRecord.LITIGATION_ONLY: 'litigation',
}


def _scope_entry(entry):
    # accepts {"type": ..., "canView": ..., "canEdit": ...} or a bare data type string
    if isinstance(entry, str):
        return {'data_type': entry, 'can_view': True, 'can_edit': False}
    return {
        'data_type': entry['type'],
        'can_view': bool(entry.get('canView', True)),
        'can_edit': bool(entry.get('canEdit', False)),
    }


class ConsentService:
    """
    Service for patient consent to PHI sharing with law firms and providers.
    """

    @staticmethod
    def _valid_consents(patient_id, granted_to_type, granted_to_id):
        # expiry is checked here too; the sweep may not have run yet
        return ConsentRecord.objects.filter(
            patient_id=patient_id,
            granted_to_type=granted_to_type,
            granted_to_id=granted_to_id,
            status=ConsentRecord.ACTIVE,
        ).filter(Q(expires_at__isnull=True) | Q(expires_at__gt=timezone.now()))

    @staticmethod
    def check_consent(patient_id, granted_to_type, granted_to_id, data_type=None):
        """
        Check if valid consent exists for PHI access.

        Any one active, unexpired record covering ``data_type`` is enough.

        Args:
            patient_id: Patient/client user ID
            granted_to_type: 'lawfirm' or 'medical_provider'
            granted_to_id: ID of the law firm or medical provider account
            data_type: Specific data type (medical_records, billing, ...) (optional)

        Returns:
            bool: True if access is covered; False on any storage error
        """
        try:
            consents = ConsentService._valid_consents(patient_id, granted_to_type, granted_to_id)
            if not data_type:
                return consents.exists()

            for consent_id, consent_type in consents.values_list('id', 'consent_type'):
                if consent_type == ConsentRecord.FULL_ACCESS:
                    return True
                if SCOPED_CONSENT_TYPES.get(consent_type) == data_type:
                    return True
                if consent_type == data_type:
                    return True
                if consent_type == ConsentRecord.CUSTOM and ConsentScope.objects.filter(
                    consent_id=consent_id, data_type=data_type, can_view=True
                ).exists():
                    return True
            return False
        except DatabaseError:
            logger.exception(
                f"Consent check failed for patient {patient_id} / {granted_to_type} {granted_to_id}; denying"
            )
            return False

    @staticmethod
    def grant_consent(patient_id, granted_to_type, granted_to_id, consent_type=ConsentRecord.FULL_ACCESS,
                      expires_at=None, consent_method='electronic', ip_address=None,
                      signature_data=None, custom_data_types=None):
        """
        Grant consent for PHI access.

        Existing grants to the same grantee are left alone; the new record
        simply adds to them. CUSTOM scope rows are written in the same
        transaction as the record.

        Args:
            custom_data_types: For CUSTOM consent, a list of
                ``{"type", "canView", "canEdit"}`` entries

        Returns:
            ConsentRecord: The new active record
        """
        if granted_to_type not in GRANTEE_TYPES:
            raise ValueError(f"Consent cannot be granted to {granted_to_type!r}")
        scope_entries = []
        if consent_type == ConsentRecord.CUSTOM and custom_data_types:
            scope_entries = [_scope_entry(entry) for entry in custom_data_types]
            data_types = [entry['data_type'] for entry in scope_entries]
            if len(set(data_types)) != len(data_types):
                raise ValueError(f"Duplicate data types in custom scope: {data_types}")

        with transaction.atomic():
            consent = ConsentRecord.objects.create(
                patient_id=patient_id,
                granted_to_type=granted_to_type,
                granted_to_id=granted_to_id,
                consent_type=consent_type,
                status=ConsentRecord.ACTIVE,
                expires_at=expires_at,
                consent_method=consent_method,
                ip_address=ip_address,
                signature_data=signature_data,
            )
            if scope_entries:
                ConsentScope.objects.bulk_create([
                    ConsentScope(consent=consent, **entry) for entry in scope_entries
                ])

        logger.info(
            f"Patient {patient_id} granted {consent_type} to {granted_to_type} {granted_to_id} "
            f"(consent {consent.pk}, expires {expires_at})"
        )
        return consent

    @staticmethod
    def revoke_consent(consent_id, reason=None):
        """
        Revoke a consent. Callers must have checked that the requester owns it.

        Raises:
            ConsentNotFound: If the consent does not exist
            ConsentStateError: If the consent is already revoked or expired
        """
        with transaction.atomic():
            consent = ConsentRecord.objects.select_for_update().filter(pk=consent_id).first()
            if consent is None:
                raise ConsentNotFound(consent_id)
            if consent.status != ConsentRecord.ACTIVE:
                raise ConsentStateError(consent_id, consent.status)

            consent.status = ConsentRecord.REVOKED
            consent.revoked_at = timezone.now()
            consent.revoked_reason = reason
            consent.save(update_fields=['status', 'revoked_at', 'revoked_reason', 'updated_at'])

        logger.info(f"Consent {consent_id} revoked")
        return consent

    @staticmethod
    def expire_old_consents():
        """
        Mark every active consent past its expiry as expired.

        Safe to re-run: already transitioned rows no longer match.

        Returns:
            int: Number of consents expired
        """
        now = timezone.now()
        try:
            count = ConsentRecord.objects.filter(
                status=ConsentRecord.ACTIVE,
                expires_at__isnull=False,
                expires_at__lte=now,
            ).update(status=ConsentRecord.EXPIRED, updated_at=now)
        except DatabaseError:
            logger.exception("Consent expiry sweep failed")
            return 0
        if count:
            logger.info(f"Expired {count} consent(s)")
        return count

    @staticmethod
    def get_patient_consents(patient_id, status=None):
        """
        Get all consents a patient has granted, newest first, each with
        ``granted_to_name`` set.
        """
        try:
            consents = ConsentRecord.objects.filter(patient_id=patient_id)
            if status:
                consents = consents.filter(status=status)
            consents = list(consents.order_by('-created_at'))
            for consent in consents:
                consent.granted_to_name = grantee_display_name(consent.granted_to_type, consent.granted_to_id)
            return consents
        except DatabaseError:
            logger.exception(f"Could not list consents of patient {patient_id}")
            return []

    @staticmethod
    def get_granted_consents(granted_to_type, granted_to_id, status=ConsentRecord.ACTIVE):
        """
        Get the consents granted to a law firm or provider, newest first,
        each with ``patient_info`` (first name, last name, email) set.
        """
        try:
            consents = ConsentRecord.objects.filter(
                granted_to_type=granted_to_type,
                granted_to_id=granted_to_id,
            )
            if status:
                consents = consents.filter(status=status)
            consents = list(consents.order_by('-created_at'))
            for consent in consents:
                consent.patient_info = patient_identity(consent.patient_id)
            return consents
        except DatabaseError:
            logger.exception(f"Could not list consents granted to {granted_to_type} {granted_to_id}")
            return []

    @staticmethod
    def get_consent_details(consent_id):
        """
        Get one consent with ``granted_to_name`` and, for CUSTOM consents,
        its ``scope`` rows. Returns None if it does not exist.
        """
        try:
            consent = ConsentRecord.objects.filter(pk=consent_id).first()
            if consent is None:
                return None
            consent.granted_to_name = grantee_display_name(consent.granted_to_type, consent.granted_to_id)
            consent.scope = (
                list(consent.scopes.order_by('data_type'))
                if consent.consent_type == ConsentRecord.CUSTOM else None
            )
            return consent
        except DatabaseError:
            logger.exception(f"Could not load consent {consent_id}")
            return None

    @staticmethod
    def auto_grant_consent_to_firm(client_id, firm_id):
        """
        Give a law firm full access for the default term when a client
        registers with that firm's code.

        Returns:
            ConsentRecord: The new consent
        """
        expires_at = timezone.now() + timedelta(days=settings.CONSENT_DEFAULT_EXPIRY_DAYS)
        consent = ConsentService.grant_consent(
            patient_id=client_id,
            granted_to_type='lawfirm',
            granted_to_id=firm_id,
            consent_type=ConsentRecord.FULL_ACCESS,
            expires_at=expires_at,
            consent_method='automatic',
            signature_data='Auto-granted during registration with firm code',
        )
        AuditLogger.log(
            actor_id=client_id,
            actor_type='client',
            action='CONSENT_AUTO_GRANTED',
            entity_type='ConsentRecord',
            entity_id=consent.pk,
            target_user_id=client_id,
            metadata={
                'grantedToType': 'lawfirm',
                'grantedToId': firm_id,
                'reason': 'Auto-granted during registration',
            },
        )
        return consent
