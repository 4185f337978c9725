# consent/models.py
from django.conf import settings
from django.db import models
from django.utils import timezone


class ConsentQuerySet(models.QuerySet):

    def delete(self):
        raise PermissionError("Consent records are never deleted; revoke them instead")


class ConsentRecord(models.Model):
    """
    One grant of PHI access from a patient to a law firm or medical provider.

    Several records may be active for the same patient/grantee pair at once;
    access is allowed if any of them covers the requested data type.
    Records move from active to revoked or expired and never come back.
    """
    FULL_ACCESS = 'FULL_ACCESS'
    MEDICAL_RECORDS_ONLY = 'MEDICAL_RECORDS_ONLY'
    BILLING_ONLY = 'BILLING_ONLY'
    LITIGATION_ONLY = 'LITIGATION_ONLY'
    CUSTOM = 'CUSTOM'

    CONSENT_TYPES = [
        (FULL_ACCESS, 'Full Access'),
        (MEDICAL_RECORDS_ONLY, 'Medical Records Only'),
        (BILLING_ONLY, 'Billing Only'),
        (LITIGATION_ONLY, 'Litigation Only'),
        (CUSTOM, 'Custom Scope'),
    ]

    GRANTEE_TYPES = [
        ('lawfirm', 'Law Firm'),
        ('medical_provider', 'Medical Provider'),
    ]

    ACTIVE = 'active'
    REVOKED = 'revoked'
    EXPIRED = 'expired'

    STATUS_CHOICES = [
        (ACTIVE, 'Active'),
        (REVOKED, 'Revoked'),
        (EXPIRED, 'Expired'),
    ]

    patient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='consent_records',
    )
    granted_to_type = models.CharField(max_length=20, choices=GRANTEE_TYPES)
    granted_to_id = models.BigIntegerField()
    consent_type = models.CharField(max_length=50, choices=CONSENT_TYPES, default=FULL_ACCESS)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=ACTIVE)

    expires_at = models.DateTimeField(null=True, blank=True)

    consent_method = models.CharField(max_length=30, default='electronic')
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    signature_data = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    revoked_at = models.DateTimeField(null=True, blank=True)
    revoked_reason = models.TextField(null=True, blank=True)

    objects = ConsentQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['patient', 'granted_to_type', 'granted_to_id', 'status']),
            models.Index(fields=['granted_to_type', 'granted_to_id', 'status']),
            models.Index(fields=['status', 'expires_at']),
        ]

    def __str__(self):
        return (
            f"{self.consent_type} from patient {self.patient_id} to "
            f"{self.granted_to_type} {self.granted_to_id} ({self.status})"
        )

    def delete(self, *args, **kwargs):
        raise PermissionError("Consent records are never deleted; revoke them instead")

    def is_valid(self, now=None):
        """Active and not past its expiry, whatever the stored status says"""
        now = now or timezone.now()
        if self.status != self.ACTIVE:
            return False
        return self.expires_at is None or self.expires_at > now


class ConsentScope(models.Model):
    """Per-data-type flags attached to a CUSTOM consent record"""
    consent = models.ForeignKey(ConsentRecord, on_delete=models.PROTECT, related_name='scopes')
    data_type = models.CharField(max_length=50)
    can_view = models.BooleanField(default=True)
    can_edit = models.BooleanField(default=False)

    objects = ConsentQuerySet.as_manager()

    class Meta:
        unique_together = ['consent', 'data_type']

    def __str__(self):
        return f"Consent {self.consent_id}: {self.data_type} (view={self.can_view}, edit={self.can_edit})"

    def delete(self, *args, **kwargs):
        raise PermissionError("Consent scope rows are kept with their consent record")
