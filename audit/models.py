# audit/models.py
from django.db import models
from django.utils import timezone


class AuditLogImmutableError(Exception):
    """Raised on any attempt to change or remove an audit entry"""


class AuditLogQuerySet(models.QuerySet):

    def update(self, **kwargs):
        raise AuditLogImmutableError("Audit entries cannot be updated")

    def delete(self):
        raise AuditLogImmutableError("Audit entries cannot be deleted")


class AuditLogEntry(models.Model):
    """
    Append-only record of an authorization-relevant event.
    Complies with HIPAA audit requirements by tracking who, what, when, and where.

    Entries are written once and kept for the retention period
    (AUDIT_RETENTION_DAYS); nothing in the application updates or deletes them.
    """
    SUCCESS = 'SUCCESS'
    FAILURE = 'FAILURE'
    DENIED = 'DENIED'

    STATUS_CHOICES = [
        (SUCCESS, 'Success'),
        (FAILURE, 'Failure'),
        (DENIED, 'Denied'),
    ]

    # Who (0 when no account is known, e.g. a failed login)
    actor_id = models.BigIntegerField()
    actor_type = models.CharField(max_length=20)

    # What
    action = models.CharField(max_length=50)
    entity_type = models.CharField(max_length=50, null=True, blank=True)
    entity_id = models.CharField(max_length=100, null=True, blank=True)
    target_user_id = models.BigIntegerField(null=True, blank=True)  # patient whose PHI was touched
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=SUCCESS)
    metadata = models.JSONField(default=dict, blank=True)

    # When
    timestamp = models.DateTimeField(default=timezone.now)

    # Where
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(null=True, blank=True)

    objects = AuditLogQuerySet.as_manager()

    class Meta:
        ordering = ['-timestamp']
        verbose_name_plural = 'audit log entries'
        indexes = [
            models.Index(fields=['target_user_id', 'timestamp']),
            models.Index(fields=['action', 'timestamp']),
            models.Index(fields=['actor_id', 'actor_type']),
        ]

    def __str__(self):
        return f"{self.action} by {self.actor_type} {self.actor_id} ({self.status}) at {self.timestamp}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise AuditLogImmutableError(f"Audit entry {self.pk} cannot be updated")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AuditLogImmutableError(f"Audit entry {self.pk} cannot be deleted")

    def as_log_record(self):
        """Flat dict written to the HIPAA audit file"""
        return {
            'id': self.pk,
            'timestamp': self.timestamp.isoformat(),
            'actor_id': self.actor_id,
            'actor_type': self.actor_type,
            'action': self.action,
            'entity_type': self.entity_type,
            'entity_id': self.entity_id,
            'target_user_id': self.target_user_id,
            'status': self.status,
            'ip': self.ip_address,
            'user_agent': self.user_agent,
            'metadata': self.metadata,
        }
