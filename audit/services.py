# audit/services.py
import json
import logging
from datetime import timedelta

from django.conf import settings
from django.db.models import Count, Max
from django.db.models.fields.json import KeyTextTransform
from django.utils import timezone

from . import dispatch
from .models import AuditLogEntry

logger = logging.getLogger(__name__)
hipaa_logger = logging.getLogger('hipaa_audit')


def get_client_ip(request):
    """Get the client IP address accounting for proxies"""
    if request is None:
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


class AuditLogger:
    """
    Service class for writing and querying the HIPAA audit trail.

    Writes never raise: a persistence failure is reported on the alert
    channel and the write returns None so the triggering action proceeds.
    """

    @staticmethod
    def log(actor_id, actor_type, action, entity_type=None, entity_id=None,
            target_user_id=None, status=AuditLogEntry.SUCCESS, ip_address=None,
            user_agent=None, metadata=None):
        """
        Append one entry to the audit trail.

        Args:
            actor_id: ID of the account performing the action (0 if unknown)
            actor_type: 'client', 'lawfirm', 'medical_provider' or 'system'
            action: Action performed (VIEW_PHI, CONSENT_GRANTED, ...)
            entity_type: Type of entity accessed (optional)
            entity_id: ID of the entity accessed (optional)
            target_user_id: Patient whose PHI was touched (optional)
            status: SUCCESS, FAILURE or DENIED
            ip_address: IP address of the request (optional)
            user_agent: User agent of the client (optional)
            metadata: Additional context as JSON (optional)

        Returns:
            The created AuditLogEntry, or None if it could not be written
        """
        def write():
            entry = AuditLogEntry.objects.create(
                actor_id=actor_id,
                actor_type=actor_type,
                action=action,
                entity_type=entity_type,
                entity_id=str(entity_id) if entity_id is not None else None,
                target_user_id=target_user_id,
                status=status,
                ip_address=ip_address,
                user_agent=user_agent,
                metadata=metadata or {},
            )
            hipaa_logger.info(f"HIPAA_AUDIT: {json.dumps(entry.as_log_record(), default=str)}")
            return entry

        return dispatch.submit(write, f"{action} by {actor_type} {actor_id}")

    @staticmethod
    def log_phi_access(user_id, user_type, action, patient_id, record_type,
                       record_id=None, ip_address=None, user_agent=None, success=True):
        """Log access to a patient's PHI (medical records, billing, etc.)"""
        return AuditLogger.log(
            actor_id=user_id,
            actor_type=user_type,
            action=action,
            entity_type=record_type,
            entity_id=record_id,
            target_user_id=patient_id,
            status=AuditLogEntry.SUCCESS if success else AuditLogEntry.FAILURE,
            ip_address=ip_address,
            user_agent=user_agent,
            metadata={
                'recordType': record_type,
                'timestamp': timezone.now().isoformat(),
            },
        )

    @staticmethod
    def log_auth(email, action, user_id=None, ip_address=None, user_agent=None,
                 success=True, failure_reason=None):
        """
        Log an authentication event (LOGIN, LOGOUT, LOGIN_FAILED).

        Failed attempts usually have no user id and are recorded under actor 0.
        """
        return AuditLogger.log(
            actor_id=user_id or 0,
            actor_type='client',
            action=action,
            entity_type='User',
            entity_id=user_id,
            status=AuditLogEntry.SUCCESS if success else AuditLogEntry.FAILURE,
            ip_address=ip_address,
            user_agent=user_agent,
            metadata={
                'email': email,
                'failureReason': failure_reason,
            },
        )

    @staticmethod
    def get_phi_access_logs(patient_id, start_date=None, end_date=None, limit=100, offset=0):
        """
        Get audit entries touching a patient, newest first (breach investigation).

        Returns:
            list: AuditLogEntry instances
        """
        queryset = AuditLogEntry.objects.filter(target_user_id=patient_id)
        if start_date:
            queryset = queryset.filter(timestamp__gte=start_date)
        if end_date:
            queryset = queryset.filter(timestamp__lte=end_date)
        return list(queryset.order_by('-timestamp')[offset:offset + limit])

    @staticmethod
    def get_failed_login_attempts(since=None, limit=100):
        """
        Group failed logins by (actor, email, ip) and keep the groups with at
        least FAILED_LOGIN_THRESHOLD attempts.

        Returns:
            list: dicts with actor_id, email, ip_address, attempt_count, last_attempt
        """
        since = since or timezone.now() - timedelta(hours=24)
        rows = (
            AuditLogEntry.objects
            .filter(action='LOGIN_FAILED', timestamp__gte=since)
            .annotate(email=KeyTextTransform('email', 'metadata'))
            .values('actor_id', 'email', 'ip_address')
            .annotate(attempt_count=Count('id'), last_attempt=Max('timestamp'))
            .filter(attempt_count__gte=settings.FAILED_LOGIN_THRESHOLD)
            .order_by('-attempt_count')
        )
        return list(rows[:limit])

    @staticmethod
    def detect_suspicious_activity(since=None, threshold=None):
        """
        Flag actors whose PHI access count in the window exceeds ``threshold``.

        A plain volume heuristic. Each flagged group lists distinct patients,
        total accesses and the source IPs seen.
        """
        since = since or timezone.now() - timedelta(hours=24)
        if threshold is None:
            threshold = settings.SUSPICIOUS_ACCESS_THRESHOLD

        window = AuditLogEntry.objects.filter(
            action__in=settings.AUDIT_PHI_ACCESS_ACTIONS,
            timestamp__gte=since,
        )
        groups = (
            window
            .values('actor_id', 'actor_type')
            .annotate(
                unique_patients_accessed=Count('target_user_id', distinct=True),
                total_accesses=Count('id'),
            )
            .filter(total_accesses__gt=threshold)
            .order_by('-total_accesses')
        )

        flagged = []
        for group in groups:
            ips = (
                window.filter(actor_id=group['actor_id'], actor_type=group['actor_type'])
                .exclude(ip_address__isnull=True)
                .values_list('ip_address', flat=True)
                .distinct()
            )
            group['ip_addresses'] = sorted(set(ips))
            flagged.append(group)

        if flagged:
            logger.warning(f"Suspicious PHI access volume from {len(flagged)} actor(s) since {since}")
        return flagged
