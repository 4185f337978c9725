# audit/serializers.py
from rest_framework import serializers

from .models import AuditLogEntry


class AuditLogEntrySerializer(serializers.ModelSerializer):
    """Serializer for audit entries"""

    class Meta:
        model = AuditLogEntry
        fields = [
            'id', 'actor_id', 'actor_type', 'action', 'entity_type',
            'entity_id', 'target_user_id', 'status', 'ip_address',
            'user_agent', 'metadata', 'timestamp'
        ]
        read_only_fields = fields


class FailedLoginGroupSerializer(serializers.Serializer):
    actor_id = serializers.IntegerField()
    email = serializers.CharField(allow_null=True)
    ip_address = serializers.CharField(allow_null=True)
    attempt_count = serializers.IntegerField()
    last_attempt = serializers.DateTimeField()


class SuspiciousActivitySerializer(serializers.Serializer):
    actor_id = serializers.IntegerField()
    actor_type = serializers.CharField()
    unique_patients_accessed = serializers.IntegerField()
    total_accesses = serializers.IntegerField()
    ip_addresses = serializers.ListField(child=serializers.CharField())


class PhiAccessQuerySerializer(serializers.Serializer):
    start_date = serializers.DateTimeField(required=False)
    end_date = serializers.DateTimeField(required=False)
    limit = serializers.IntegerField(required=False, default=100, min_value=1, max_value=1000)
    offset = serializers.IntegerField(required=False, default=0, min_value=0)


class WindowQuerySerializer(serializers.Serializer):
    """Look-back window shared by the security monitoring endpoints"""
    hours = serializers.IntegerField(required=False, default=24, min_value=1, max_value=24 * 90)
    limit = serializers.IntegerField(required=False, default=100, min_value=1, max_value=1000)
    threshold = serializers.IntegerField(required=False, min_value=0)
