# consent/serializers.py
from rest_framework import serializers

from users.actors import GRANTEE_TYPES
from users.directory import grantee_exists
from .models import ConsentRecord, ConsentScope


class ConsentScopeSerializer(serializers.ModelSerializer):
    class Meta:
        model = ConsentScope
        fields = ['data_type', 'can_view', 'can_edit']
        read_only_fields = fields


class ConsentRecordSerializer(serializers.ModelSerializer):
    """Serializer for consent records as returned by every consent endpoint"""
    patient_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = ConsentRecord
        fields = [
            'id', 'patient_id', 'granted_to_type', 'granted_to_id',
            'consent_type', 'status', 'expires_at', 'consent_method',
            'ip_address', 'signature_data', 'created_at', 'updated_at',
            'revoked_at', 'revoked_reason'
        ]
        read_only_fields = fields


class PatientConsentSerializer(ConsentRecordSerializer):
    """A patient's view of a consent: who it was granted to"""
    granted_to_name = serializers.SerializerMethodField()

    class Meta(ConsentRecordSerializer.Meta):
        fields = ConsentRecordSerializer.Meta.fields + ['granted_to_name']
        read_only_fields = fields

    def get_granted_to_name(self, obj):
        return getattr(obj, 'granted_to_name', None)


class ConsentDetailSerializer(PatientConsentSerializer):
    """Single consent, with scope rows for CUSTOM consents"""
    scope = serializers.SerializerMethodField()

    class Meta(PatientConsentSerializer.Meta):
        fields = PatientConsentSerializer.Meta.fields + ['scope']
        read_only_fields = fields

    def get_scope(self, obj):
        scope = getattr(obj, 'scope', None)
        if scope is None:
            return None
        return ConsentScopeSerializer(scope, many=True).data


class GrantedConsentSerializer(ConsentRecordSerializer):
    """A grantee's view of a consent: whose data it covers"""
    first_name = serializers.SerializerMethodField()
    last_name = serializers.SerializerMethodField()
    email = serializers.SerializerMethodField()

    class Meta(ConsentRecordSerializer.Meta):
        fields = ConsentRecordSerializer.Meta.fields + ['first_name', 'last_name', 'email']
        read_only_fields = fields

    def _patient_field(self, obj, name):
        return (getattr(obj, 'patient_info', None) or {}).get(name)

    def get_first_name(self, obj):
        return self._patient_field(obj, 'first_name')

    def get_last_name(self, obj):
        return self._patient_field(obj, 'last_name')

    def get_email(self, obj):
        return self._patient_field(obj, 'email')


class ScopeEntrySerializer(serializers.Serializer):
    type = serializers.CharField(max_length=50)
    canView = serializers.BooleanField(required=False, default=True)
    canEdit = serializers.BooleanField(required=False, default=False)


class GrantConsentSerializer(serializers.Serializer):
    """Request body of POST /consent/grant/"""
    grantedToType = serializers.ChoiceField(
        choices=GRANTEE_TYPES,
        error_messages={'invalid_choice': 'grantedToType must be either "lawfirm" or "medical_provider"'}
    )
    grantedToId = serializers.IntegerField(min_value=1)
    consentType = serializers.CharField(max_length=50, required=False, default=ConsentRecord.FULL_ACCESS)
    expiresInDays = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    customDataTypes = ScopeEntrySerializer(many=True, required=False, allow_null=True)
    consentMethod = serializers.CharField(max_length=30, required=False, default='electronic')
    signatureData = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    def validate(self, attrs):
        if attrs.get('consentType') == ConsentRecord.CUSTOM and not attrs.get('customDataTypes'):
            raise serializers.ValidationError(
                {'customDataTypes': 'CUSTOM consent needs at least one data type'}
            )
        data_types = [entry['type'] for entry in attrs.get('customDataTypes') or []]
        duplicates = sorted({name for name in data_types if data_types.count(name) > 1})
        if duplicates:
            raise serializers.ValidationError(
                {'customDataTypes': f"Each data type may appear only once: {', '.join(duplicates)}"}
            )
        if not grantee_exists(attrs['grantedToType'], attrs['grantedToId']):
            raise serializers.ValidationError(
                {'grantedToId': f"No active {attrs['grantedToType']} account with this id"}
            )
        return attrs


class RevokeConsentSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class FirmCodeSerializer(serializers.Serializer):
    """Request body of POST /consent/firm-code/"""
    firmCode = serializers.CharField(max_length=20)
