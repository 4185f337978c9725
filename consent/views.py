# consent/views.py
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from audit.models import AuditLogEntry
from audit.services import AuditLogger
from enforcement.checks import require_actor_type, require_permission
from enforcement.decorators import enforce
from users.actors import grantee_for
from users.directory import lawfirm_for_code
from .exceptions import ConsentNotFound, ConsentStateError
from .models import ConsentRecord
from .serializers import (
    ConsentDetailSerializer, ConsentRecordSerializer, FirmCodeSerializer, GrantConsentSerializer,
    GrantedConsentSerializer, PatientConsentSerializer, RevokeConsentSerializer
)
from .services import ConsentService

message_schema = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    properties={'message': openapi.Schema(type=openapi.TYPE_STRING)}
)

status_param = openapi.Parameter(
    'status', openapi.IN_QUERY, type=openapi.TYPE_STRING,
    enum=[ConsentRecord.ACTIVE, ConsentRecord.REVOKED, ConsentRecord.EXPIRED]
)

GRANTEE_ONLY = require_actor_type('lawfirm', 'medical_provider')


class GrantConsentView(APIView):
    """Patient grants consent to a law firm or medical provider"""

    @swagger_auto_schema(
        operation_description="Grant a law firm or medical provider access to your PHI",
        request_body=GrantConsentSerializer,
        responses={
            200: ConsentRecordSerializer,
            400: 'Missing or invalid grantee, or CUSTOM consent without data types',
            403: 'Forbidden'
        }
    )
    @enforce(require_permission('MANAGE_CONSENT'))
    def post(self, request, access):
        serializer = GrantConsentSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        data = serializer.validated_data

        expires_in_days = data.get('expiresInDays', settings.CONSENT_DEFAULT_EXPIRY_DAYS)
        expires_at = timezone.now() + timedelta(days=expires_in_days) if expires_in_days else None

        patient_id = access.actor.id
        consent = ConsentService.grant_consent(
            patient_id=patient_id,
            granted_to_type=data['grantedToType'],
            granted_to_id=data['grantedToId'],
            consent_type=data['consentType'],
            expires_at=expires_at,
            consent_method=data['consentMethod'],
            ip_address=access.ip_address,
            signature_data=data.get('signatureData'),
            custom_data_types=data.get('customDataTypes'),
        )

        AuditLogger.log(
            actor_id=patient_id,
            actor_type=access.actor.actor_type,
            action='CONSENT_GRANTED',
            entity_type='ConsentRecord',
            entity_id=consent.pk,
            target_user_id=patient_id,
            status=AuditLogEntry.SUCCESS,
            ip_address=access.ip_address,
            user_agent=access.user_agent,
            metadata={
                'grantedToType': consent.granted_to_type,
                'grantedToId': consent.granted_to_id,
                'consentType': consent.consent_type,
                'expiresAt': expires_at.isoformat() if expires_at else None,
            },
        )

        return Response({
            'message': 'Consent granted successfully',
            'consent': ConsentRecordSerializer(consent).data
        })


class RevokeConsentView(APIView):
    """Patient revokes one of their consents"""

    @swagger_auto_schema(
        operation_description="Revoke a consent you granted",
        request_body=RevokeConsentSerializer,
        responses={
            200: ConsentRecordSerializer,
            403: 'Not your consent',
            404: 'Consent not found',
            409: 'Consent already revoked or expired'
        }
    )
    @enforce(require_permission('MANAGE_CONSENT'))
    def post(self, request, consent_id, access):
        serializer = RevokeConsentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        reason = serializer.validated_data.get('reason')

        details = ConsentService.get_consent_details(consent_id)
        if details is None:
            return Response({'message': 'Consent not found'}, status=status.HTTP_404_NOT_FOUND)
        if details.patient_id != access.actor.id:
            return Response({'message': 'You can only revoke your own consents'},
                            status=status.HTTP_403_FORBIDDEN)

        try:
            consent = ConsentService.revoke_consent(consent_id, reason)
        except ConsentNotFound:
            return Response({'message': 'Consent not found'}, status=status.HTTP_404_NOT_FOUND)
        except ConsentStateError as e:
            return Response({'message': str(e), 'status': e.status}, status=status.HTTP_409_CONFLICT)

        AuditLogger.log(
            actor_id=access.actor.id,
            actor_type=access.actor.actor_type,
            action='CONSENT_REVOKED',
            entity_type='ConsentRecord',
            entity_id=consent.pk,
            target_user_id=consent.patient_id,
            status=AuditLogEntry.SUCCESS,
            ip_address=access.ip_address,
            user_agent=access.user_agent,
            metadata={
                'grantedToType': consent.granted_to_type,
                'grantedToId': consent.granted_to_id,
                'reason': reason,
            },
        )

        return Response({
            'message': 'Consent revoked successfully',
            'consent': ConsentRecordSerializer(consent).data
        })


class MyConsentsView(APIView):

    @swagger_auto_schema(
        operation_description="List the consents you have granted",
        manual_parameters=[status_param],
        responses={200: PatientConsentSerializer(many=True)}
    )
    @enforce(require_permission('MANAGE_CONSENT'))
    def get(self, request, access):
        consents = ConsentService.get_patient_consents(
            access.actor.id, request.query_params.get('status') or None
        )
        return Response({
            'total': len(consents),
            'consents': PatientConsentSerializer(consents, many=True).data
        })


class ConsentDetailView(APIView):

    @swagger_auto_schema(
        operation_description="Get one of your consents, with its scope if CUSTOM",
        responses={
            200: ConsentDetailSerializer,
            403: message_schema,
            404: message_schema
        }
    )
    @enforce(require_permission('MANAGE_CONSENT'))
    def get(self, request, consent_id, access):
        consent = ConsentService.get_consent_details(consent_id)
        if consent is None:
            return Response({'message': 'Consent not found'}, status=status.HTTP_404_NOT_FOUND)
        if consent.patient_id != access.actor.id:
            return Response({'message': 'Access denied'}, status=status.HTTP_403_FORBIDDEN)
        return Response({'consent': ConsentDetailSerializer(consent).data})


class GrantedConsentsView(APIView):
    """Law firm or provider lists the consents granted to it"""

    @swagger_auto_schema(
        operation_description="List consents granted to your firm or practice (active by default)",
        manual_parameters=[status_param],
        responses={200: GrantedConsentSerializer(many=True), 403: message_schema}
    )
    @enforce(GRANTEE_ONLY, require_permission('VIEW_GRANTED_CONSENTS'))
    def get(self, request, access):
        granted_to_type, granted_to_id = grantee_for(access.actor)
        consents = ConsentService.get_granted_consents(
            granted_to_type, granted_to_id,
            request.query_params.get('status') or ConsentRecord.ACTIVE
        )
        return Response({
            'total': len(consents),
            'consents': GrantedConsentSerializer(consents, many=True).data
        })


class ConsentStatusView(APIView):
    """Law firm or provider checks whether a patient's consent covers them"""

    @swagger_auto_schema(
        operation_description="Check whether you hold consent for a patient's data",
        manual_parameters=[
            openapi.Parameter('dataType', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                              description='medical_records, billing, litigation, ...')
        ],
        responses={
            200: openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    'hasConsent': openapi.Schema(type=openapi.TYPE_BOOLEAN),
                    'patientId': openapi.Schema(type=openapi.TYPE_INTEGER),
                    'dataType': openapi.Schema(type=openapi.TYPE_STRING),
                    'grantedToType': openapi.Schema(type=openapi.TYPE_STRING),
                    'grantedToId': openapi.Schema(type=openapi.TYPE_INTEGER),
                }
            ),
            403: message_schema
        }
    )
    @enforce(GRANTEE_ONLY, require_permission('VIEW_GRANTED_CONSENTS'))
    def get(self, request, patient_id, access):
        granted_to_type, granted_to_id = grantee_for(access.actor)
        data_type = request.query_params.get('dataType') or None
        has_consent = ConsentService.check_consent(patient_id, granted_to_type, granted_to_id, data_type)
        return Response({
            'hasConsent': has_consent,
            'patientId': patient_id,
            'dataType': data_type or 'all',
            'grantedToType': granted_to_type,
            'grantedToId': granted_to_id
        })


class FirmCodeConsentView(APIView):
    """
    Client links to a law firm by its registration code.

    The firm gets FULL_ACCESS for the default consent term, recorded as an
    automatic grant.
    """

    @swagger_auto_schema(
        operation_description="Grant a law firm full access using the firm's registration code",
        request_body=FirmCodeSerializer,
        responses={200: ConsentRecordSerializer, 400: 'Missing firm code', 403: 'Forbidden', 404: message_schema}
    )
    @enforce(require_permission('MANAGE_CONSENT'), require_actor_type('client'))
    def post(self, request, access):
        serializer = FirmCodeSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        firm_id = lawfirm_for_code(serializer.validated_data['firmCode'])
        if firm_id is None:
            return Response({'message': 'No law firm with this code'}, status=status.HTTP_404_NOT_FOUND)

        consent = ConsentService.auto_grant_consent_to_firm(access.actor.id, firm_id)
        return Response({
            'message': 'Consent granted successfully',
            'consent': ConsentRecordSerializer(consent).data
        })
