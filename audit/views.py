# audit/views.py
from datetime import timedelta

from django.utils import timezone

from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema

from enforcement.checks import require_permission
from enforcement.decorators import enforce
from .serializers import (
    AuditLogEntrySerializer, FailedLoginGroupSerializer, PhiAccessQuerySerializer,
    SuspiciousActivitySerializer, WindowQuerySerializer
)
from .services import AuditLogger

VIEW_AUDIT_LOGS = require_permission('VIEW_AUDIT_LOGS')


class PhiAccessLogView(APIView):
    """
    Every audit entry touching one patient, newest first.
    Used for breach investigation.
    """

    @swagger_auto_schema(
        operation_description="Audit trail of a patient's PHI",
        query_serializer=PhiAccessQuerySerializer,
        responses={200: AuditLogEntrySerializer(many=True), 403: 'Forbidden'}
    )
    @enforce(VIEW_AUDIT_LOGS)
    def get(self, request, patient_id, access):
        query = PhiAccessQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        entries = AuditLogger.get_phi_access_logs(patient_id, **query.validated_data)
        return Response({
            'patientId': patient_id,
            'total': len(entries),
            'logs': AuditLogEntrySerializer(entries, many=True).data
        })


class FailedLoginsView(APIView):

    @swagger_auto_schema(
        operation_description="Accounts and addresses with repeated failed logins",
        query_serializer=WindowQuerySerializer,
        responses={200: FailedLoginGroupSerializer(many=True), 403: 'Forbidden'}
    )
    @enforce(VIEW_AUDIT_LOGS)
    def get(self, request, access):
        query = WindowQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        since = timezone.now() - timedelta(hours=query.validated_data['hours'])
        groups = AuditLogger.get_failed_login_attempts(since=since, limit=query.validated_data['limit'])
        return Response({
            'since': since,
            'total': len(groups),
            'attempts': FailedLoginGroupSerializer(groups, many=True).data
        })


class SuspiciousActivityView(APIView):

    @swagger_auto_schema(
        operation_description="Actors whose PHI access volume exceeds the threshold",
        query_serializer=WindowQuerySerializer,
        responses={200: SuspiciousActivitySerializer(many=True), 403: 'Forbidden'}
    )
    @enforce(VIEW_AUDIT_LOGS)
    def get(self, request, access):
        query = WindowQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        since = timezone.now() - timedelta(hours=query.validated_data['hours'])
        flagged = AuditLogger.detect_suspicious_activity(
            since=since, threshold=query.validated_data.get('threshold')
        )
        return Response({
            'since': since,
            'total': len(flagged),
            'actors': SuspiciousActivitySerializer(flagged, many=True).data
        })
