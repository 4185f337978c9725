# users/views.py
from django.shortcuts import get_object_or_404

from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from enforcement.checks import check_consent, require_consent, require_permission
from enforcement.decorators import enforce
from .models import CustomUser
from .serializers import PatientRecordSerializer


class PatientRecordView(APIView):
    """
    A patient's identity record.

    Firms and providers need VIEW_CLIENT_PHI plus the patient's consent for
    medical records; a patient can always read their own record.
    """

    @swagger_auto_schema(
        operation_description="Get a patient's record (consent required unless it is your own)",
        responses={
            200: PatientRecordSerializer,
            403: openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    'message': openapi.Schema(type=openapi.TYPE_STRING),
                    'requiresConsent': openapi.Schema(type=openapi.TYPE_BOOLEAN),
                    'patientId': openapi.Schema(type=openapi.TYPE_INTEGER),
                    'dataType': openapi.Schema(type=openapi.TYPE_STRING),
                }
            ),
            404: 'Patient not found'
        }
    )
    @enforce(
        require_permission('VIEW_CLIENT_PHI'),
        require_consent(patient_id_param='patient_id', data_type='medical_records'),
        audit_action='VIEW_PHI',
        record_type='PatientRecord',
    )
    def get(self, request, patient_id, access):
        patient = get_object_or_404(CustomUser, pk=patient_id, user_type=CustomUser.CLIENT)
        return Response(PatientRecordSerializer(patient).data)


class PatientConsentInfoView(APIView):
    """Whether the caller currently holds consent for a patient; never denies"""

    @swagger_auto_schema(
        operation_description="Consent status for a patient, for display purposes",
        responses={200: 'Consent annotation'}
    )
    @enforce(check_consent(patient_id_param='patient_id'))
    def get(self, request, patient_id, access):
        return Response({
            'patientId': patient_id,
            'consent': access.annotations['consent'],
        })
