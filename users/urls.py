# users/urls.py
from django.urls import path

from .views import PatientConsentInfoView, PatientRecordView

urlpatterns = [
    path('patients/<int:patient_id>/', PatientRecordView.as_view(), name='patient-record'),
    path('patients/<int:patient_id>/consent-info/', PatientConsentInfoView.as_view(), name='patient-consent-info'),
]
