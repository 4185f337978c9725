# consent/urls.py
from django.urls import path

from .views import (
    ConsentDetailView, ConsentStatusView, FirmCodeConsentView, GrantConsentView,
    GrantedConsentsView, MyConsentsView, RevokeConsentView
)

urlpatterns = [
    # Patient routes
    path('grant/', GrantConsentView.as_view(), name='consent-grant'),
    path('firm-code/', FirmCodeConsentView.as_view(), name='consent-firm-code'),
    path('revoke/<int:consent_id>/', RevokeConsentView.as_view(), name='consent-revoke'),
    path('my-consents/', MyConsentsView.as_view(), name='consent-mine'),

    # Law firm / provider routes
    path('granted/', GrantedConsentsView.as_view(), name='consent-granted'),
    path('status/<int:patient_id>/', ConsentStatusView.as_view(), name='consent-status'),

    path('<int:consent_id>/', ConsentDetailView.as_view(), name='consent-detail'),
]
