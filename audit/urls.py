# audit/urls.py
from django.urls import path

from .views import FailedLoginsView, PhiAccessLogView, SuspiciousActivityView

urlpatterns = [
    path('phi-access/<int:patient_id>/', PhiAccessLogView.as_view(), name='audit-phi-access'),
    path('failed-logins/', FailedLoginsView.as_view(), name='audit-failed-logins'),
    path('suspicious-activity/', SuspiciousActivityView.as_view(), name='audit-suspicious-activity'),
]
