"""
URL configuration for the CaseCompass API.
"""
from django.contrib import admin
from django.urls import include, path, re_path
from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

schema_view = get_schema_view(
    openapi.Info(
        title="CaseCompass API",
        default_version='v1',
        description="Consent, role and audit controls over patient PHI",
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('admin/', admin.site.urls),

    path('api/v1/users/', include('users.urls')),
    path('api/v1/rbac/', include('rbac.urls')),
    path('api/v1/consent/', include('consent.urls')),
    path('api/v1/audit/', include('audit.urls')),

    # API documentation
    re_path(r'^api/docs(?P<format>\.json|\.yaml)$', schema_view.without_ui(cache_timeout=0), name='schema-json'),
    path('api/docs/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('api/redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
