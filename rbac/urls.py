# rbac/urls.py
from django.urls import path

from .views import MyPermissionsView, PermissionCatalogueView, UserRoleDetailView, UserRolesView

urlpatterns = [
    path('me/', MyPermissionsView.as_view(), name='rbac-me'),
    path('permissions/', PermissionCatalogueView.as_view(), name='rbac-permissions'),
    path('users/<int:user_id>/roles/', UserRolesView.as_view(), name='rbac-user-roles'),
    path('users/<int:user_id>/roles/<str:role_name>/', UserRoleDetailView.as_view(), name='rbac-user-role-detail'),
]
