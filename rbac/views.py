# rbac/views.py
from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from audit.services import AuditLogger
from enforcement.checks import require_permission
from enforcement.decorators import enforce
from .exceptions import RoleNotFound
from .serializers import AssignRoleSerializer, PermissionSerializer, UserRoleSerializer
from .services import PermissionService

MANAGE_ROLES = require_permission('MANAGE_ROLES')


def _audit_role_change(access, action, user_id, role_name, **metadata):
    AuditLogger.log(
        actor_id=access.actor.id,
        actor_type=access.actor.actor_type,
        action=action,
        entity_type='UserRole',
        entity_id=user_id,
        ip_address=access.ip_address,
        user_agent=access.user_agent,
        metadata={'userId': user_id, 'role': role_name, **metadata},
    )


class MyPermissionsView(APIView):
    """Roles and permissions of the calling account"""

    @swagger_auto_schema(
        operation_description="Get your roles and effective permissions",
        responses={
            200: openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={
                    'roles': openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_STRING)),
                    'permissions': openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_STRING)),
                }
            )
        }
    )
    @enforce()
    def get(self, request, access):
        roles, permissions = PermissionService.get_actor_access(access.actor)
        return Response({'roles': roles, 'permissions': permissions})


class PermissionCatalogueView(APIView):

    @swagger_auto_schema(
        operation_description="All permissions grouped by category",
        responses={200: 'category -> list of permissions', 403: 'Forbidden'}
    )
    @enforce(MANAGE_ROLES)
    def get(self, request, access):
        grouped = PermissionService.get_all_permissions()
        return Response({
            category: PermissionSerializer(permissions, many=True).data
            for category, permissions in grouped.items()
        })


class UserRolesView(APIView):
    """Assign a role to a user, or refresh the existing assignment"""

    @swagger_auto_schema(
        operation_description="Assign a role to a user (re-assigning updates expiry)",
        request_body=AssignRoleSerializer,
        responses={200: UserRoleSerializer, 403: 'Forbidden', 404: 'Unknown user or role'}
    )
    @enforce(MANAGE_ROLES)
    def post(self, request, user_id, access):
        get_object_or_404(get_user_model(), pk=user_id)
        serializer = AssignRoleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        role_name = serializer.validated_data['role']
        expires_at = serializer.validated_data.get('expiresAt')

        try:
            assignment = PermissionService.assign_role(
                user_id, role_name, assigned_by=access.actor.id, expires_at=expires_at
            )
        except RoleNotFound as e:
            return Response({'message': str(e)}, status=status.HTTP_404_NOT_FOUND)

        _audit_role_change(
            access, 'ROLE_ASSIGNED', user_id, role_name,
            expiresAt=expires_at.isoformat() if expires_at else None,
        )
        return Response(UserRoleSerializer(assignment).data)


class UserRoleDetailView(APIView):

    @swagger_auto_schema(
        operation_description="Remove a role from a user",
        responses={
            200: openapi.Schema(
                type=openapi.TYPE_OBJECT,
                properties={'removed': openapi.Schema(type=openapi.TYPE_BOOLEAN)}
            ),
            403: 'Forbidden'
        }
    )
    @enforce(MANAGE_ROLES)
    def delete(self, request, user_id, role_name, access):
        removed = PermissionService.remove_role(user_id, role_name)
        if removed:
            _audit_role_change(access, 'ROLE_REMOVED', user_id, role_name)
        return Response({'removed': removed})
