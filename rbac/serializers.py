# rbac/serializers.py
from rest_framework import serializers

from .models import Permission, UserRole


class PermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Permission
        fields = ['name', 'category', 'description', 'is_sensitive']
        read_only_fields = fields


class UserRoleSerializer(serializers.ModelSerializer):
    """Serializer for a user's role assignment"""
    role = serializers.CharField(source='role.name', read_only=True)
    role_description = serializers.CharField(source='role.description', read_only=True)

    class Meta:
        model = UserRole
        fields = ['id', 'user_id', 'role', 'role_description', 'assigned_by_id', 'assigned_at', 'expires_at']
        read_only_fields = fields


class AssignRoleSerializer(serializers.Serializer):
    role = serializers.CharField(max_length=50)
    expiresAt = serializers.DateTimeField(required=False, allow_null=True)
