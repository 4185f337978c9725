# rbac/models.py
from django.conf import settings
from django.db import models
from django.utils import timezone


class Role(models.Model):
    """A named bundle of permissions (CLIENT, LAW_FIRM_ADMIN, ...)"""
    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True, default='')

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Permission(models.Model):
    """
    A single capability checked by the enforcement pipeline.

    Sensitive permissions get an extra audit entry every time they are
    successfully exercised.
    """
    name = models.CharField(max_length=100, unique=True)
    category = models.CharField(max_length=50)
    description = models.TextField(blank=True, default='')
    is_sensitive = models.BooleanField(default=False)

    class Meta:
        ordering = ['category', 'name']

    def __str__(self):
        return self.name


class RolePermission(models.Model):
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name='role_permissions')
    permission = models.ForeignKey(Permission, on_delete=models.CASCADE, related_name='role_permissions')

    class Meta:
        unique_together = ['role', 'permission']

    def __str__(self):
        return f"{self.role.name} -> {self.permission.name}"


class UserRole(models.Model):
    """
    Time-bound role assignment for a client account.

    An assignment whose ``expires_at`` has passed grants nothing, even if
    the row is still present.
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='role_assignments'
    )
    role = models.ForeignKey(Role, on_delete=models.CASCADE, related_name='assignments')
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    assigned_at = models.DateTimeField(default=timezone.now)
    expires_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ['user', 'role']
        ordering = ['role__name']

    def __str__(self):
        return f"{self.user_id} has {self.role.name}"

    def is_active(self, now=None):
        now = now or timezone.now()
        return self.expires_at is None or self.expires_at > now
