# rbac/services.py
import logging

from django.db import DatabaseError
from django.db.models import Q
from django.utils import timezone

from users.actors import LawFirm, MedicalProvider, Patient, actor_from_parts
from .defaults import LAW_FIRM_ADMIN, MEDICAL_PROVIDER_ADMIN
from .exceptions import RoleNotFound
from .models import Permission, Role, RolePermission, UserRole

logger = logging.getLogger(__name__)


class PermissionService:
    """
    Role-based access control for PHI access.

    Every check fails closed: a storage error is logged and reported as
    "no permission".
    """

    @staticmethod
    def _active_assignments(user_id):
        now = timezone.now()
        return UserRole.objects.filter(user_id=user_id).filter(
            Q(expires_at__isnull=True) | Q(expires_at__gt=now)
        )

    @staticmethod
    def _role_has_permission(role_name, permission_name):
        return RolePermission.objects.filter(
            role__name=role_name,
            permission__name=permission_name
        ).exists()

    @staticmethod
    def check_actor_permission(actor, permission_name):
        """
        Check whether an actor holds a permission.

        Law firms and medical providers do not hold per-account roles: every
        firm account gets the LAW_FIRM_ADMIN capability set and every provider
        account the MEDICAL_PROVIDER_ADMIN set, whatever its id. Patients are
        checked against their own unexpired role assignments.
        """
        try:
            if isinstance(actor, LawFirm):
                return PermissionService._role_has_permission(LAW_FIRM_ADMIN, permission_name)
            if isinstance(actor, MedicalProvider):
                return PermissionService._role_has_permission(MEDICAL_PROVIDER_ADMIN, permission_name)
            if isinstance(actor, Patient):
                return PermissionService._active_assignments(actor.id).filter(
                    role__role_permissions__permission__name=permission_name
                ).exists()
        except DatabaseError:
            logger.exception(f"Permission check failed for {actor!r} / {permission_name}; denying")
            return False
        raise TypeError(f"Unknown actor {actor!r}")

    @staticmethod
    def check_permission(actor_id, permission_name, actor_type='client'):
        """
        Check if an actor has a specific permission.

        Args:
            actor_id: ID of the account making the request
            permission_name: Permission name to check
            actor_type: 'client', 'lawfirm' or 'medical_provider'

        Returns:
            bool: True if the permission is held
        """
        return PermissionService.check_actor_permission(
            actor_from_parts(actor_type, actor_id), permission_name
        )

    @staticmethod
    def check_any_permission(user_id, permission_names):
        """Check if a client account has at least one of the permissions"""
        try:
            return PermissionService._active_assignments(user_id).filter(
                role__role_permissions__permission__name__in=list(permission_names)
            ).exists()
        except DatabaseError:
            logger.exception(f"Permission check failed for user {user_id}; denying")
            return False

    @staticmethod
    def check_all_permissions(user_id, permission_names):
        """Check if a client account has every one of the permissions"""
        for permission_name in permission_names:
            if not PermissionService.check_permission(user_id, permission_name):
                return False
        return True

    @staticmethod
    def get_user_permissions(user_id):
        """
        Get all permissions granted through a user's unexpired roles.

        Returns:
            list: Permission instances ordered by category and name
        """
        try:
            role_ids = PermissionService._active_assignments(user_id).values('role_id')
            return list(
                Permission.objects.filter(role_permissions__role_id__in=role_ids)
                .distinct()
                .order_by('category', 'name')
            )
        except DatabaseError:
            logger.exception(f"Could not load permissions for user {user_id}")
            return []

    @staticmethod
    def get_user_roles(user_id):
        """
        Get a user's unexpired role assignments.

        Returns:
            list: UserRole instances with their role loaded
        """
        try:
            return list(
                PermissionService._active_assignments(user_id)
                .select_related('role')
                .order_by('role__name')
            )
        except DatabaseError:
            logger.exception(f"Could not load roles for user {user_id}")
            return []

    @staticmethod
    def get_actor_access(actor):
        """
        Role names and permission names in effect for an actor.

        Returns:
            tuple: (list of role names, list of permission names)
        """
        if isinstance(actor, Patient):
            roles = [assignment.role.name for assignment in PermissionService.get_user_roles(actor.id)]
            permissions = [permission.name for permission in PermissionService.get_user_permissions(actor.id)]
            return roles, permissions
        if isinstance(actor, LawFirm):
            role_name = LAW_FIRM_ADMIN
        elif isinstance(actor, MedicalProvider):
            role_name = MEDICAL_PROVIDER_ADMIN
        else:
            raise TypeError(f"Unknown actor {actor!r}")
        try:
            permissions = list(
                Permission.objects.filter(role_permissions__role__name=role_name)
                .order_by('category', 'name')
                .values_list('name', flat=True)
            )
        except DatabaseError:
            logger.exception(f"Could not load permissions of role {role_name}")
            return [role_name], []
        return [role_name], permissions

    @staticmethod
    def assign_role(user_id, role_name, assigned_by=None, expires_at=None):
        """
        Assign a role to a user, or refresh an existing assignment.

        Args:
            user_id: User receiving the role
            role_name: Name of the role
            assigned_by: ID of the user making the assignment (optional)
            expires_at: When the assignment stops granting permissions (optional)

        Returns:
            UserRole: The created or updated assignment

        Raises:
            RoleNotFound: If no role has that name
        """
        role = Role.objects.filter(name=role_name).first()
        if role is None:
            raise RoleNotFound(role_name)

        assignment, created = UserRole.objects.update_or_create(
            user_id=user_id,
            role=role,
            defaults={
                'assigned_by_id': assigned_by,
                'expires_at': expires_at,
                'assigned_at': timezone.now(),
            },
        )
        logger.info(
            f"Role {role_name} {'assigned to' if created else 'refreshed for'} user {user_id}, "
            f"expires={expires_at}"
        )
        return assignment

    @staticmethod
    def remove_role(user_id, role_name):
        """Remove a role assignment; returns True if a row was deleted"""
        try:
            deleted, _ = UserRole.objects.filter(user_id=user_id, role__name=role_name).delete()
        except DatabaseError:
            logger.exception(f"Could not remove role {role_name} from user {user_id}")
            return False
        return deleted > 0

    @staticmethod
    def is_sensitive_permission(permission_name):
        """Check if a permission requires enhanced audit logging"""
        try:
            return Permission.objects.filter(name=permission_name, is_sensitive=True).exists()
        except DatabaseError:
            logger.exception(f"Could not read sensitivity of {permission_name}")
            return False

    @staticmethod
    def get_all_permissions():
        """
        Get all permissions grouped by category.

        Returns:
            dict: category -> list of Permission instances
        """
        grouped = {}
        try:
            for permission in Permission.objects.order_by('category', 'name'):
                grouped.setdefault(permission.category, []).append(permission)
        except DatabaseError:
            logger.exception("Could not load permission catalogue")
            return {}
        return grouped
