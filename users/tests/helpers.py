# users/tests/helpers.py
from rest_framework.test import APIClient

from rbac.services import PermissionService
from users.models import CustomUser


def make_user(username, user_type=CustomUser.CLIENT, password='password123', **extra):
    """Create an account of the given type; signals add its profile or CLIENT role"""
    return CustomUser.objects.create_user(
        username=username,
        email=f'{username}@example.com',
        password=password,
        user_type=user_type,
        **extra
    )


def make_platform_admin(username='compliance'):
    user = make_user(username, CustomUser.CLIENT, is_staff=True)
    PermissionService.assign_role(user.pk, 'PLATFORM_ADMIN')
    return user


def authenticated_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client
