# rbac/management/commands/seed_rbac.py

from django.core.management.base import BaseCommand

from rbac import defaults
from rbac.models import Permission, Role, RolePermission


class Command(BaseCommand):
    """Re-apply the default roles and permissions after editing rbac/defaults.py"""

    help = 'Create or update the default roles, permissions and role-permission links'

    def handle(self, *args, **options):
        created = defaults.seed(Role, Permission, RolePermission)
        self.stdout.write(self.style.SUCCESS(
            f"Seeded {len(defaults.ROLES)} roles and {len(defaults.PERMISSIONS)} permissions "
            f"({created} new role-permission links)"
        ))
