"""Seed the default roles, permissions and role-permission matrix."""
from django.db import migrations

from rbac import defaults


def seed_rbac(apps, schema_editor):
    defaults.seed(
        apps.get_model('rbac', 'Role'),
        apps.get_model('rbac', 'Permission'),
        apps.get_model('rbac', 'RolePermission'),
    )


def unseed_rbac(apps, schema_editor):
    apps.get_model('rbac', 'Role').objects.filter(name__in=list(defaults.ROLES)).delete()
    apps.get_model('rbac', 'Permission').objects.filter(name__in=list(defaults.PERMISSIONS)).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('rbac', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_rbac, unseed_rbac),
    ]
