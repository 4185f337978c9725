# rbac/defaults.py
"""
Seeded roles, permissions and the role-permission matrix.

Used by the initial data migration and by the ``seed_rbac`` command, so
both stay in sync with this module.
"""

LAW_FIRM_ADMIN = 'LAW_FIRM_ADMIN'
MEDICAL_PROVIDER_ADMIN = 'MEDICAL_PROVIDER_ADMIN'

ROLES = {
    'CLIENT': 'Patient / client account',
    LAW_FIRM_ADMIN: 'Capabilities shared by every law firm account',
    MEDICAL_PROVIDER_ADMIN: 'Capabilities shared by every medical provider account',
    'PLATFORM_ADMIN': 'Platform compliance and administration staff',
}

# name: (category, description, is_sensitive)
PERMISSIONS = {
    'MANAGE_CONSENT': ('consent', 'Grant, revoke and review own consents', False),
    'VIEW_GRANTED_CONSENTS': ('consent', 'List consents granted to this account', False),
    'VIEW_CLIENT_PHI': ('phi', 'View protected health information of a patient', True),
    'VIEW_BILLING': ('phi', 'View billing records of a patient', True),
    'VIEW_AUDIT_LOGS': ('audit', 'Query the audit trail', True),
    'MANAGE_ROLES': ('admin', 'Assign and remove user roles', True),
}

# Role-Based Access Control Matrix
ROLE_PERMISSIONS = {
    'CLIENT': [
        'MANAGE_CONSENT',
        'VIEW_CLIENT_PHI',
        'VIEW_BILLING',
    ],
    LAW_FIRM_ADMIN: [
        'VIEW_GRANTED_CONSENTS',
        'VIEW_CLIENT_PHI',
        'VIEW_BILLING',
    ],
    MEDICAL_PROVIDER_ADMIN: [
        'VIEW_GRANTED_CONSENTS',
        'VIEW_CLIENT_PHI',
        'VIEW_BILLING',
    ],
    'PLATFORM_ADMIN': [
        'MANAGE_CONSENT',
        'VIEW_AUDIT_LOGS',
        'MANAGE_ROLES',
    ],
}


def seed(Role, Permission, RolePermission):
    """
    Create or update the default rows. Takes the model classes so it can
    run against historical models inside a migration.

    Returns the number of role-permission links created.
    """
    roles = {}
    for name, description in ROLES.items():
        roles[name], _ = Role.objects.update_or_create(
            name=name, defaults={'description': description}
        )

    permissions = {}
    for name, (category, description, is_sensitive) in PERMISSIONS.items():
        permissions[name], _ = Permission.objects.update_or_create(
            name=name,
            defaults={
                'category': category,
                'description': description,
                'is_sensitive': is_sensitive,
            },
        )

    created = 0
    for role_name, permission_names in ROLE_PERMISSIONS.items():
        for permission_name in permission_names:
            _, was_created = RolePermission.objects.get_or_create(
                role=roles[role_name], permission=permissions[permission_name]
            )
            created += int(was_created)
    return created
