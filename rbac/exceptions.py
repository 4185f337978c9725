# rbac/exceptions.py

class RoleNotFound(Exception):
    """Raised when a role name does not match any Role row"""

    def __init__(self, role_name):
        self.role_name = role_name
        super().__init__(f"Role {role_name} not found")
