"""
Database Models for CRM Access

Includes:
- User: CRM users with fixed and custom roles
- CustomRole: Administrator-defined roles
- PermissionDefinition: Grantable (resource, action) pairs
- RolePermission: Role to permission assignments
"""
from .user import User
from .role import CustomRole, PermissionDefinition, RolePermission

__all__ = [
    'User',
    'CustomRole', 'PermissionDefinition', 'RolePermission',
]
