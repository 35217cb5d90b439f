"""
Services module for CRM Access
Contains the permission catalog, role store, cache, resolver and data scopes.
"""

from .catalog import (
    PERMISSIONS,
    ROLE_PERMISSIONS,
    AccessControlError,
    FixedRole,
    Permission,
    PermissionSet,
    UnknownFixedRole,
    lookup,
)
from .cache import PermissionCache
from .store import (
    RoleInactive,
    RoleNotFound,
    RolePermissionStore,
    SqlRolePermissionStore,
    StoreUnavailable,
)
from .scope import DataScope, ScopeKind, scope_for, visible_scope
from .permissions import (
    FallbackReason,
    PermissionService,
    Resolution,
    ResolutionSource,
    configure_permission_service,
    get_permission_service,
    has_permission,
    list_effective_permissions,
)

__all__ = [
    'PERMISSIONS',
    'ROLE_PERMISSIONS',
    'AccessControlError',
    'FixedRole',
    'Permission',
    'PermissionSet',
    'UnknownFixedRole',
    'lookup',
    'PermissionCache',
    'RoleInactive',
    'RoleNotFound',
    'RolePermissionStore',
    'SqlRolePermissionStore',
    'StoreUnavailable',
    'DataScope',
    'ScopeKind',
    'scope_for',
    'visible_scope',
    'FallbackReason',
    'PermissionService',
    'Resolution',
    'ResolutionSource',
    'configure_permission_service',
    'get_permission_service',
    'has_permission',
    'list_effective_permissions',
]
