"""
Permission Service - two-tier role to permission resolution

This module resolves the effective permissions of a user:
1. Per-user cache of the last resolution (5 minute TTL)
2. Custom role permissions from the database, when the user has one
3. Fixed role permissions compiled into the application (fallback)

Resolution algorithm:
1. Cache hit → return cached permissions
2. User has a custom role → ask the role store
   - non-empty result → use it
   - role missing, inactive, store failure or empty result → fall through
3. Look up the fixed role in the catalog (unknown role → deny everything)
4. Cache the result and return it

Failures never propagate to the caller. Every fallback is recorded as a
FallbackReason on the Resolution so the outcome can be inspected.
"""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Set

from . import catalog
from .cache import PermissionCache
from .catalog import Permission, PermissionLike, PermissionSet, UnknownFixedRole
from .scope import DataScope, scope_for as _scope_for
from .store import RoleInactive, RoleNotFound, RolePermissionStore, StoreUnavailable

LOGGER = logging.getLogger(__name__)

EMPTY_ROLE_FALLBACK = 'fallback'
EMPTY_ROLE_DENY = 'deny'


class ResolutionSource(str, enum.Enum):
    """Where a resolved permission set came from"""
    CUSTOM_ROLE = "custom_role"
    FIXED_ROLE = "fixed_role"
    DENIED = "denied"


class FallbackReason(str, enum.Enum):
    """Why the custom role was not used"""
    NO_CUSTOM_ROLE = "no_custom_role"
    ROLE_NOT_FOUND = "role_not_found"
    ROLE_INACTIVE = "role_inactive"
    STORE_UNAVAILABLE = "store_unavailable"
    EMPTY_CUSTOM_ROLE = "empty_custom_role"
    UNKNOWN_FIXED_ROLE = "unknown_fixed_role"


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one user's permissions"""
    permissions: PermissionSet
    source: ResolutionSource
    reason: Optional[FallbackReason] = None

    @property
    def is_fallback(self) -> bool:
        return self.reason is not None


class PermissionService:
    """
    Centralized permission checking service.
    Merges custom roles with the fixed role catalog and caches the result.
    """

    def __init__(
        self,
        store: RolePermissionStore,
        cache: Optional[PermissionCache] = None,
        empty_custom_role_policy: str = EMPTY_ROLE_FALLBACK,
        store_timeout: Optional[float] = None,
    ):
        if empty_custom_role_policy not in (EMPTY_ROLE_FALLBACK, EMPTY_ROLE_DENY):
            raise ValueError(f"Unknown empty custom role policy: {empty_custom_role_policy!r}")
        self.store = store
        self.cache = cache if cache is not None else PermissionCache()
        self.empty_custom_role_policy = empty_custom_role_policy
        self.store_timeout = store_timeout

    # ==================== RESOLUTION ====================

    def resolve(self, user, timeout: Optional[float] = None) -> PermissionSet:
        """Get the effective permissions of a user"""
        return self.resolve_detailed(user, timeout=timeout).permissions

    def resolve_detailed(self, user, timeout: Optional[float] = None) -> Resolution:
        """Get the effective permissions of a user along with their source"""
        cached = self.cache.get(user.id)
        if cached is not None:
            return cached

        token = self.cache.token(user.id)
        resolution = self._resolve_uncached(user, timeout if timeout is not None else self.store_timeout)
        if not self.cache.put(user.id, resolution, token):
            LOGGER.debug("user %s invalidated during resolution, result not cached", user.id)
        LOGGER.debug(
            "resolved permissions user=%s source=%s reason=%s count=%d",
            user.id, resolution.source.value,
            resolution.reason.value if resolution.reason else None,
            len(resolution.permissions)
        )
        return resolution

    def _resolve_uncached(self, user, timeout: Optional[float]) -> Resolution:
        custom_role_id = getattr(user, 'custom_role_id', None)
        if not custom_role_id:
            return self._fixed_role_resolution(user, FallbackReason.NO_CUSTOM_ROLE)

        try:
            permissions = self.store.resolve_custom_role(custom_role_id, timeout=timeout)
        except RoleInactive:
            LOGGER.info("custom role %s of user %s is inactive, using fixed role", custom_role_id, user.id)
            return self._fixed_role_resolution(user, FallbackReason.ROLE_INACTIVE)
        except RoleNotFound:
            LOGGER.warning("custom role %s of user %s not found, using fixed role", custom_role_id, user.id)
            return self._fixed_role_resolution(user, FallbackReason.ROLE_NOT_FOUND)
        except StoreUnavailable as exc:
            LOGGER.warning("role store unavailable for user %s: %s", user.id, exc)
            return self._fixed_role_resolution(user, FallbackReason.STORE_UNAVAILABLE)
        except Exception:
            LOGGER.exception("unexpected error loading custom role %s for user %s", custom_role_id, user.id)
            return self._fixed_role_resolution(user, FallbackReason.STORE_UNAVAILABLE)

        if permissions:
            return Resolution(permissions, ResolutionSource.CUSTOM_ROLE)

        if self.empty_custom_role_policy == EMPTY_ROLE_DENY:
            LOGGER.info("custom role %s of user %s grants nothing, denying", custom_role_id, user.id)
            return Resolution(PermissionSet(), ResolutionSource.DENIED, FallbackReason.EMPTY_CUSTOM_ROLE)
        return self._fixed_role_resolution(user, FallbackReason.EMPTY_CUSTOM_ROLE)

    def _fixed_role_resolution(self, user, reason: FallbackReason) -> Resolution:
        try:
            permissions = catalog.lookup(user.role)
        except UnknownFixedRole:
            LOGGER.error("user %s has unknown fixed role %r, denying all permissions", user.id, user.role)
            return Resolution(PermissionSet(), ResolutionSource.DENIED, FallbackReason.UNKNOWN_FIXED_ROLE)
        return Resolution(permissions, ResolutionSource.FIXED_ROLE, reason)

    # ==================== PERMISSION CHECKS ====================

    def has_permission(self, user, resource: str, action: str) -> bool:
        """Check if user has a specific (resource, action) permission"""
        return self.resolve(user).has(resource, action)

    def has_any_permission(self, user, permissions: Iterable[PermissionLike]) -> bool:
        """Check if user has at least one of the given permissions"""
        return any(self.has_permission(user, *Permission(*p)) for p in permissions)

    def has_all_permissions(self, user, permissions: Iterable[PermissionLike]) -> bool:
        """Check if user has every one of the given permissions"""
        return all(self.has_permission(user, *Permission(*p)) for p in permissions)

    def can_access_resource(self, user, resource: str) -> bool:
        """Check if user has any permission at all on a resource"""
        return bool(self.get_resource_actions(user, resource))

    def get_resource_actions(self, user, resource: str) -> Set[str]:
        """Get all actions the user may perform on a resource"""
        return self.resolve(user).actions_for(resource)

    def accessible_resources(self, user) -> List[str]:
        """Resources the user can see at all (for navigation menus)"""
        return sorted(self.resolve(user).resources())

    # ==================== DATA SCOPE ====================

    def scope_for(self, role, user_id: str) -> DataScope:
        """Row-level scope for a fixed role"""
        return _scope_for(role, user_id)

    # ==================== LIST EFFECTIVE PERMISSIONS ====================

    def list_effective_permissions(self, user) -> Dict[str, Any]:
        """
        List all effective permissions for a user.

        Returns:
            {
                'user_id': ...,
                'role': 'SALES',
                'custom_role_id': ... | None,
                'source': 'custom_role' | 'fixed_role' | 'denied',
                'fallback_reason': 'role_not_found' | ... | None,
                'permissions': [{'resource': ..., 'action': ...}, ...],
                'grouped': {'leads': ['create', 'view_assigned'], ...}
            }
        """
        resolution = self.resolve_detailed(user)
        grouped: Dict[str, List[str]] = {}
        for permission in resolution.permissions.sorted():
            grouped.setdefault(permission.resource, []).append(permission.action)

        role = user.role.value if isinstance(user.role, enum.Enum) else user.role
        return {
            'user_id': user.id,
            'role': role,
            'custom_role_id': getattr(user, 'custom_role_id', None),
            'source': resolution.source.value,
            'fallback_reason': resolution.reason.value if resolution.reason else None,
            'permissions': resolution.permissions.to_list(),
            'grouped': grouped,
        }

    # ==================== CACHE MANAGEMENT ====================

    def invalidate_user(self, user_id: str):
        """Forget a user's resolved permissions (role or custom role assignment changed)"""
        self.cache.invalidate(user_id)

    def invalidate_all(self):
        """Forget every resolved permission set (custom role permissions edited)"""
        self.cache.invalidate_all()


# ==================== DEFAULT INSTANCE ====================

_permission_service: Optional[PermissionService] = None
_permission_service_lock = threading.Lock()


def get_permission_service() -> PermissionService:
    """Get the process-wide permission service, creating it from settings on first use"""
    global _permission_service
    service = _permission_service
    if service is not None:
        return service

    with _permission_service_lock:
        if _permission_service is None:
            from crm_access.core.config import settings
            from crm_access.core.database import SessionLocal
            from .store import SqlRolePermissionStore

            _permission_service = PermissionService(
                store=SqlRolePermissionStore(SessionLocal),
                cache=PermissionCache(ttl=settings.PERMISSION_CACHE_TTL_SECONDS),
                empty_custom_role_policy=settings.EMPTY_CUSTOM_ROLE_POLICY,
                store_timeout=settings.PERMISSION_STORE_TIMEOUT_SECONDS,
            )
        return _permission_service


def configure_permission_service(service: Optional[PermissionService]):
    """Install the service returned by get_permission_service (None resets it)"""
    global _permission_service
    with _permission_service_lock:
        _permission_service = service


# ==================== HELPER FUNCTIONS ====================

def has_permission(user, resource: str, action: str) -> bool:
    """Convenience function for permission checking"""
    return get_permission_service().has_permission(user, resource, action)


def list_effective_permissions(user) -> Dict[str, Any]:
    """Convenience function for listing permissions"""
    return get_permission_service().list_effective_permissions(user)
