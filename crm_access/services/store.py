"""
Role Permission Store - read access to custom role assignments

The resolver only needs one query: given a custom role id, which permissions
does the role grant? Missing and inactive roles are reported as exceptions so
that an active role with zero permissions (an empty PermissionSet) stays
distinguishable from a role that did not resolve.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .catalog import AccessControlError, PermissionSet

LOGGER = logging.getLogger(__name__)


class StoreUnavailable(AccessControlError):
    """The role store could not be reached or the query failed"""


class RoleNotFound(AccessControlError):
    """The referenced custom role does not exist"""
    def __init__(self, role_id, message: Optional[str] = None):
        self.role_id = role_id
        super().__init__(message or f"Custom role not found: {role_id}")


class RoleInactive(RoleNotFound):
    """The referenced custom role exists but is deactivated"""
    def __init__(self, role_id):
        super().__init__(role_id, f"Custom role is inactive: {role_id}")


class RolePermissionStore(ABC):
    """Source of custom role permissions"""

    @abstractmethod
    def resolve_custom_role(self, role_id: str, timeout: Optional[float] = None) -> PermissionSet:
        """
        Get the permissions granted by an active custom role.

        Args:
            role_id: Custom role identifier
            timeout: Caller deadline for the lookup, in seconds

        Returns:
            PermissionSet: possibly empty if the role grants nothing

        Raises:
            RoleNotFound: role does not exist
            RoleInactive: role exists but is deactivated
            StoreUnavailable: transient failure reaching the store
        """


class SqlRolePermissionStore(RolePermissionStore):
    """Custom role lookups against the relational database"""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def resolve_custom_role(self, role_id: str, timeout: Optional[float] = None) -> PermissionSet:
        from crm_access.models import CustomRole, PermissionDefinition, RolePermission

        session = self.session_factory()
        try:
            self._apply_timeout(session, timeout)

            role = session.get(CustomRole, role_id)
            if role is None:
                raise RoleNotFound(role_id)
            if not role.is_active:
                raise RoleInactive(role_id)

            rows = session.query(
                PermissionDefinition.resource,
                PermissionDefinition.action
            ).join(
                RolePermission, RolePermission.permission_id == PermissionDefinition.id
            ).filter(
                RolePermission.role_id == role_id
            ).all()

            return PermissionSet((row.resource, row.action) for row in rows)
        except SQLAlchemyError as exc:
            raise StoreUnavailable(f"Failed to load custom role {role_id}: {exc}") from exc
        finally:
            session.close()

    def _apply_timeout(self, session: Session, timeout: Optional[float]):
        """Bound the lookup by the caller's deadline where the database supports it"""
        if not timeout:
            return
        if session.get_bind().dialect.name == 'postgresql':
            # SET does not accept bind parameters; the value is always an int
            session.execute(text(f"SET LOCAL statement_timeout = {max(int(timeout * 1000), 1)}"))
        else:
            LOGGER.debug("statement timeout not supported by %s, ignoring", session.get_bind().dialect.name)
