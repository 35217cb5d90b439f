"""
Data Scope Filter - row-level visibility derived from the fixed role

Permission checks decide whether an operation is allowed at all; the data
scope narrows which rows are visible once it is. Handlers apply the scope
only when the user holds the "*_assigned" variant of a view permission.
"""

import enum
from dataclasses import dataclass
from typing import Any, Optional, Union

from sqlalchemy import false, or_, true

from .catalog import FixedRole


class ScopeKind(str, enum.Enum):
    """Kinds of row restriction"""
    NO_ACCESS = "no_access"
    UNRESTRICTED = "unrestricted"
    OWNED_OR_ASSIGNED = "owned_or_assigned"


@dataclass(frozen=True)
class DataScope:
    """Query restriction for one user"""
    kind: ScopeKind
    user_id: Optional[str] = None

    @classmethod
    def no_access(cls) -> "DataScope":
        return cls(ScopeKind.NO_ACCESS)

    @classmethod
    def unrestricted(cls) -> "DataScope":
        return cls(ScopeKind.UNRESTRICTED)

    @classmethod
    def owned_or_assigned(cls, user_id: str) -> "DataScope":
        return cls(ScopeKind.OWNED_OR_ASSIGNED, user_id)

    def matches(self, row: Any) -> bool:
        """Check a single row (mapping or object with assigned_to_id/created_by_id)"""
        if self.kind == ScopeKind.NO_ACCESS:
            return False
        if self.kind == ScopeKind.UNRESTRICTED:
            return True
        return self.user_id in (_field(row, 'assigned_to_id'), _field(row, 'created_by_id'))

    def clause(self, model):
        """
        Build a SQLAlchemy filter expression for a mapped model.

        The model must expose assigned_to_id and created_by_id columns when
        the scope is owned-or-assigned.
        """
        if self.kind == ScopeKind.NO_ACCESS:
            return false()
        if self.kind == ScopeKind.UNRESTRICTED:
            return true()
        return or_(
            model.assigned_to_id == self.user_id,
            model.created_by_id == self.user_id,
        )

    def apply(self, query, model):
        """Restrict a Query (or Select) to the rows visible under this scope"""
        if self.kind == ScopeKind.UNRESTRICTED:
            return query
        return query.filter(self.clause(model))

    def to_dict(self) -> dict:
        return {'kind': self.kind.value, 'user_id': self.user_id}


def _field(row: Any, name: str):
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def scope_for(role: Union[FixedRole, str], user_id: str) -> DataScope:
    """
    Get the row-level scope for a fixed role.

    SUPERADMIN manages users and roles only and sees no CRM records.
    ADMIN and MANAGER see everything. SALES and any unrecognized role see
    only rows assigned to or created by the user.
    """
    if role == FixedRole.SUPERADMIN:
        return DataScope.no_access()
    if role in (FixedRole.ADMIN, FixedRole.MANAGER):
        return DataScope.unrestricted()
    return DataScope.owned_or_assigned(user_id)


def visible_scope(service, user, resource: str) -> DataScope:
    """
    Scope for listing a resource: unrestricted when the user holds
    "view_all" on it, otherwise the role-derived scope.
    """
    if service.has_permission(user, resource, 'view_all'):
        return DataScope.unrestricted()
    return scope_for(user.role, user.id)
