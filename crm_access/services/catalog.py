"""
Permission Catalog - compiled-in permissions of the fixed roles

Every user carries one of four fixed roles. The table below is the
fallback of last resort: it applies whenever a user has no custom role or
the custom role cannot be resolved, so no fixed role may map to an empty set.

Hierarchy:
- SUPERADMIN: user and role administration only, no CRM data
- ADMIN: administration plus unrestricted CRM access
- MANAGER: unrestricted CRM access, users read-only, no deletes
- SALES: CRM access restricted to assigned records
"""

import enum
from typing import Dict, FrozenSet, Iterable, Iterator, List, NamedTuple, Set, Tuple, Union


class AccessControlError(Exception):
    """Base class for permission resolution errors"""


class UnknownFixedRole(AccessControlError):
    """Raised when a role value is not one of the fixed roles"""
    def __init__(self, role):
        self.role = role
        super().__init__(f"Unknown fixed role: {role!r}")


class FixedRole(str, enum.Enum):
    """Roles compiled into the application"""
    SUPERADMIN = "SUPERADMIN"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    SALES = "SALES"

    @classmethod
    def coerce(cls, value: Union["FixedRole", str]) -> "FixedRole":
        """Convert a stored role value into a FixedRole or raise UnknownFixedRole"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownFixedRole(value) from None


class Permission(NamedTuple):
    """One grantable capability, e.g. Permission('leads', 'view_all')"""
    resource: str
    action: str

    @classmethod
    def parse(cls, code: str) -> "Permission":
        """Parse the 'resource:action' form used in seeds and tokens"""
        resource, sep, action = code.partition(':')
        if not sep or not resource or not action:
            raise ValueError(f"Invalid permission code: {code!r}")
        return cls(resource.strip(), action.strip())

    @property
    def code(self) -> str:
        return f"{self.resource}:{self.action}"


PermissionLike = Union[Permission, Tuple[str, str]]


class PermissionSet:
    """Immutable, deduplicated set of permissions effective for one user"""

    __slots__ = ('_items',)

    def __init__(self, permissions: Iterable[PermissionLike] = ()):
        self._items: FrozenSet[Permission] = frozenset(
            Permission(*p) for p in permissions
        )

    def has(self, resource: str, action: str) -> bool:
        return Permission(resource, action) in self._items

    def actions_for(self, resource: str) -> Set[str]:
        """All actions granted on a resource"""
        return {p.action for p in self._items if p.resource == resource}

    def resources(self) -> Set[str]:
        return {p.resource for p in self._items}

    def sorted(self) -> List[Permission]:
        return sorted(self._items)

    def to_list(self) -> List[Dict[str, str]]:
        return [{'resource': p.resource, 'action': p.action} for p in self.sorted()]

    def __contains__(self, item) -> bool:
        if isinstance(item, str):
            return False
        try:
            return Permission(*item) in self._items
        except TypeError:
            return False

    def __iter__(self) -> Iterator[Permission]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other) -> bool:
        if isinstance(other, PermissionSet):
            return self._items == other._items
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        return f"PermissionSet({[p.code for p in self.sorted()]})"


# ==================== NAMED PERMISSIONS ====================

class PERMISSIONS:
    """Named permissions for use in handlers"""
    # User management
    USERS_VIEW_ALL = Permission('users', 'view_all')
    USERS_CREATE = Permission('users', 'create')
    USERS_EDIT = Permission('users', 'edit')
    USERS_DELETE = Permission('users', 'delete')

    # Role management
    ROLES_VIEW = Permission('roles', 'view')
    ROLES_CREATE = Permission('roles', 'create')
    ROLES_EDIT = Permission('roles', 'edit')
    ROLES_DELETE = Permission('roles', 'delete')

    # Lead management
    LEADS_VIEW_ALL = Permission('leads', 'view_all')
    LEADS_VIEW_ASSIGNED = Permission('leads', 'view_assigned')
    LEADS_CREATE = Permission('leads', 'create')
    LEADS_EDIT_ALL = Permission('leads', 'edit_all')
    LEADS_EDIT_ASSIGNED = Permission('leads', 'edit_assigned')
    LEADS_DELETE = Permission('leads', 'delete')
    LEADS_ASSIGN = Permission('leads', 'assign')

    # Customer management
    CUSTOMERS_VIEW_ALL = Permission('customers', 'view_all')
    CUSTOMERS_VIEW_ASSIGNED = Permission('customers', 'view_assigned')
    CUSTOMERS_CREATE = Permission('customers', 'create')
    CUSTOMERS_EDIT_ALL = Permission('customers', 'edit_all')
    CUSTOMERS_EDIT_ASSIGNED = Permission('customers', 'edit_assigned')
    CUSTOMERS_DELETE = Permission('customers', 'delete')

    # Quotation management
    QUOTATIONS_VIEW_ALL = Permission('quotations', 'view_all')
    QUOTATIONS_VIEW_ASSIGNED = Permission('quotations', 'view_assigned')
    QUOTATIONS_CREATE = Permission('quotations', 'create')
    QUOTATIONS_EDIT_ALL = Permission('quotations', 'edit_all')
    QUOTATIONS_EDIT_ASSIGNED = Permission('quotations', 'edit_assigned')
    QUOTATIONS_DELETE = Permission('quotations', 'delete')
    QUOTATIONS_SEND = Permission('quotations', 'send')

    # Task management
    TASKS_VIEW_ALL = Permission('tasks', 'view_all')
    TASKS_VIEW_ASSIGNED = Permission('tasks', 'view_assigned')
    TASKS_CREATE = Permission('tasks', 'create')
    TASKS_EDIT_ALL = Permission('tasks', 'edit_all')
    TASKS_EDIT_ASSIGNED = Permission('tasks', 'edit_assigned')
    TASKS_DELETE = Permission('tasks', 'delete')
    TASKS_ASSIGN = Permission('tasks', 'assign')

    # Activity management
    ACTIVITIES_VIEW_ALL = Permission('activities', 'view_all')
    ACTIVITIES_VIEW_ASSIGNED = Permission('activities', 'view_assigned')
    ACTIVITIES_CREATE = Permission('activities', 'create')
    ACTIVITIES_EDIT_ALL = Permission('activities', 'edit_all')
    ACTIVITIES_EDIT_ASSIGNED = Permission('activities', 'edit_assigned')
    ACTIVITIES_DELETE = Permission('activities', 'delete')

    # Tag management
    TAGS_VIEW = Permission('tags', 'view')
    TAGS_CREATE = Permission('tags', 'create')
    TAGS_EDIT = Permission('tags', 'edit')
    TAGS_DELETE = Permission('tags', 'delete')

    # Product catalog (custom roles only; no fixed role grants these)
    PRODUCTS_VIEW = Permission('products', 'view')
    PRODUCTS_CREATE = Permission('products', 'create')
    PRODUCTS_EDIT = Permission('products', 'edit')
    PRODUCTS_DELETE = Permission('products', 'delete')

    # Dashboard
    DASHBOARD_VIEW_ALL = Permission('dashboard', 'view_all')
    DASHBOARD_VIEW_TEAM = Permission('dashboard', 'view_team')
    DASHBOARD_VIEW_PERSONAL = Permission('dashboard', 'view_personal')


P = PERMISSIONS

_ADMINISTRATION = [
    P.USERS_VIEW_ALL, P.USERS_CREATE, P.USERS_EDIT, P.USERS_DELETE,
    P.ROLES_VIEW, P.ROLES_CREATE, P.ROLES_EDIT, P.ROLES_DELETE,
]

ROLE_PERMISSIONS: Dict[FixedRole, PermissionSet] = {
    FixedRole.SUPERADMIN: PermissionSet(_ADMINISTRATION),

    FixedRole.ADMIN: PermissionSet(_ADMINISTRATION + [
        P.LEADS_VIEW_ALL, P.LEADS_CREATE, P.LEADS_EDIT_ALL, P.LEADS_DELETE, P.LEADS_ASSIGN,
        P.CUSTOMERS_VIEW_ALL, P.CUSTOMERS_CREATE, P.CUSTOMERS_EDIT_ALL, P.CUSTOMERS_DELETE,
        P.QUOTATIONS_VIEW_ALL, P.QUOTATIONS_CREATE, P.QUOTATIONS_EDIT_ALL, P.QUOTATIONS_DELETE,
        P.QUOTATIONS_SEND,
        P.TASKS_VIEW_ALL, P.TASKS_CREATE, P.TASKS_EDIT_ALL, P.TASKS_DELETE, P.TASKS_ASSIGN,
        P.ACTIVITIES_VIEW_ALL, P.ACTIVITIES_CREATE, P.ACTIVITIES_EDIT_ALL, P.ACTIVITIES_DELETE,
        P.TAGS_VIEW, P.TAGS_CREATE, P.TAGS_EDIT, P.TAGS_DELETE,
        P.DASHBOARD_VIEW_ALL,
    ]),

    FixedRole.MANAGER: PermissionSet([
        P.USERS_VIEW_ALL,
        P.LEADS_VIEW_ALL, P.LEADS_CREATE, P.LEADS_EDIT_ALL, P.LEADS_ASSIGN,
        P.CUSTOMERS_VIEW_ALL, P.CUSTOMERS_CREATE, P.CUSTOMERS_EDIT_ALL,
        P.QUOTATIONS_VIEW_ALL, P.QUOTATIONS_CREATE, P.QUOTATIONS_EDIT_ALL, P.QUOTATIONS_SEND,
        P.TASKS_VIEW_ALL, P.TASKS_CREATE, P.TASKS_EDIT_ALL, P.TASKS_ASSIGN,
        P.ACTIVITIES_VIEW_ALL, P.ACTIVITIES_CREATE, P.ACTIVITIES_EDIT_ALL,
        P.TAGS_VIEW, P.TAGS_CREATE, P.TAGS_EDIT,
        P.DASHBOARD_VIEW_TEAM,
    ]),

    FixedRole.SALES: PermissionSet([
        P.LEADS_VIEW_ASSIGNED, P.LEADS_CREATE, P.LEADS_EDIT_ASSIGNED,
        P.CUSTOMERS_VIEW_ASSIGNED, P.CUSTOMERS_CREATE, P.CUSTOMERS_EDIT_ASSIGNED,
        P.QUOTATIONS_VIEW_ASSIGNED, P.QUOTATIONS_CREATE, P.QUOTATIONS_EDIT_ASSIGNED,
        P.QUOTATIONS_SEND,
        P.TASKS_VIEW_ASSIGNED, P.TASKS_CREATE, P.TASKS_EDIT_ASSIGNED,
        P.ACTIVITIES_VIEW_ASSIGNED, P.ACTIVITIES_CREATE, P.ACTIVITIES_EDIT_ASSIGNED,
        P.TAGS_VIEW,
        P.DASHBOARD_VIEW_PERSONAL,
    ]),
}

del P


def _check_catalog(table: Dict[FixedRole, PermissionSet]) -> None:
    missing = [role.value for role in FixedRole if not table.get(role)]
    if missing:
        raise RuntimeError(f"Permission catalog has no permissions for: {', '.join(missing)}")


_check_catalog(ROLE_PERMISSIONS)


def lookup(role: Union[FixedRole, str]) -> PermissionSet:
    """Get the compiled-in permissions of a fixed role"""
    return ROLE_PERMISSIONS[FixedRole.coerce(role)]


def fixed_roles() -> List[FixedRole]:
    return list(FixedRole)
