"""
Seed the permission definitions and the system custom roles.

System roles mirror the fixed role catalog so administrators can copy and
adjust them. They additionally grant the product catalog permissions, which
only exist as custom role permissions.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from .catalog import PERMISSIONS as P, ROLE_PERMISSIONS, FixedRole, Permission

LOGGER = logging.getLogger(__name__)


PERMISSION_DEFINITIONS = [
    # User Management
    (P.USERS_VIEW_ALL, 'View all users', 'Admin'),
    (P.USERS_CREATE, 'Create new users', 'Admin'),
    (P.USERS_EDIT, 'Edit user details', 'Admin'),
    (P.USERS_DELETE, 'Delete users', 'Admin'),

    # Role Management
    (P.ROLES_VIEW, 'View roles', 'Admin'),
    (P.ROLES_CREATE, 'Create new roles', 'Admin'),
    (P.ROLES_EDIT, 'Edit role permissions', 'Admin'),
    (P.ROLES_DELETE, 'Delete roles', 'Admin'),

    # Lead Management
    (P.LEADS_VIEW_ALL, 'View all leads', 'CRM'),
    (P.LEADS_VIEW_ASSIGNED, 'View assigned leads only', 'CRM'),
    (P.LEADS_CREATE, 'Create new leads', 'CRM'),
    (P.LEADS_EDIT_ALL, 'Edit all leads', 'CRM'),
    (P.LEADS_EDIT_ASSIGNED, 'Edit assigned leads only', 'CRM'),
    (P.LEADS_DELETE, 'Delete leads', 'CRM'),
    (P.LEADS_ASSIGN, 'Assign leads to users', 'CRM'),

    # Customer Management
    (P.CUSTOMERS_VIEW_ALL, 'View all customers', 'CRM'),
    (P.CUSTOMERS_VIEW_ASSIGNED, 'View assigned customers only', 'CRM'),
    (P.CUSTOMERS_CREATE, 'Create new customers', 'CRM'),
    (P.CUSTOMERS_EDIT_ALL, 'Edit all customers', 'CRM'),
    (P.CUSTOMERS_EDIT_ASSIGNED, 'Edit assigned customers only', 'CRM'),
    (P.CUSTOMERS_DELETE, 'Delete customers', 'CRM'),

    # Quotation Management
    (P.QUOTATIONS_VIEW_ALL, 'View all quotations', 'CRM'),
    (P.QUOTATIONS_VIEW_ASSIGNED, 'View assigned quotations only', 'CRM'),
    (P.QUOTATIONS_CREATE, 'Create new quotations', 'CRM'),
    (P.QUOTATIONS_EDIT_ALL, 'Edit all quotations', 'CRM'),
    (P.QUOTATIONS_EDIT_ASSIGNED, 'Edit assigned quotations only', 'CRM'),
    (P.QUOTATIONS_DELETE, 'Delete quotations', 'CRM'),
    (P.QUOTATIONS_SEND, 'Send quotations to customers', 'CRM'),

    # Task Management
    (P.TASKS_VIEW_ALL, 'View all tasks', 'CRM'),
    (P.TASKS_VIEW_ASSIGNED, 'View assigned tasks only', 'CRM'),
    (P.TASKS_CREATE, 'Create new tasks', 'CRM'),
    (P.TASKS_EDIT_ALL, 'Edit all tasks', 'CRM'),
    (P.TASKS_EDIT_ASSIGNED, 'Edit assigned tasks only', 'CRM'),
    (P.TASKS_DELETE, 'Delete tasks', 'CRM'),
    (P.TASKS_ASSIGN, 'Assign tasks to users', 'CRM'),

    # Activity Management
    (P.ACTIVITIES_VIEW_ALL, 'View all activities', 'CRM'),
    (P.ACTIVITIES_VIEW_ASSIGNED, 'View assigned activities only', 'CRM'),
    (P.ACTIVITIES_CREATE, 'Create new activities', 'CRM'),
    (P.ACTIVITIES_EDIT_ALL, 'Edit all activities', 'CRM'),
    (P.ACTIVITIES_EDIT_ASSIGNED, 'Edit assigned activities only', 'CRM'),
    (P.ACTIVITIES_DELETE, 'Delete activities', 'CRM'),

    # Tag Management
    (P.TAGS_VIEW, 'View tags', 'CRM'),
    (P.TAGS_CREATE, 'Create new tags', 'CRM'),
    (P.TAGS_EDIT, 'Edit tags', 'CRM'),
    (P.TAGS_DELETE, 'Delete tags', 'CRM'),

    # Product Management
    (P.PRODUCTS_VIEW, 'View products catalog', 'Inventory'),
    (P.PRODUCTS_CREATE, 'Create new products', 'Inventory'),
    (P.PRODUCTS_EDIT, 'Edit product details', 'Inventory'),
    (P.PRODUCTS_DELETE, 'Delete products', 'Inventory'),

    # Dashboard & Reports
    (P.DASHBOARD_VIEW_ALL, 'View all dashboard data', 'Reports'),
    (P.DASHBOARD_VIEW_TEAM, 'View team dashboard data', 'Reports'),
    (P.DASHBOARD_VIEW_PERSONAL, 'View personal dashboard data', 'Reports'),
]

_PRODUCT_EXTRAS = {
    FixedRole.SUPERADMIN: [],
    FixedRole.ADMIN: [P.PRODUCTS_VIEW, P.PRODUCTS_CREATE, P.PRODUCTS_EDIT, P.PRODUCTS_DELETE],
    FixedRole.MANAGER: [P.PRODUCTS_VIEW, P.PRODUCTS_CREATE, P.PRODUCTS_EDIT],
    FixedRole.SALES: [P.PRODUCTS_VIEW],
}

SYSTEM_ROLES = [
    {
        'name': 'Super Administrator',
        'description': 'Full system access with user management only',
        'fixed_role': FixedRole.SUPERADMIN,
    },
    {
        'name': 'Administrator',
        'description': 'Full access to all CRM features and user management',
        'fixed_role': FixedRole.ADMIN,
    },
    {
        'name': 'Manager',
        'description': 'Team management with full CRM access',
        'fixed_role': FixedRole.MANAGER,
    },
    {
        'name': 'Sales Representative',
        'description': 'Basic CRM access with assigned items only',
        'fixed_role': FixedRole.SALES,
    },
]


def system_role_permissions(fixed_role: FixedRole) -> List[Permission]:
    """Permissions granted by the system role that mirrors a fixed role"""
    return sorted(set(ROLE_PERMISSIONS[fixed_role]) | set(_PRODUCT_EXTRAS[fixed_role]))


def seed_permissions_and_roles(session: Session, service=None) -> Dict[str, int]:
    """
    Create or update permission definitions and system roles.

    Safe to run repeatedly. When a PermissionService is passed its cache is
    cleared, since system role permission sets may have changed.

    Returns:
        Counts of created/updated permissions and roles
    """
    from crm_access.models import CustomRole, PermissionDefinition, RolePermission

    summary = {
        'permissions_created': 0,
        'permissions_updated': 0,
        'roles_created': 0,
        'roles_updated': 0,
    }

    definitions: Dict[Permission, PermissionDefinition] = {}
    for permission, description, category in PERMISSION_DEFINITIONS:
        record = session.query(PermissionDefinition).filter_by(
            resource=permission.resource,
            action=permission.action
        ).first()
        if record is None:
            record = PermissionDefinition(
                resource=permission.resource,
                action=permission.action,
                description=description,
                category=category
            )
            session.add(record)
            summary['permissions_created'] += 1
        elif record.description != description or record.category != category:
            record.description = description
            record.category = category
            summary['permissions_updated'] += 1
        definitions[permission] = record

    session.flush()

    for role_data in SYSTEM_ROLES:
        role = session.query(CustomRole).filter_by(name=role_data['name']).first()
        if role is None:
            role = CustomRole(
                name=role_data['name'],
                description=role_data['description'],
                is_system=True,
                is_active=True
            )
            session.add(role)
            summary['roles_created'] += 1
            LOGGER.info("Created system role: %s", role.name)
        else:
            role.description = role_data['description']
            role.is_system = True
            summary['roles_updated'] += 1
            LOGGER.info("Updated system role: %s", role.name)

        wanted = set(system_role_permissions(role_data['fixed_role']))
        current = {
            Permission(rp.permission.resource, rp.permission.action): rp
            for rp in role.permissions
        }
        for permission in sorted(wanted - set(current)):
            role.permissions.append(RolePermission(permission=definitions[permission]))
        for permission in set(current) - wanted:
            role.permissions.remove(current[permission])

    session.commit()

    if service is not None:
        service.invalidate_all()

    return summary
