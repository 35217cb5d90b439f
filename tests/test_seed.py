"""
Tests for seeding permission definitions and system roles.
"""

from crm_access.models import CustomRole, PermissionDefinition
from crm_access.services.catalog import FixedRole, Permission, lookup
from crm_access.services.seed import (
    PERMISSION_DEFINITIONS,
    SYSTEM_ROLES,
    seed_permissions_and_roles,
    system_role_permissions,
)


class TestSeedPermissionsAndRoles:
    """Seeding is complete and idempotent."""

    def test_first_run_creates_everything(self, db_session):
        summary = seed_permissions_and_roles(db_session)

        assert summary["permissions_created"] == len(PERMISSION_DEFINITIONS)
        assert summary["roles_created"] == len(SYSTEM_ROLES)
        assert db_session.query(PermissionDefinition).count() == len(PERMISSION_DEFINITIONS)
        assert db_session.query(CustomRole).filter_by(is_system=True).count() == 4

    def test_second_run_creates_nothing(self, db_session):
        seed_permissions_and_roles(db_session)
        summary = seed_permissions_and_roles(db_session)

        assert summary["permissions_created"] == 0
        assert summary["permissions_updated"] == 0
        assert summary["roles_created"] == 0
        assert summary["roles_updated"] == len(SYSTEM_ROLES)

    def test_system_roles_mirror_catalog(self, db_session):
        seed_permissions_and_roles(db_session)
        manager = db_session.query(CustomRole).filter_by(name="Manager").one()

        granted = {Permission.parse(code) for code in manager.permission_codes()}

        assert set(lookup(FixedRole.MANAGER)) <= granted
        assert granted - set(lookup(FixedRole.MANAGER)) == {
            Permission("products", "view"),
            Permission("products", "create"),
            Permission("products", "edit"),
        }

    def test_reseed_restores_edited_system_role(self, db_session):
        seed_permissions_and_roles(db_session)
        sales = db_session.query(CustomRole).filter_by(name="Sales Representative").one()
        sales.permissions.pop()
        db_session.commit()

        seed_permissions_and_roles(db_session)

        sales = db_session.query(CustomRole).filter_by(name="Sales Representative").one()
        expected = {p.code for p in system_role_permissions(FixedRole.SALES)}
        assert set(sales.permission_codes()) == expected

    def test_seed_clears_service_cache(self, db_session, service, make_user):
        user = make_user(role="SALES")
        service.resolve(user)
        assert len(service.cache) == 1

        seed_permissions_and_roles(db_session, service=service)

        assert len(service.cache) == 0

    def test_definitions_are_unique(self):
        codes = [permission.code for permission, _, _ in PERMISSION_DEFINITIONS]
        assert len(codes) == len(set(codes))

    def test_every_catalog_permission_is_defined(self):
        defined = {permission for permission, _, _ in PERMISSION_DEFINITIONS}
        for role in FixedRole:
            assert set(lookup(role)) <= defined
