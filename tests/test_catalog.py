"""
Tests for the fixed role permission catalog.
"""

import pytest

from crm_access.services.catalog import (
    PERMISSIONS,
    ROLE_PERMISSIONS,
    FixedRole,
    Permission,
    PermissionSet,
    UnknownFixedRole,
    _check_catalog,
    lookup,
)


class TestCatalogLookup:
    """Tests for lookup() over the four fixed roles."""

    @pytest.mark.parametrize("role", list(FixedRole))
    def test_every_fixed_role_is_non_empty(self, role):
        """No fixed role may fall back to an empty permission set."""
        assert len(lookup(role)) > 0

    @pytest.mark.parametrize("role", list(FixedRole))
    def test_lookup_is_deterministic(self, role):
        assert lookup(role) == lookup(role)
        assert lookup(role) == lookup(role.value)

    def test_unknown_role_raises(self):
        with pytest.raises(UnknownFixedRole):
            lookup("INTERN")

    def test_superadmin_has_administration_only(self):
        resources = lookup(FixedRole.SUPERADMIN).resources()
        assert resources == {"users", "roles"}

    def test_admin_includes_superadmin_permissions(self):
        admin = set(lookup(FixedRole.ADMIN))
        superadmin = set(lookup(FixedRole.SUPERADMIN))
        assert superadmin <= admin
        assert PERMISSIONS.LEADS_VIEW_ALL in admin

    def test_manager_has_no_user_administration(self):
        manager = lookup(FixedRole.MANAGER)
        assert manager.has("users", "view_all")
        assert not manager.has("users", "create")
        assert not manager.has("leads", "delete")
        assert "roles" not in manager.resources()

    def test_sales_only_has_assigned_variants(self):
        sales = lookup(FixedRole.SALES)
        actions = {p.action for p in sales}
        assert "view_assigned" in actions
        assert "view_all" not in actions
        assert "edit_all" not in actions

    def test_no_fixed_role_grants_products(self):
        for role in FixedRole:
            assert "products" not in lookup(role).resources()

    def test_check_catalog_rejects_missing_role(self):
        table = dict(ROLE_PERMISSIONS)
        del table[FixedRole.SALES]
        with pytest.raises(RuntimeError, match="SALES"):
            _check_catalog(table)

    def test_check_catalog_rejects_empty_role(self):
        table = dict(ROLE_PERMISSIONS)
        table[FixedRole.MANAGER] = PermissionSet()
        with pytest.raises(RuntimeError, match="MANAGER"):
            _check_catalog(table)


class TestPermissionValues:
    """Tests for the Permission and PermissionSet value types."""

    def test_permission_equality_is_structural(self):
        assert Permission("leads", "view_all") == Permission("leads", "view_all")
        assert Permission("leads", "view_all") == ("leads", "view_all")
        assert hash(Permission("leads", "view_all")) == hash(("leads", "view_all"))

    def test_parse_code(self):
        assert Permission.parse("leads:view_all") == PERMISSIONS.LEADS_VIEW_ALL
        assert PERMISSIONS.LEADS_VIEW_ALL.code == "leads:view_all"

    @pytest.mark.parametrize("code", ["leads", ":view", "leads:", ""])
    def test_parse_rejects_invalid_code(self, code):
        with pytest.raises(ValueError):
            Permission.parse(code)

    def test_permission_set_deduplicates(self):
        permissions = PermissionSet([("tags", "view"), ("tags", "view"), ("tags", "edit")])
        assert len(permissions) == 2

    def test_permission_set_order_independent(self):
        a = PermissionSet([("tags", "view"), ("leads", "create")])
        b = PermissionSet([("leads", "create"), ("tags", "view")])
        assert a == b

    def test_membership_accepts_tuples(self):
        permissions = PermissionSet([("tags", "view")])
        assert ("tags", "view") in permissions
        assert Permission("tags", "edit") not in permissions
        assert "tags" not in permissions

    def test_actions_for_resource(self):
        permissions = PermissionSet([("tags", "view"), ("tags", "edit"), ("leads", "create")])
        assert permissions.actions_for("tags") == {"view", "edit"}
        assert permissions.actions_for("users") == set()

    def test_to_list_is_sorted(self):
        permissions = PermissionSet([("tags", "view"), ("leads", "create")])
        assert permissions.to_list() == [
            {"resource": "leads", "action": "create"},
            {"resource": "tags", "action": "view"},
        ]
