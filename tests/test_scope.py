"""
Tests for role-derived data scopes.
"""

import pytest
from sqlalchemy import Column, Integer, String, create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from crm_access.services.catalog import FixedRole
from crm_access.services.scope import DataScope, ScopeKind, scope_for, visible_scope


RecordBase = declarative_base()


class Lead(RecordBase):
    """Stand-in for a CRM table with ownership columns"""
    __tablename__ = 'leads'

    id = Column(Integer, primary_key=True)
    name = Column(String(50))
    assigned_to_id = Column(String(36))
    created_by_id = Column(String(36))


@pytest.fixture
def lead_session():
    engine = create_engine("sqlite://")
    RecordBase.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine)()
    session.add_all([
        Lead(id=1, name="assigned to me", assigned_to_id="me", created_by_id="boss"),
        Lead(id=2, name="created by me", assigned_to_id="other", created_by_id="me"),
        Lead(id=3, name="unassigned mine", assigned_to_id=None, created_by_id="me"),
        Lead(id=4, name="not mine", assigned_to_id="other", created_by_id="boss"),
    ])
    session.commit()
    yield session
    session.close()
    engine.dispose()


ROWS = [
    {"assigned_to_id": "me", "created_by_id": "boss"},
    {"assigned_to_id": "other", "created_by_id": "me"},
    {"assigned_to_id": "other", "created_by_id": "boss"},
    {},
]


class TestScopeFor:
    """Tests for the role to scope mapping."""

    def test_superadmin_matches_nothing(self):
        scope = scope_for("SUPERADMIN", "me")
        assert scope.kind == ScopeKind.NO_ACCESS
        assert not any(scope.matches(row) for row in ROWS)

    @pytest.mark.parametrize("role", ["ADMIN", "MANAGER", FixedRole.ADMIN, FixedRole.MANAGER])
    def test_admin_and_manager_match_everything(self, role):
        scope = scope_for(role, "me")
        assert scope.kind == ScopeKind.UNRESTRICTED
        assert all(scope.matches(row) for row in ROWS)

    def test_sales_matches_owned_or_assigned(self):
        scope = scope_for("SALES", "me")
        assert scope == DataScope.owned_or_assigned("me")
        assert [scope.matches(row) for row in ROWS] == [True, True, False, False]

    def test_unknown_role_is_most_restrictive(self):
        assert scope_for("INTERN", "me") == DataScope.owned_or_assigned("me")

    def test_matches_objects(self, lead_session):
        scope = scope_for("SALES", "me")
        leads = lead_session.query(Lead).order_by(Lead.id).all()
        assert [scope.matches(lead) for lead in leads] == [True, True, True, False]

    def test_to_dict(self):
        assert scope_for("SALES", "me").to_dict() == {"kind": "owned_or_assigned", "user_id": "me"}


class TestScopeQueries:
    """Scopes applied to SQLAlchemy queries."""

    def _ids(self, query):
        return [lead.id for lead in query.order_by(Lead.id).all()]

    def test_sales_query(self, lead_session):
        query = scope_for("SALES", "me").apply(lead_session.query(Lead), Lead)
        assert self._ids(query) == [1, 2, 3]

    def test_superadmin_query(self, lead_session):
        query = scope_for("SUPERADMIN", "me").apply(lead_session.query(Lead), Lead)
        assert self._ids(query) == []

    def test_manager_query(self, lead_session):
        query = scope_for("MANAGER", "me").apply(lead_session.query(Lead), Lead)
        assert self._ids(query) == [1, 2, 3, 4]

    def test_clause_in_filter(self, lead_session):
        clause = DataScope.unrestricted().clause(Lead)
        assert lead_session.query(Lead).filter(clause).count() == 4


class TestVisibleScope:
    """view_all permission lifts the role scope."""

    def test_sales_with_custom_view_all(self, service, store, make_user):
        store.add_role("X", [("leads", "view_all")])
        user = make_user(user_id="me", role="SALES", custom_role_id="X")
        assert visible_scope(service, user, "leads") == DataScope.unrestricted()

    def test_sales_without_view_all(self, service, make_user):
        user = make_user(user_id="me", role="SALES")
        assert visible_scope(service, user, "leads") == DataScope.owned_or_assigned("me")

    def test_superadmin_sees_no_crm_rows(self, service, make_user):
        user = make_user(user_id="root", role="SUPERADMIN")
        assert visible_scope(service, user, "leads") == DataScope.no_access()
