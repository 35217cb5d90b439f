"""
Shared pytest fixtures for the CRM Access test suite.

Provides a controllable clock, an in-memory role store, user records and an
isolated SQLite database per test.
"""

import os

# Must be set before crm_access.core.database creates its engine
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from dataclasses import dataclass
from typing import Dict, Optional

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from crm_access.core.database import Base
from crm_access.services.cache import PermissionCache
from crm_access.services.catalog import PermissionSet
from crm_access.services.permissions import PermissionService, configure_permission_service
from crm_access.services.store import RoleInactive, RoleNotFound, RolePermissionStore


class FakeClock:
    """Manually advanced clock for TTL tests"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeRoleStore(RolePermissionStore):
    """In-memory role store that records every lookup"""

    def __init__(self):
        self.roles: Dict[str, PermissionSet] = {}
        self.inactive = set()
        self.error: Optional[Exception] = None
        self.calls = []

    def add_role(self, role_id: str, permissions, active: bool = True):
        self.roles[role_id] = PermissionSet(permissions)
        if not active:
            self.inactive.add(role_id)

    def resolve_custom_role(self, role_id, timeout=None):
        self.calls.append((role_id, timeout))
        if self.error is not None:
            raise self.error
        if role_id not in self.roles:
            raise RoleNotFound(role_id)
        if role_id in self.inactive:
            raise RoleInactive(role_id)
        return self.roles[role_id]


@dataclass
class UserRecord:
    """Minimal user as read by the permission engine"""
    id: str
    role: str
    custom_role_id: Optional[str] = None
    is_active: bool = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return FakeRoleStore()


@pytest.fixture
def cache(clock):
    return PermissionCache(ttl=300, clock=clock)


@pytest.fixture
def service(store, cache):
    return PermissionService(store=store, cache=cache)


@pytest.fixture
def make_user():
    def _make(user_id="u1", role="SALES", custom_role_id=None, is_active=True):
        return UserRecord(user_id, role, custom_role_id, is_active)
    return _make


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import crm_access.models  # noqa: F401  (register tables)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture(autouse=True)
def reset_default_service():
    yield
    configure_permission_service(None)
