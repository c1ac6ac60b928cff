"""
Pytest fixtures for tenant scope tests.
"""

import pytest

from tenant_scope.cache.memory import MemorySiteCache
from tenant_scope.contracts.models import Identity
from tenant_scope.contracts.permissions import PermissionTable
from tenant_scope.providers.stub import StubSiteStore
from tenant_scope.scope.machine import ScopeStateMachine
from tenant_scope.session.memory import MemorySessionStore


@pytest.fixture
def acme_sites():
    """Raw site documents for tenant 'acme', as the store returns them."""
    return {
        "s1": {
            "siteID": "s1",
            "name": "Downtown",
            "isMainSite": True,
            "subsites": {
                # Key and subsiteID disagree
                "abc": {"subsiteID": "xyz", "name": "Bar"},
                "k2": {"name": "Kitchen", "dataManagement": {"stock": "subsite"}},
                "junk": "not-a-subsite",
            },
            "teams": {"t1": {"name": "Floor", "members": {"u1": True}}},
        },
        "s2": {"siteID": "s2", "name": "Harbour", "subsites": {}},
    }


@pytest.fixture
def store(acme_sites):
    """Stub store seeded with tenant 'acme'."""
    return StubSiteStore({"acme": acme_sites})


@pytest.fixture
def cache():
    return MemorySiteCache()


@pytest.fixture
def session_store():
    return MemorySessionStore()


@pytest.fixture
def machine():
    return ScopeStateMachine()


@pytest.fixture
def staff_table():
    """Staff role granting pos.sales.view only."""
    return PermissionTable.from_raw(
        {
            "roles": {
                "staff": {"modules": {"pos": {"sales": {"view": True}}}},
            },
            "departments": {},
            "defaultRole": "staff",
            "defaultDepartment": "front-of-house",
        }
    )


@pytest.fixture
def staff_identity():
    return Identity(uid="u1", role="staff", department="front-of-house")
