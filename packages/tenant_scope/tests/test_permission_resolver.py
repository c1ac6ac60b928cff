"""
Tests for permission resolution.
"""

import pytest

from tenant_scope.contracts.models import Identity
from tenant_scope.contracts.permissions import Permission, PermissionTable, RoleGrants
from tenant_scope.permissions import (
    OWNER_MODULES,
    PermissionResolver,
    alias_candidates,
    default_permission_table,
    is_owner,
    merged_grants,
    resolve,
)


@pytest.fixture
def split_table():
    """Role grants view, department grants edit, on different pages."""
    return PermissionTable.from_raw(
        {
            "roles": {
                "staff": {"modules": {"pos": {"sales": {"view": True}}}},
                "manager": {"modules": {"hr": {"employees": {"view": True, "edit": True}}}},
            },
            "departments": {
                "front-of-house": {"modules": {"pos": {"sales": {"edit": True}}}},
                "kitchen": {"modules": {"stock": {"items": {"view": True}}}},
            },
        }
    )


@pytest.fixture
def company_table():
    """Company pages stored under a mix of legacy and new keys."""
    return PermissionTable.from_raw(
        {
            "roles": {
                "legacy": {"modules": {"company": {"setup": {"view": True}}}},
                "modern": {"modules": {"company": {"myChecklists": {"view": True}}}},
            },
            "departments": {},
        }
    )


class TestResolve:
    """Tests for resolve()."""

    def test_staff_scenario(self, staff_table, staff_identity):
        """Test a staff role granting pos.sales.view only."""
        assert resolve(staff_identity, staff_table, "pos", "sales", "view") is True
        assert resolve(staff_identity, staff_table, "pos", "sales", "edit") is False
        assert resolve(staff_identity, staff_table, "hr", "employees", "view") is False

    def test_merge_is_union(self, split_table):
        """Test that role OR department grants."""
        identity = Identity(uid="u1", role="staff", department="front-of-house")
        assert resolve(identity, split_table, "pos", "sales", "view") is True
        assert resolve(identity, split_table, "pos", "sales", "edit") is True
        assert resolve(identity, split_table, "pos", "sales", "delete") is False

    def test_unknown_role_uses_defaults(self, split_table):
        """Test fallback to the default role and department."""
        identity = Identity(uid="u1", role="intern", department="nowhere")
        assert resolve(identity, split_table, "pos", "sales", "view") is True
        assert resolve(identity, split_table, "pos", "sales", "edit") is True

    def test_known_role_unknown_department(self, split_table):
        """Test that an unknown department does not borrow the default department."""
        identity = Identity(uid="u1", role="staff", department="bar")
        assert resolve(identity, split_table, "pos", "sales", "view") is True
        assert resolve(identity, split_table, "pos", "sales", "edit") is False
        cell = merged_grants(identity, split_table).modules["pos"]["sales"]
        assert (cell.view, cell.edit) == (True, False)

    def test_unknown_role_known_department(self, split_table):
        """Test that an unknown role does not borrow the default role."""
        identity = Identity(uid="u1", role="intern", department="front-of-house")
        assert resolve(identity, split_table, "pos", "sales", "edit") is True
        assert resolve(identity, split_table, "pos", "sales", "view") is False

    def test_role_case_insensitive(self, split_table):
        """Test that identity roles match lower-cased table keys."""
        identity = Identity(uid="u1", role="Manager", department="kitchen")
        assert resolve(identity, split_table, "hr", "employees", "edit") is True
        assert resolve(identity, split_table, "stock", "items", "view") is True

    @pytest.mark.parametrize("role", ["owner", "Owner", "OWNER", " owner ", "company_owner", "company-owner"])
    def test_owner_bypass(self, role):
        """Test owners are allowed even without a table."""
        identity = Identity(uid="boss", role=role)
        assert resolve(identity, None, "finance", "banking", "delete") is True
        assert resolve(identity, PermissionTable(), "anything", "page", "edit") is True

    def test_owner_role_override(self, staff_table, staff_identity):
        """Test that an owner role override bypasses the table."""
        assert resolve(staff_identity, staff_table, "finance", "banking", "delete", role_override="owner") is True

    def test_no_table_denies(self, staff_identity):
        """Test that a missing table denies non-owners."""
        assert resolve(staff_identity, None, "pos", "sales", "view") is False

    def test_loading_allows(self, staff_identity):
        """Test the transient allow while the scope is loading."""
        assert resolve(staff_identity, None, "finance", "banking", "delete", loading=True) is True

    def test_role_override_grants(self, split_table, staff_identity):
        """Test that a granting role override wins."""
        assert resolve(staff_identity, split_table, "hr", "employees", "edit", role_override="manager") is True

    def test_department_override_grants(self, split_table, staff_identity):
        """Test that a granting department override wins."""
        assert resolve(
            staff_identity, split_table, "stock", "items", "view", department_override="kitchen"
        ) is True

    def test_non_granting_override_falls_through(self, split_table, staff_identity):
        """Test that an override without the grant still checks the identity."""
        assert resolve(staff_identity, split_table, "pos", "sales", "view", role_override="manager") is True

    def test_unknown_override_ignored(self, split_table, staff_identity):
        """Test that an override naming no table entry is ignored."""
        assert resolve(staff_identity, split_table, "pos", "sales", "view", role_override="ghost") is True
        assert resolve(staff_identity, split_table, "hr", "employees", "view", role_override="ghost") is False

    def test_unknown_action_denied(self, staff_table, staff_identity):
        """Test that an unknown action is a denial, not an error."""
        assert resolve(staff_identity, staff_table, "pos", "sales", "approve") is False

    def test_directly_built_table_matches_mixed_case(self):
        """Test that a table built from models matches roles regardless of case."""
        grants = RoleGrants(modules={"pos": {"sales": Permission(view=True)}})
        table = PermissionTable(roles={"Staff": grants})
        assert resolve(Identity(uid="u1", role="STAFF"), table, "pos", "sales", "view") is True

    def test_empty_table_denies(self, staff_identity):
        """Test that an empty table denies everything."""
        assert resolve(staff_identity, PermissionTable(), "pos", "sales", "view") is False


class TestAliases:
    """Tests for company permission key aliases."""

    def test_alias_candidates(self):
        """Test lookup order in both directions."""
        assert alias_candidates("company", "dashboard") == ["setup"]
        assert alias_candidates("company", "setup") == ["dashboard", "info", "siteManagement"]
        assert alias_candidates("company", "checklist") == ["checklists", "myChecklists"]
        assert alias_candidates("pos", "dashboard") == []

    def test_new_key_reads_legacy_grant(self, company_table):
        """Test that a new page key falls back to its legacy key."""
        identity = Identity(uid="u1", role="legacy")
        for page in ("dashboard", "info", "siteManagement", "setup"):
            assert resolve(identity, company_table, "company", page, "view") is True

    def test_legacy_key_reads_new_grant(self, company_table):
        """Test that a legacy page key falls back to a new key."""
        identity = Identity(uid="u1", role="modern")
        assert resolve(identity, company_table, "company", "checklist", "view") is True
        assert resolve(identity, company_table, "company", "checklists", "view") is False

    def test_aliases_only_for_company(self):
        """Test that other modules do not alias."""
        table = PermissionTable.from_raw({"roles": {"staff": {"pos": {"setup": {"view": True}}}}})
        identity = Identity(uid="u1", role="staff")
        assert resolve(identity, table, "pos", "dashboard", "view") is False


class TestMergedGrants:
    """Tests for merged_grants() and PermissionResolver."""

    def test_union_of_role_and_department(self, split_table):
        """Test the merged table combines both grant objects."""
        identity = Identity(uid="u1", role="staff", department="front-of-house")
        merged = merged_grants(identity, split_table)
        cell = merged.modules["pos"]["sales"]
        assert (cell.view, cell.edit, cell.delete) == (True, True, False)

    def test_company_aliases_materialized(self, company_table):
        """Test that alias keys appear in the merged table."""
        merged = merged_grants(Identity(uid="u1", role="legacy"), company_table)
        assert merged.modules["company"]["dashboard"].view is True
        assert merged.modules["company"]["siteManagement"].view is True

    def test_owner_full_access(self, split_table):
        """Test that owners get every known page plus the owner catalogue."""
        merged = merged_grants(Identity(uid="boss", role="owner"), split_table)
        assert merged.modules["stock"]["items"].delete is True
        for module, pages in OWNER_MODULES.items():
            for page in pages:
                assert merged.modules[module][page].edit is True

    def test_nothing_for_identity(self):
        """Test None when the table has nothing for the identity."""
        assert merged_grants(Identity(uid="u1", role="staff"), PermissionTable()) is None
        assert merged_grants(Identity(uid="u1", role="staff"), None) is None

    def test_resolver_class(self, staff_table, staff_identity):
        """Test the table-bound resolver."""
        resolver = PermissionResolver(staff_table)
        assert resolver.can(staff_identity, "pos", "sales", "view") is True
        assert resolver.can(staff_identity, "pos", "sales", "edit") is False
        assert resolver.grants_for(staff_identity).modules["pos"]["sales"].view is True


class TestDefaults:
    """Tests for the built-in permission table."""

    def test_defaults(self):
        """Test default role and department names."""
        table = default_permission_table()
        assert table.default_role == "staff"
        assert table.default_department == "front-of-house"
        assert set(table.roles) == {"admin", "manager", "supervisor", "staff"}
        assert set(table.departments) == {"management", "kitchen", "front-of-house", "administration"}

    def test_staff_front_of_house(self):
        """Test a few grants of the default staff member."""
        table = default_permission_table()
        identity = Identity(uid="u1", role="staff", department="front-of-house")
        assert resolve(identity, table, "pos", "orders", "edit") is True
        assert resolve(identity, table, "finance", "banking", "view") is False
        assert resolve(identity, table, "company", "myChecklists", "view") is True

    def test_is_owner(self):
        """Test owner detection."""
        assert is_owner("Owner") is True
        assert is_owner("admin") is False
        assert is_owner(None) is False
