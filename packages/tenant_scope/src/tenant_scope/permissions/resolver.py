"""
Permission Resolver

Answers "may this identity perform ACTION on MODULE/PAGE?" against a tenant's
permission table.

Resolution order:
1. While the scope is loading, allow (the table may not be known yet)
2. Owners are allowed everything, with or without a table
3. An explicit role or department override that grants wins
4. Otherwise the identity's role grants OR its department grants; the table
   defaults apply only when neither the role nor the department is known

The resolver never raises; anything it cannot interpret is a denial.
"""

import logging

from tenant_scope.contracts.models import Identity
from tenant_scope.contracts.permissions import (
    FULL_ACCESS,
    Action,
    Permission,
    PermissionTable,
    RoleGrants,
)
from tenant_scope.permissions.aliases import (
    COMPANY_MODULE,
    COMPANY_PERMISSION_KEY_ALIASES,
    alias_candidates,
)

logger = logging.getLogger(__name__)

OWNER_ROLES = frozenset({"owner", "company_owner", "company-owner"})

# Modules and pages an owner is granted even when the table omits them
OWNER_MODULES: dict[str, tuple[str, ...]] = {
    "bookings": ("dashboard", "bookings", "tables"),
    "stock": ("dashboard", "products", "suppliers"),
    "hr": ("dashboard", "employees", "roles"),
    "finance": ("dashboard", "accounts", "transactions"),
    "pos": ("dashboard", "sales", "products"),
    "messenger": ("dashboard", "messages", "contacts"),
}


def is_owner(role: str | None) -> bool:
    """True for any historical spelling of the owner role."""
    if not role:
        return False
    return role.strip().lower() in OWNER_ROLES


def _lookup(grants: RoleGrants | None, module: str, page: str, action: Action) -> bool:
    if grants is None:
        return False
    pages = grants.modules.get(module)
    if not pages:
        return False

    cell = pages.get(page)
    if cell is None:
        for alias in alias_candidates(module, page):
            cell = pages.get(alias)
            if cell is not None:
                break
    return cell is not None and cell.allows(action)


def _identity_grants(
    identity: Identity | None,
    table: PermissionTable,
) -> tuple[RoleGrants | None, RoleGrants | None]:
    role = ((identity.role if identity else "") or "").strip().lower()
    department = ((identity.department if identity else "") or "").strip().lower()

    # Defaults stand in for the pair only when the table knows neither key
    if role not in table.roles and department not in table.departments:
        role = table.default_role.lower()
        department = table.default_department.lower()
    return table.roles.get(role), table.departments.get(department)


def resolve(
    identity: Identity | None,
    table: PermissionTable | None,
    module: str,
    page: str,
    action: Action | str,
    role_override: str | None = None,
    department_override: str | None = None,
    loading: bool = False,
) -> bool:
    """
    Resolve one permission check.

    Args:
        identity: Acting user
        table: Tenant permission table; None denies everyone but owners
        module: Module key (e.g., "pos")
        page: Page key within the module (e.g., "sales")
        action: view, edit or delete
        role_override: Check this role's grants first
        department_override: Check this department's grants first
        loading: Scope is still loading

    Returns:
        True if allowed
    """
    if loading:
        logger.debug(
            "Allowing permission check while scope is loading",
            extra={"permission": f"{module}.{page}.{action}"},
        )
        return True

    if is_owner(identity.role if identity else None) or is_owner(role_override):
        return True

    if table is None:
        return False

    try:
        action = Action(action)
    except ValueError:
        logger.warning(f"Unknown permission action: {action!r}")
        return False

    if role_override:
        grants = table.roles.get(role_override.strip().lower())
        if _lookup(grants, module, page, action):
            return True
    if department_override:
        grants = table.departments.get(department_override.strip().lower())
        if _lookup(grants, module, page, action):
            return True

    role_grants, department_grants = _identity_grants(identity, table)
    return _lookup(role_grants, module, page, action) or _lookup(
        department_grants, module, page, action
    )


def _union(a: Permission, b: Permission) -> Permission:
    return Permission(view=a.view or b.view, edit=a.edit or b.edit, delete=a.delete or b.delete)


def _merge_into(target: dict[str, dict[str, Permission]], source: RoleGrants | None) -> None:
    if source is None:
        return
    for module, pages in source.modules.items():
        merged_pages = target.setdefault(module, {})
        for page, cell in pages.items():
            merged_pages[page] = _union(merged_pages.get(page, Permission()), cell)


def _materialize_aliases(modules: dict[str, dict[str, Permission]]) -> None:
    pages = modules.get(COMPANY_MODULE)
    if not pages:
        return
    for new, legacy in COMPANY_PERMISSION_KEY_ALIASES.items():
        if new not in pages and legacy in pages:
            pages[new] = pages[legacy].model_copy()
    for new, legacy in COMPANY_PERMISSION_KEY_ALIASES.items():
        if legacy not in pages and new in pages:
            pages[legacy] = pages[new].model_copy()


def _owner_grants(table: PermissionTable | None) -> RoleGrants:
    modules: dict[str, dict[str, Permission]] = {}
    sources = []
    if table is not None:
        sources = [*table.roles.values(), *table.departments.values()]
    for grants in sources:
        for module, pages in grants.modules.items():
            for page in pages:
                modules.setdefault(module, {})[page] = FULL_ACCESS.model_copy()
    for module, pages in OWNER_MODULES.items():
        for page in pages:
            modules.setdefault(module, {})[page] = FULL_ACCESS.model_copy()
    _materialize_aliases(modules)
    return RoleGrants(modules=modules)


def merged_grants(identity: Identity | None, table: PermissionTable | None) -> RoleGrants | None:
    """
    Effective grants of an identity: role OR department, company aliases
    filled in. Owners get full access to every known page.

    Returns None when the table has nothing for the identity.
    """
    if is_owner(identity.role if identity else None):
        return _owner_grants(table)
    if table is None:
        return None

    role_grants, department_grants = _identity_grants(identity, table)
    if role_grants is None and department_grants is None:
        return None

    modules: dict[str, dict[str, Permission]] = {}
    _merge_into(modules, role_grants)
    _merge_into(modules, department_grants)
    _materialize_aliases(modules)
    return RoleGrants(modules=modules)


class PermissionResolver:
    """Permission checks against one tenant's table."""

    def __init__(self, table: PermissionTable | None):
        self.table = table

    def can(
        self,
        identity: Identity | None,
        module: str,
        page: str,
        action: Action | str,
        role_override: str | None = None,
        department_override: str | None = None,
        loading: bool = False,
    ) -> bool:
        return resolve(
            identity,
            self.table,
            module,
            page,
            action,
            role_override=role_override,
            department_override=department_override,
            loading=loading,
        )

    def grants_for(self, identity: Identity | None) -> RoleGrants | None:
        return merged_grants(identity, self.table)
