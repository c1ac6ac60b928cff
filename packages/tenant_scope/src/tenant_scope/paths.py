"""
Storage Paths

Pure derivation of the hierarchical storage path for the current scope:

    tenant/{company}
    tenant/{company}/sites/{site}
    tenant/{company}/sites/{site}/subsites/{subsite}
"""

from tenant_scope.contracts.models import DataManagementConfig, StorageScope
from tenant_scope.errors import InvalidInput
from tenant_scope.scope.state import ScopeState

ROOT = "tenant"

# Always stored at tenant level, whatever is selected
TENANT_SCOPED_MODULES = frozenset(
    {"settings", "messaging", "notifications", "analytics", "assistant", "company", "messenger"}
)


def _tenant_path(company_id: str) -> str:
    return f"{ROOT}/{company_id}"


def _site_path(company_id: str, site_id: str) -> str:
    return f"{ROOT}/{company_id}/sites/{site_id}"


def _subsite_path(company_id: str, site_id: str, subsite_id: str) -> str:
    return f"{ROOT}/{company_id}/sites/{site_id}/subsites/{subsite_id}"


def resolve_path(scope: ScopeState, module: str | None = None) -> str:
    """
    Storage path for the scope, or "" when no tenant is selected.

    Tenant-scoped modules always resolve to the tenant path.
    """
    if not scope.company_id:
        return ""
    if module in TENANT_SCOPED_MODULES or not scope.site_id:
        return _tenant_path(scope.company_id)
    if scope.subsite_id:
        return _subsite_path(scope.company_id, scope.site_id, scope.subsite_id)
    return _site_path(scope.company_id, scope.site_id)


def read_paths(scope: ScopeState) -> list[str]:
    """Paths to read from, most specific first (subsite, site, tenant)."""
    if not scope.company_id:
        return []
    paths = []
    if scope.site_id and scope.subsite_id:
        paths.append(_subsite_path(scope.company_id, scope.site_id, scope.subsite_id))
    if scope.site_id:
        paths.append(_site_path(scope.company_id, scope.site_id))
    paths.append(_tenant_path(scope.company_id))
    return paths


def write_path(scope: ScopeState) -> str:
    """The most specific path of the scope."""
    return resolve_path(scope)


def module_path(
    scope: ScopeState,
    module: str,
    data_management: DataManagementConfig | None = None,
) -> str:
    """
    Storage path for a module, honouring its configured storage scope.

    Company-stored modules truncate to the tenant path and site-stored
    modules drop the subsite. Modules without a storage scope resolve like
    `resolve_path`.
    """
    if not scope.company_id:
        return ""
    if module in TENANT_SCOPED_MODULES:
        return _tenant_path(scope.company_id)

    config = data_management or scope.data_management
    storage = config.scope_for(module)
    if storage == StorageScope.COMPANY or not scope.site_id:
        return _tenant_path(scope.company_id)
    if storage == StorageScope.SITE:
        return _site_path(scope.company_id, scope.site_id)
    return resolve_path(scope, module)


def parse_path(path: str) -> tuple[str, str | None, str | None]:
    """
    Split a storage path into (company_id, site_id, subsite_id).

    Raises:
        InvalidInput: not a tenant storage path
    """
    parts = [part for part in path.strip("/").split("/") if part]
    if len(parts) not in (2, 4, 6) or parts[0] != ROOT:
        raise InvalidInput(f"Not a storage path: {path!r}")
    if len(parts) >= 4 and parts[2] != "sites":
        raise InvalidInput(f"Not a storage path: {path!r}")
    if len(parts) == 6 and parts[4] != "subsites":
        raise InvalidInput(f"Not a storage path: {path!r}")

    company_id = parts[1]
    site_id = parts[3] if len(parts) >= 4 else None
    subsite_id = parts[5] if len(parts) == 6 else None
    return company_id, site_id, subsite_id
