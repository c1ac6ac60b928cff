"""
Permission Resolution

Merges role and department grants from a tenant's permission table.
"""

from tenant_scope.permissions.aliases import COMPANY_PERMISSION_KEY_ALIASES, alias_candidates
from tenant_scope.permissions.defaults import DEFAULT_PERMISSIONS_RAW, default_permission_table
from tenant_scope.permissions.resolver import (
    OWNER_MODULES,
    PermissionResolver,
    is_owner,
    merged_grants,
    resolve,
)

__all__ = [
    "COMPANY_PERMISSION_KEY_ALIASES",
    "DEFAULT_PERMISSIONS_RAW",
    "OWNER_MODULES",
    "PermissionResolver",
    "alias_candidates",
    "default_permission_table",
    "is_owner",
    "merged_grants",
    "resolve",
]
