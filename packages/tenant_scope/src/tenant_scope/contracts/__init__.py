"""
Tenant Scope Contracts

Data models shared by the state machine, hydration pipeline and resolvers.
"""

from tenant_scope.contracts.models import (
    Address,
    Company,
    DataManagementConfig,
    Identity,
    Site,
    StorageScope,
    Subsite,
    Team,
    parse_sites,
)
from tenant_scope.contracts.permissions import (
    Action,
    Permission,
    PermissionTable,
    RoleGrants,
)

__all__ = [
    "Action",
    "Address",
    "Company",
    "DataManagementConfig",
    "Identity",
    "Permission",
    "PermissionTable",
    "RoleGrants",
    "Site",
    "StorageScope",
    "Subsite",
    "Team",
    "parse_sites",
]
