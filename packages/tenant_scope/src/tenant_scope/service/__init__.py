"""
Tenant Scope Services

Session-facing facade and site access rules.
"""

from tenant_scope.service.access import accessible_sites, auto_select_single_site, site_hierarchy
from tenant_scope.service.context import CompanyContext

__all__ = [
    "CompanyContext",
    "accessible_sites",
    "auto_select_single_site",
    "site_hierarchy",
]
