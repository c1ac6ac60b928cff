"""
Scope State

The current tenant selection plus the sites and subsites visible at each
level. States are immutable; every transition produces a new one.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from tenant_scope.contracts.models import Company, DataManagementConfig, Site, Subsite


class ScopeActionType(str, Enum):
    """Transitions understood by the scope reducer."""

    # Selection
    SET_TENANT = "set_tenant"
    SELECT_SITE = "select_site"
    SELECT_SUBSITE = "select_subsite"
    SELECT_TEAM = "select_team"
    CLEAR_SELECTION = "clear_selection"

    # Data
    SET_SITES = "set_sites"
    SET_COMPANY = "set_company"
    SET_DATA_MANAGEMENT = "set_data_management"

    # Status
    SET_LOADING = "set_loading"
    SET_ERROR = "set_error"

    # Lifecycle
    RESTORE = "restore"
    RESET = "reset"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ScopeAction:
    """A discrete transition request."""

    type: ScopeActionType
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ScopeState:
    """
    Selected (tenant, site, subsite, team) and the lists visible at each level.

    An empty `company_id` is both the initial and the terminal state.
    """

    company_id: str = ""
    company_name: str = ""
    company: Company | None = None
    site_id: str | None = None
    site_name: str | None = None
    subsite_id: str | None = None
    subsite_name: str | None = None
    team_id: str | None = None
    team_name: str | None = None
    sites: tuple[Site, ...] = ()
    subsites: tuple[Subsite, ...] = ()
    data_management: DataManagementConfig = field(default_factory=DataManagementConfig)
    loading: bool = False
    error: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.company_id

    @property
    def has_site(self) -> bool:
        return bool(self.site_id)

    @property
    def has_subsite(self) -> bool:
        return bool(self.site_id and self.subsite_id)

    def describe(self) -> dict[str, Any]:
        """Compact summary for logs."""
        return {
            "company_id": self.company_id,
            "site_id": self.site_id,
            "subsite_id": self.subsite_id,
            "team_id": self.team_id,
            "sites": len(self.sites),
            "subsites": len(self.subsites),
        }
