"""
Scope Reducer

Pure transition function `reduce(state, action) -> state`. All cascading
rules live here:

- a new tenant clears site, subsite, team and the visible lists
- a new site clears subsite and team and re-derives the subsite list
- a new subsite clears team
- a new site list re-derives subsites for the selected site
- a subsite storage config applies only while that subsite is selected;
  otherwise the parent config (site, then tenant, then default) is in effect
"""

import logging
from dataclasses import replace

from tenant_scope.contracts.models import Company, DataManagementConfig, Site
from tenant_scope.errors import InvalidInput, NotFound
from tenant_scope.repair import find_site, find_subsite, subsites_of
from tenant_scope.scope.state import ScopeAction, ScopeActionType, ScopeState

logger = logging.getLogger(__name__)


def _require_site(state: ScopeState, what: str) -> None:
    if not state.site_id:
        raise InvalidInput(
            f"Cannot select {what} without a selected site",
            details={"company_id": state.company_id},
        )


def parent_config(state: ScopeState, site_id: str | None = None) -> DataManagementConfig:
    """Storage config in effect above the subsite: site override, else tenant, else default."""
    site = find_site(state.sites, site_id if site_id is not None else state.site_id)
    if site is not None and DataManagementConfig.has_override(site.data_management):
        return DataManagementConfig.from_raw(site.data_management)
    if state.company is not None:
        return state.company.data_management
    return DataManagementConfig()


def _selection_config(state: ScopeState) -> DataManagementConfig:
    """Config for the current selection, derived from the visible sites."""
    if state.subsite_id:
        subsite = find_subsite(find_site(state.sites, state.site_id), state.subsite_id)
        if subsite is not None and DataManagementConfig.has_override(subsite.data_management):
            return DataManagementConfig.from_raw(subsite.data_management)
    return parent_config(state)


def reduce(state: ScopeState, action: ScopeAction) -> ScopeState:
    """
    Apply one action.

    Raises:
        InvalidInput: empty tenant id, or subsite/team selection without a site
    """
    kind = action.type
    payload = action.payload

    if kind == ScopeActionType.SET_TENANT:
        company_id = (payload.get("company_id") or "").strip()
        if not company_id:
            raise InvalidInput("Tenant id must not be empty")
        return ScopeState(company_id=company_id, company_name=payload.get("name") or "")

    if kind == ScopeActionType.SELECT_SITE:
        site_id = payload["site_id"]
        subsites = subsites_of(state.sites, site_id)
        if not subsites and not any(site.site_id == site_id for site in state.sites):
            logger.debug(
                "Site selected before it is known; subsites resolve empty",
                extra={"company_id": state.company_id, "site_id": site_id},
            )
        return replace(
            state,
            site_id=site_id,
            site_name=payload.get("name") or "",
            subsite_id=None,
            subsite_name=None,
            team_id=None,
            team_name=None,
            subsites=tuple(subsites),
            data_management=parent_config(state, site_id),
        )

    if kind == ScopeActionType.SELECT_SUBSITE:
        _require_site(state, "a subsite")
        subsite_id = payload["subsite_id"]
        # A known site only accepts its own subsites
        if find_site(state.sites, state.site_id) is not None and not any(
            subsite.subsite_id == subsite_id for subsite in state.subsites
        ):
            error = NotFound(
                f"Subsite {subsite_id} is not part of site {state.site_id}",
                details={
                    "company_id": state.company_id,
                    "site_id": state.site_id,
                    "subsite_id": subsite_id,
                },
            )
            logger.info(f"Ignoring subsite selection: {error}", extra=error.details)
            return state
        data_management = payload.get("data_management")
        return replace(
            state,
            subsite_id=subsite_id,
            subsite_name=payload.get("name") or "",
            team_id=None,
            team_name=None,
            data_management=data_management or parent_config(state),
        )

    if kind == ScopeActionType.SELECT_TEAM:
        _require_site(state, "a team")
        return replace(
            state,
            team_id=payload["team_id"],
            team_name=payload.get("name") or "",
        )

    if kind == ScopeActionType.CLEAR_SELECTION:
        return replace(
            state,
            site_id=None,
            site_name=None,
            subsite_id=None,
            subsite_name=None,
            team_id=None,
            team_name=None,
            subsites=(),
            data_management=parent_config(state, ""),
        )

    if kind == ScopeActionType.SET_SITES:
        sites: list[Site] = list(payload.get("sites") or [])
        subsites = subsites_of(sites, state.site_id) if state.site_id else []
        state = replace(state, sites=tuple(sites), subsites=tuple(subsites))
        if state.site_id:
            state = replace(state, data_management=_selection_config(state))
        return state

    if kind == ScopeActionType.SET_COMPANY:
        company: Company = payload["company"]
        state = replace(
            state,
            company=company,
            company_name=company.name or state.company_name,
            loading=False,
            error=None,
        )
        return replace(state, data_management=_selection_config(state))

    if kind == ScopeActionType.SET_DATA_MANAGEMENT:
        config: DataManagementConfig = payload["data_management"]
        return replace(state, data_management=config)

    if kind == ScopeActionType.SET_LOADING:
        return replace(state, loading=bool(payload.get("loading")))

    if kind == ScopeActionType.SET_ERROR:
        return replace(state, error=payload.get("error"), loading=False)

    if kind == ScopeActionType.RESTORE:
        # Seeded from persisted session before any site list is known.
        company_id = (payload.get("company_id") or "").strip()
        if not company_id:
            return ScopeState()
        site_id = payload.get("site_id") or None
        subsite_id = payload.get("subsite_id") or None if site_id else None
        return ScopeState(
            company_id=company_id,
            company_name=payload.get("company_name") or "",
            site_id=site_id,
            site_name=payload.get("site_name") or None if site_id else None,
            subsite_id=subsite_id,
            subsite_name=payload.get("subsite_name") or None if subsite_id else None,
        )

    if kind == ScopeActionType.RESET:
        return ScopeState()

    logger.warning(f"Unknown scope action: {kind}")
    return state
