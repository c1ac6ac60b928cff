"""
Site Access

Which of a tenant's sites a user may see, derived from the user's company
association:

    {"role": "manager", "accessLevel": "site", "siteId": "s1", "sites": [...]}

`sites` may be a list of ids or an id-keyed mapping.
"""

import logging
from typing import Any

from tenant_scope.contracts.models import Identity, Site, Subsite
from tenant_scope.permissions.resolver import is_owner
from tenant_scope.repair import repair_subsites

logger = logging.getLogger(__name__)


def _allowed_site_ids(association: dict[str, Any]) -> set[str]:
    allowed: set[str] = set()

    site_id = association.get("siteId")
    if isinstance(site_id, str) and site_id:
        allowed.add(site_id)

    assigned = association.get("sites")
    if isinstance(assigned, list):
        allowed.update(str(item) for item in assigned if item)
    elif isinstance(assigned, dict):
        allowed.update(str(key) for key in assigned)

    return allowed


def accessible_sites(
    sites: list[Site] | tuple[Site, ...],
    association: dict[str, Any] | None,
    identity: Identity | None = None,
) -> list[Site]:
    """
    Sites visible to a user.

    Owners and company-level associations see every site. Everyone else sees
    the sites named by the association; an association naming none sees none.
    """
    if association is None:
        return []

    if (
        is_owner(association.get("role"))
        or association.get("accessLevel") == "company"
        or (identity is not None and is_owner(identity.role))
    ):
        return list(sites)

    allowed = _allowed_site_ids(association)
    if not allowed:
        logger.debug("Association names no sites; denying all")
        return []
    return [site for site in sites if site.site_id in allowed]


def auto_select_single_site(context, sites: list[Site] | None = None) -> Site | None:
    """
    Select the only visible site, if there is exactly one.

    Args:
        context: CompanyContext to select on
        sites: Visible sites; defaults to every site in the current scope

    Returns:
        The selected site, or None if nothing was selected
    """
    candidates = list(sites) if sites is not None else list(context.state.sites)
    if len(candidates) != 1:
        return None

    site = candidates[0]
    if context.state.site_id != site.site_id:
        context.select_site(site.site_id, site.name)
    return site


def site_hierarchy(sites: list[Site] | tuple[Site, ...]) -> list[tuple[Site, list[Subsite]]]:
    """Each site with its repaired subsites."""
    return [(site, repair_subsites(site.subsites)) for site in sites]
