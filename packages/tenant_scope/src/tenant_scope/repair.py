"""
Embedded Subsite Repair

Sites embed their subsites as a `{key: document}` map and the store does not
keep the key and the document's own `subsiteID` in agreement. Every read of
that map goes through `repair_subsites`.
"""

import logging
from typing import Any

from tenant_scope.contracts.models import Address, Site, Subsite, parse_teams

logger = logging.getLogger(__name__)


def repair_subsite(key: str, value: Any) -> Subsite | None:
    """
    Normalize one embedded subsite entry.

    The explicit `subsiteID` (or `subsite_id`/`id`) field wins over the map
    key. Entries that are not mappings, or that have neither a usable id nor a
    name, are dropped.
    """
    if not isinstance(value, dict):
        return None

    subsite_id = value.get("subsiteID") or value.get("subsite_id") or value.get("id") or key
    subsite_id = str(subsite_id).strip() if subsite_id else ""
    name = value.get("name") or ""

    if not subsite_id and not name:
        return None
    if subsite_id != key:
        logger.debug(
            "Repaired subsite key mismatch",
            extra={"map_key": key, "subsite_id": subsite_id},
        )

    return Subsite(
        subsite_id=subsite_id,
        name=name,
        description=value.get("description") or "",
        location=value.get("location") or "",
        address=Address.from_dict(value.get("address")),
        teams=parse_teams(value.get("teams")),
        data_management=value.get("dataManagement") or value.get("data_management"),
    )


def repair_subsites(raw: Any) -> list[Subsite]:
    """Repair an embedded subsite map into a list, preserving map order."""
    if not isinstance(raw, dict):
        return []
    subsites = []
    for key, value in raw.items():
        subsite = repair_subsite(str(key), value)
        if subsite is not None:
            subsites.append(subsite)
    return subsites


def find_site(sites: list[Site] | tuple[Site, ...], site_id: str | None) -> Site | None:
    """Find a site by id."""
    if not site_id:
        return None
    for site in sites:
        if site.site_id == site_id:
            return site
    return None


def subsites_of(sites: list[Site] | tuple[Site, ...], site_id: str | None) -> list[Subsite]:
    """Repaired subsites of the given site; empty if the site is unknown."""
    site = find_site(sites, site_id)
    if site is None:
        return []
    return repair_subsites(site.subsites)


def find_subsite(site: Site | None, subsite_id: str | None) -> Subsite | None:
    """Locate a repaired subsite by id within a site."""
    if site is None or not subsite_id:
        return None
    for subsite in repair_subsites(site.subsites):
        if subsite.subsite_id == subsite_id:
            return subsite
    return None
