"""
Tenant Data Models

Provider-agnostic representation of tenants, sites, subsites and teams as the
remote store returns them. Stored documents use camelCase keys (`siteID`,
`subsiteID`, `dataManagement`); `from_dict` accepts those and snake_case
spellings, `to_dict` writes the stored shape back.

A Site owns its subsites by embedding: `Site.subsites` keeps the raw mapping
exactly as the store sent it. Use `tenant_scope.repair.repair_subsites` to read
it, never the raw values directly.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class StorageScope(str, Enum):
    """Level at which a module's data is stored."""

    COMPANY = "company"
    SITE = "site"
    SUBSITE = "subsite"


MANAGED_MODULES = ("stock", "hr", "finance", "bookings", "pos", "messenger")

DEFAULT_STORAGE_SCOPES: dict[str, StorageScope] = {
    "stock": StorageScope.SITE,
    "hr": StorageScope.SITE,
    "finance": StorageScope.COMPANY,
    "bookings": StorageScope.SITE,
    "pos": StorageScope.SITE,
    "messenger": StorageScope.COMPANY,
}


def _first(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first truthy value among `keys`."""
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return default


@dataclass(frozen=True)
class DataManagementConfig:
    """Per-module storage scope for a tenant, site or subsite."""

    stock: StorageScope = StorageScope.SITE
    hr: StorageScope = StorageScope.SITE
    finance: StorageScope = StorageScope.COMPANY
    bookings: StorageScope = StorageScope.SITE
    pos: StorageScope = StorageScope.SITE
    messenger: StorageScope = StorageScope.COMPANY

    @classmethod
    def from_raw(cls, raw: dict[str, Any] | None) -> "DataManagementConfig":
        """
        Build a config from a stored document.

        Accepts the direct format (`{"hr": "company"}`) and the nested
        format (`{"accessibleModules": {"hr": "company"}}`). Missing or
        unrecognised values take the module default.
        """
        if not isinstance(raw, dict):
            return cls()

        source = raw.get("accessibleModules")
        if not isinstance(source, dict):
            source = raw

        values: dict[str, StorageScope] = {}
        for module in MANAGED_MODULES:
            try:
                values[module] = StorageScope(source.get(module))
            except ValueError:
                values[module] = DEFAULT_STORAGE_SCOPES[module]
        return cls(**values)

    @classmethod
    def has_override(cls, raw: dict[str, Any] | None) -> bool:
        """True if a stored document carries any module scope at all."""
        if not isinstance(raw, dict):
            return False
        source = raw.get("accessibleModules")
        if not isinstance(source, dict):
            source = raw
        return any(module in source for module in MANAGED_MODULES)

    def scope_for(self, module: str) -> StorageScope | None:
        """Storage scope for a module, None for modules not managed here."""
        if module not in MANAGED_MODULES:
            return None
        return getattr(self, module)

    def to_dict(self) -> dict[str, str]:
        return {module: getattr(self, module).value for module in MANAGED_MODULES}


@dataclass
class Address:
    """Postal address."""

    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Address":
        if not isinstance(data, dict):
            return cls()
        return cls(
            street=data.get("street") or "",
            city=data.get("city") or "",
            state=data.get("state") or "",
            zip_code=_first(data, "zipCode", "zip_code", default=""),
            country=data.get("country") or "",
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
            "country": self.country,
        }


@dataclass
class Team:
    """A team belonging to a site or a subsite."""

    team_id: str
    name: str = ""
    description: str = ""
    members: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any], team_id: str | None = None) -> "Team":
        members = data.get("members") or []
        if isinstance(members, dict):
            # Stored as {uid: true}
            members = list(members.keys())
        return cls(
            team_id=_first(data, "teamID", "team_id", "id", default=team_id or ""),
            name=data.get("name") or "",
            description=data.get("description") or "",
            members=[str(m) for m in members],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "teamID": self.team_id,
            "name": self.name,
            "description": self.description,
            "members": list(self.members),
        }


def parse_teams(raw: Any) -> dict[str, Team]:
    """Parse an embedded `{teamID: team}` map, skipping non-mapping values."""
    if not isinstance(raw, dict):
        return {}
    teams: dict[str, Team] = {}
    for key, value in raw.items():
        if not isinstance(value, dict):
            continue
        team = Team.from_dict(value, team_id=str(key))
        teams[team.team_id] = team
    return teams


@dataclass
class Subsite:
    """A subsite as read (and repaired) from its parent site."""

    subsite_id: str
    name: str = ""
    description: str = ""
    location: str = ""
    address: Address = field(default_factory=Address)
    teams: dict[str, Team] = field(default_factory=dict)
    data_management: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "subsiteID": self.subsite_id,
            "name": self.name,
            "description": self.description,
            "location": self.location,
            "address": self.address.to_dict(),
            "teams": {team_id: team.to_dict() for team_id, team in self.teams.items()},
        }
        if self.data_management is not None:
            data["dataManagement"] = self.data_management
        return data


@dataclass
class Site:
    """
    A site belonging to one tenant.

    Attributes:
        site_id: Stable identifier
        name: Display name
        subsites: Raw embedded `{key: subsite document}` map, unrepaired
        teams: Teams attached directly to the site
        data_management: Raw site-level storage config, if any
    """

    site_id: str
    name: str = ""
    description: str = ""
    address: Address = field(default_factory=Address)
    is_main_site: bool = False
    subsites: dict[str, Any] = field(default_factory=dict)
    teams: dict[str, Team] = field(default_factory=dict)
    data_management: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], site_id: str | None = None) -> "Site":
        """Create a Site from a stored document (e.g., from the remote store or cache)."""
        subsites = data.get("subsites")
        return cls(
            site_id=str(_first(data, "siteID", "site_id", "id", default=site_id or "")),
            name=data.get("name") or "",
            description=data.get("description") or "",
            address=Address.from_dict(data.get("address")),
            is_main_site=bool(_first(data, "isMainSite", "is_main_site", default=False)),
            subsites=dict(subsites) if isinstance(subsites, dict) else {},
            teams=parse_teams(data.get("teams")),
            data_management=_first(data, "dataManagement", "data_management"),
        )

    @property
    def has_subsites(self) -> bool:
        """True if the embedded subsite map carries at least one entry."""
        return bool(self.subsites)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the stored document shape."""
        data: dict[str, Any] = {
            "siteID": self.site_id,
            "name": self.name,
            "description": self.description,
            "address": self.address.to_dict(),
            "isMainSite": self.is_main_site,
            "subsites": self.subsites,
            "teams": {team_id: team.to_dict() for team_id, team in self.teams.items()},
        }
        if self.data_management is not None:
            data["dataManagement"] = self.data_management
        return data


def parse_sites(raw: Any) -> list[Site]:
    """
    Parse a site collection.

    The store returns either a list of site documents or an id-keyed mapping;
    in the latter case a document without its own id takes the key.
    """
    if isinstance(raw, dict):
        items = [(str(key), value) for key, value in raw.items()]
    elif isinstance(raw, list):
        items = [(None, value) for value in raw]
    else:
        return []

    sites = []
    for key, value in items:
        if not isinstance(value, dict):
            continue
        site = Site.from_dict(value, site_id=key)
        if site.site_id:
            sites.append(site)
    return sites


@dataclass
class Company:
    """A tenant."""

    company_id: str
    name: str = ""
    data_management: DataManagementConfig = field(default_factory=DataManagementConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Company":
        return cls(
            company_id=str(_first(data, "companyID", "company_id", "id", default="")),
            name=_first(data, "companyName", "name", default=""),
            data_management=DataManagementConfig.from_raw(
                _first(data, "dataManagement", "data_management")
            ),
        )


@dataclass(frozen=True)
class Identity:
    """The acting user within the current tenant. Read-only to this engine."""

    uid: str
    role: str = ""
    department: str = ""
    email: str | None = None
    display_name: str | None = None
