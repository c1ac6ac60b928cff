"""
Site Store Base

Abstract interface for the remote store that owns tenants' sites.
Implementations: HTTP (REST API), Stub (in-memory, for development and tests).
"""

from abc import ABC, abstractmethod
from typing import Any

from tenant_scope.contracts.models import Site


class SiteStore(ABC):
    """
    Abstract interface for remote site stores.

    Implementations must handle:
    - Returning the full current site list for a tenant, subsites embedded
    - Returning a single subsite document (for its storage config)
    - Site and subsite create/update/delete

    Reads may be eventually consistent. Callers refresh with `fetch_sites`
    after every mutation instead of patching local state.
    """

    @abstractmethod
    async def fetch_sites(self, company_id: str) -> list[Site]:
        """
        Fetch every site of a tenant.

        Args:
            company_id: Tenant id

        Returns:
            Sites with their embedded subsites and teams

        Raises:
            StoreError: store unreachable or erroring
        """
        ...

    @abstractmethod
    async def fetch_subsite(
        self,
        company_id: str,
        site_id: str,
        subsite_id: str,
    ) -> dict[str, Any] | None:
        """
        Fetch one subsite document.

        Returns:
            The stored subsite document, None if it does not exist
        """
        ...

    @abstractmethod
    async def create_site(self, company_id: str, site: dict[str, Any]) -> str:
        """
        Create a site.

        Returns:
            The new site id
        """
        ...

    @abstractmethod
    async def update_site(self, company_id: str, site_id: str, changes: dict[str, Any]) -> None:
        """Apply a partial update to a site."""
        ...

    @abstractmethod
    async def delete_site(self, company_id: str, site_id: str) -> None:
        """Delete a site and everything embedded in it."""
        ...

    @abstractmethod
    async def create_subsite(
        self,
        company_id: str,
        site_id: str,
        subsite: dict[str, Any],
    ) -> str:
        """
        Create a subsite inside a site.

        Returns:
            The new subsite id
        """
        ...

    @abstractmethod
    async def update_subsite(
        self,
        company_id: str,
        site_id: str,
        subsite_id: str,
        changes: dict[str, Any],
    ) -> None:
        """Apply a partial update to a subsite."""
        ...

    @abstractmethod
    async def delete_subsite(self, company_id: str, site_id: str, subsite_id: str) -> None:
        """Delete a subsite."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        return None
