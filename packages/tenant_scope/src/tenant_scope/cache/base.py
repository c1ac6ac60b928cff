"""
Site Cache Base

Local cache of a tenant's last known site list, keyed by tenant id.
"""

from abc import ABC, abstractmethod
from typing import Any

from tenant_scope.contracts.models import Site


class SiteCache(ABC):
    """
    Abstract interface for the local site cache.

    Entries are replaced wholesale on every write (last write wins), so
    implementations need no locking. Values are stored site documents, not
    Site objects; the cache holds exactly what the store sent.
    """

    @abstractmethod
    def get(self, company_id: str) -> list[dict[str, Any]] | None:
        """Cached site documents for a tenant, None on a miss."""
        ...

    @abstractmethod
    def put(self, company_id: str, sites: list[Site]) -> None:
        """Replace the cached site list for a tenant."""
        ...

    @abstractmethod
    def invalidate(self, company_id: str) -> None:
        """Drop the cached site list for a tenant."""
        ...
