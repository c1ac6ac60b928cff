"""In-process site cache for development and tests."""

import copy
from typing import Any

from tenant_scope.cache.base import SiteCache
from tenant_scope.contracts.models import Site


class MemorySiteCache(SiteCache):
    """Dict-backed site cache."""

    def __init__(self, entries: dict[str, list[dict[str, Any]]] | None = None):
        self._entries: dict[str, list[dict[str, Any]]] = copy.deepcopy(entries or {})

    def get(self, company_id: str) -> list[dict[str, Any]] | None:
        entry = self._entries.get(company_id)
        return copy.deepcopy(entry) if entry is not None else None

    def put(self, company_id: str, sites: list[Site]) -> None:
        self._entries[company_id] = copy.deepcopy([site.to_dict() for site in sites])

    def invalidate(self, company_id: str) -> None:
        self._entries.pop(company_id, None)
