"""
Stub Site Store

Development store that keeps site documents in memory.
Useful for local development and testing.
"""

import asyncio
import copy
import logging
from collections import Counter
from typing import Any
from uuid import uuid4

from tenant_scope.contracts.models import Site, parse_sites
from tenant_scope.errors import StoreError

from tenant_scope.providers.base import SiteStore

logger = logging.getLogger(__name__)


class StubSiteStore(SiteStore):
    """
    In-memory store for development and testing.

    - Holds raw site documents per tenant, exactly as given (no repair)
    - Records every call in `calls` and counts fetches per tenant
    - Can be configured to delay or fail fetches
    """

    def __init__(
        self,
        sites: dict[str, dict[str, dict[str, Any]]] | None = None,
        delay: float = 0.0,
        fail_fetches: bool = False,
    ):
        """
        Args:
            sites: {company_id: {site_id: site document}}
            delay: Seconds every read waits before answering
            fail_fetches: Make fetch_sites/fetch_subsite raise StoreError
        """
        self._sites: dict[str, dict[str, dict[str, Any]]] = copy.deepcopy(sites or {})
        self.delay = delay
        self.fail_fetches = fail_fetches
        self.calls: list[dict[str, Any]] = []
        self.fetch_counts: Counter[str] = Counter()

    def _record(self, op: str, **kwargs: Any) -> None:
        self.calls.append({"op": op, **kwargs})
        logger.info(f"[STUB] {op}", extra=kwargs)

    async def _wait(self) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)

    def _fail(self, op: str) -> None:
        if self.fail_fetches:
            raise StoreError(
                "Simulated failure for testing",
                code="STUB_SIMULATED_FAILURE",
                details={"op": op},
                retryable=True,
            )

    def put_site(self, company_id: str, site: dict[str, Any]) -> None:
        """Seed or replace a raw site document without recording a call."""
        site_id = site.get("siteID") or site.get("id")
        self._sites.setdefault(company_id, {})[str(site_id)] = copy.deepcopy(site)

    def _site(self, company_id: str, site_id: str) -> dict[str, Any]:
        try:
            return self._sites[company_id][site_id]
        except KeyError:
            raise StoreError(
                f"Site not found: {site_id}",
                code="404",
                details={"company_id": company_id, "site_id": site_id},
            )

    async def fetch_sites(self, company_id: str) -> list[Site]:
        self._record("fetch_sites", company_id=company_id)
        self.fetch_counts[company_id] += 1
        await self._wait()
        self._fail("fetch_sites")
        return parse_sites(copy.deepcopy(self._sites.get(company_id, {})))

    async def fetch_subsite(
        self,
        company_id: str,
        site_id: str,
        subsite_id: str,
    ) -> dict[str, Any] | None:
        self._record("fetch_subsite", company_id=company_id, site_id=site_id, subsite_id=subsite_id)
        await self._wait()
        self._fail("fetch_subsite")
        site = self._sites.get(company_id, {}).get(site_id)
        if not site:
            return None
        subsite = (site.get("subsites") or {}).get(subsite_id)
        return copy.deepcopy(subsite) if isinstance(subsite, dict) else None

    async def create_site(self, company_id: str, site: dict[str, Any]) -> str:
        site_id = f"stub_site_{uuid4().hex[:12]}"
        self._record("create_site", company_id=company_id, site_id=site_id)
        document = {"subsites": {}, "teams": {}, **copy.deepcopy(site), "siteID": site_id}
        self._sites.setdefault(company_id, {})[site_id] = document
        return site_id

    async def update_site(self, company_id: str, site_id: str, changes: dict[str, Any]) -> None:
        self._record("update_site", company_id=company_id, site_id=site_id)
        self._site(company_id, site_id).update(copy.deepcopy(changes))

    async def delete_site(self, company_id: str, site_id: str) -> None:
        self._record("delete_site", company_id=company_id, site_id=site_id)
        self._site(company_id, site_id)
        del self._sites[company_id][site_id]

    async def create_subsite(
        self,
        company_id: str,
        site_id: str,
        subsite: dict[str, Any],
    ) -> str:
        subsite_id = f"stub_subsite_{uuid4().hex[:12]}"
        self._record("create_subsite", company_id=company_id, site_id=site_id, subsite_id=subsite_id)
        site = self._site(company_id, site_id)
        site.setdefault("subsites", {})[subsite_id] = {
            **copy.deepcopy(subsite),
            "subsiteID": subsite_id,
        }
        return subsite_id

    async def update_subsite(
        self,
        company_id: str,
        site_id: str,
        subsite_id: str,
        changes: dict[str, Any],
    ) -> None:
        self._record("update_subsite", company_id=company_id, site_id=site_id, subsite_id=subsite_id)
        subsites = self._site(company_id, site_id).setdefault("subsites", {})
        if subsite_id not in subsites:
            raise StoreError(f"Subsite not found: {subsite_id}", code="404")
        subsites[subsite_id].update(copy.deepcopy(changes))

    async def delete_subsite(self, company_id: str, site_id: str, subsite_id: str) -> None:
        self._record("delete_subsite", company_id=company_id, site_id=site_id, subsite_id=subsite_id)
        subsites = self._site(company_id, site_id).setdefault("subsites", {})
        subsites.pop(subsite_id, None)
