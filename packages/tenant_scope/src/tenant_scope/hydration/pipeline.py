"""
Hydration Pipeline

Cache-then-network loading of a tenant's sites.

Flow:
1. Read the local cache. If it holds at least one site with subsite data,
   show it at once and fetch from the store in the background.
2. Otherwise fetch from the store and wait for it (blocking).
3. On every store response: write through to the cache and, if the tenant
   is still the active one, replace the visible sites and restore the
   persisted site/subsite selection.

At most one store fetch per tenant is in flight; later callers join it.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tenant_scope.cache.base import SiteCache
from tenant_scope.contracts.models import DataManagementConfig, Site, parse_sites
from tenant_scope.errors import FetchFailed, InvalidInput, NotFound, StoreError
from tenant_scope.providers.base import SiteStore
from tenant_scope.repair import find_site, find_subsite
from tenant_scope.scope.machine import ScopeStateMachine
from tenant_scope.session.base import SessionStore

logger = logging.getLogger(__name__)

DEFAULT_SESSION_KEY = "default"


class HydrationSource(str, Enum):
    """Where the first visible site list came from."""

    CACHE = "cache"
    REMOTE = "remote"


@dataclass
class HydrationResult:
    """Outcome of one hydrate call."""

    company_id: str
    source: HydrationSource
    site_count: int
    deferred: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "company_id": self.company_id,
            "source": self.source.value,
            "site_count": self.site_count,
            "deferred": self.deferred,
        }


def _require_tenant(company_id: str | None) -> str:
    company_id = (company_id or "").strip()
    if not company_id:
        raise InvalidInput("Tenant id must not be empty")
    return company_id


class HydrationPipeline:
    """
    Loads sites for the active tenant into a ScopeStateMachine.

    Every continuation re-checks that its tenant is still active; results
    for a tenant that is no longer selected are cached but never shown.
    """

    def __init__(
        self,
        store: SiteStore,
        cache: SiteCache,
        machine: ScopeStateMachine,
        session: SessionStore | None = None,
        session_key: str = DEFAULT_SESSION_KEY,
    ):
        self.store = store
        self.cache = cache
        self.machine = machine
        self.session = session
        self.session_key = session_key

        self._hydrations: dict[str, asyncio.Task] = {}
        self._fetches: dict[str, asyncio.Task] = {}
        # Fetch sequence numbers; a response older than the last applied one is dropped
        self._issued: dict[str, int] = {}
        self._applied: dict[str, int] = {}

    def _is_active(self, company_id: str) -> bool:
        return self.machine.state.company_id == company_id

    # =========================================================================
    # Hydration
    # =========================================================================

    async def hydrate(self, company_id: str) -> HydrationResult:
        """
        Hydrate a tenant's sites, joining an in-flight hydration if any.

        Raises:
            InvalidInput: empty tenant id
            FetchFailed: no usable cache and the store fetch failed
        """
        company_id = _require_tenant(company_id)

        task = self._hydrations.get(company_id)
        if task is None or task.done():
            task = asyncio.create_task(self._hydrate(company_id))
            self._hydrations[company_id] = task
            task.add_done_callback(lambda t: self._forget(self._hydrations, company_id, t))
        else:
            logger.debug("Joining in-flight hydration", extra={"company_id": company_id})

        return await task

    async def _hydrate(self, company_id: str) -> HydrationResult:
        cached = self.cache.get(company_id)
        cached_sites = parse_sites(cached) if cached else []

        # Entries without any subsite data predate subsite support; never show them
        if any(site.has_subsites for site in cached_sites):
            if self._is_active(company_id):
                self.machine.set_sites(cached_sites)
                self._restore_selection(company_id, cached_sites)
            self._start_fetch(company_id)

            logger.info(
                "Hydrated from cache",
                extra={"company_id": company_id, "count": len(cached_sites)},
            )
            return HydrationResult(
                company_id=company_id,
                source=HydrationSource.CACHE,
                site_count=len(cached_sites),
                deferred=True,
            )

        if cached is not None:
            logger.info(
                "Cached sites lack subsite data, fetching before showing",
                extra={"company_id": company_id},
            )

        if self._is_active(company_id):
            self.machine.set_loading(True)

        try:
            sites = await self.refresh(company_id)
        except StoreError as e:
            if self._is_active(company_id):
                self.machine.set_error(str(e))
            raise FetchFailed(
                f"Could not load sites for {company_id}: {e}",
                details={"company_id": company_id},
            ) from e

        logger.info(
            "Hydrated from store",
            extra={"company_id": company_id, "count": len(sites)},
        )
        return HydrationResult(
            company_id=company_id,
            source=HydrationSource.REMOTE,
            site_count=len(sites),
            deferred=False,
        )

    # =========================================================================
    # Fetching
    # =========================================================================

    async def refresh(self, company_id: str, force: bool = False) -> list[Site]:
        """
        Fetch a tenant's sites from the store and apply them.

        Joins the in-flight fetch for this tenant unless `force` is set.

        Raises:
            StoreError: the store fetch failed
        """
        company_id = _require_tenant(company_id)

        task = self._fetches.get(company_id)
        if task is None or task.done() or force:
            task = self._new_fetch(company_id)
        else:
            logger.debug("Coalescing with in-flight fetch", extra={"company_id": company_id})

        return await task

    def _start_fetch(self, company_id: str) -> asyncio.Task:
        existing = self._fetches.get(company_id)
        if existing is not None and not existing.done():
            return existing
        return self._new_fetch(company_id)

    def _new_fetch(self, company_id: str) -> asyncio.Task:
        seq = self._issued.get(company_id, 0) + 1
        self._issued[company_id] = seq

        task = asyncio.create_task(self._fetch_and_apply(company_id, seq))
        self._fetches[company_id] = task
        task.add_done_callback(lambda t: self._on_fetch_done(company_id, t))
        return task

    def _on_fetch_done(self, company_id: str, task: asyncio.Task) -> None:
        self._forget(self._fetches, company_id, task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(
                f"Site fetch failed: {error}",
                extra={"company_id": company_id},
            )

    @staticmethod
    def _forget(tasks: dict[str, asyncio.Task], company_id: str, task: asyncio.Task) -> None:
        if tasks.get(company_id) is task:
            del tasks[company_id]

    async def _fetch_and_apply(self, company_id: str, seq: int) -> list[Site]:
        sites = await self.store.fetch_sites(company_id)

        if seq < self._applied.get(company_id, 0):
            logger.debug(
                "Dropping out-of-order site fetch",
                extra={"company_id": company_id, "seq": seq},
            )
            return sites
        self._applied[company_id] = seq

        self.cache.put(company_id, sites)

        if not self._is_active(company_id):
            logger.info(
                "Discarding sites for inactive tenant",
                extra={"company_id": company_id, "active": self.machine.state.company_id},
            )
            return sites

        self.machine.set_sites(sites)
        if self.machine.state.loading:
            self.machine.set_loading(False)
        self._restore_selection(company_id, sites)
        return sites

    async def wait_idle(self) -> None:
        """Wait until no hydration or fetch is in flight. Failures are not raised."""
        while True:
            pending = [
                task
                for task in [*self._hydrations.values(), *self._fetches.values()]
                if not task.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # =========================================================================
    # Selection restore
    # =========================================================================

    def _restore_selection(self, company_id: str, sites: list[Site]) -> None:
        """Re-apply the persisted site/subsite if they exist in `sites`."""
        if self.session is None:
            return
        persisted = self.session.load(self.session_key)
        if persisted.company_id != company_id or not persisted.site_id:
            return

        site = find_site(sites, persisted.site_id)
        if site is None:
            self._log_restore_miss(NotFound(
                f"Persisted site {persisted.site_id} no longer exists",
                details={"company_id": company_id, "site_id": persisted.site_id},
            ))
            # Seeded by a session restore; drop the dangling selection
            if self.machine.state.site_id == persisted.site_id:
                self.machine.clear_selection()
            return

        if self.machine.state.site_id != site.site_id:
            self.machine.select_site(site.site_id, site.name)

        if not persisted.subsite_id:
            return

        subsite = find_subsite(site, persisted.subsite_id)
        if subsite is None:
            self._log_restore_miss(NotFound(
                f"Persisted subsite {persisted.subsite_id} no longer exists",
                details={
                    "company_id": company_id,
                    "site_id": site.site_id,
                    "subsite_id": persisted.subsite_id,
                },
            ))
            if self.machine.state.subsite_id == persisted.subsite_id:
                self.machine.select_site(site.site_id, site.name)
            return

        config = None
        if DataManagementConfig.has_override(subsite.data_management):
            config = DataManagementConfig.from_raw(subsite.data_management)

        state = self.machine.state
        if state.subsite_id != subsite.subsite_id:
            self.machine.select_subsite(subsite.subsite_id, subsite.name, data_management=config)
        elif config is not None and config != state.data_management:
            self.machine.set_data_management(config)

    @staticmethod
    def _log_restore_miss(error: NotFound) -> None:
        logger.info(f"Skipping selection restore: {error}", extra=error.details)

    # =========================================================================
    # Mutations
    # =========================================================================

    async def create_site(self, company_id: str, site: dict[str, Any]) -> str:
        """Create a site, then refresh the tenant's sites."""
        company_id = _require_tenant(company_id)
        site_id = await self.store.create_site(company_id, site)
        await self.refresh(company_id, force=True)
        return site_id

    async def update_site(self, company_id: str, site_id: str, changes: dict[str, Any]) -> None:
        company_id = _require_tenant(company_id)
        await self.store.update_site(company_id, site_id, changes)
        await self.refresh(company_id, force=True)

    async def delete_site(self, company_id: str, site_id: str) -> None:
        company_id = _require_tenant(company_id)
        await self.store.delete_site(company_id, site_id)
        await self.refresh(company_id, force=True)

    async def create_subsite(self, company_id: str, site_id: str, subsite: dict[str, Any]) -> str:
        company_id = _require_tenant(company_id)
        subsite_id = await self.store.create_subsite(company_id, site_id, subsite)
        await self.refresh(company_id, force=True)
        return subsite_id

    async def update_subsite(
        self,
        company_id: str,
        site_id: str,
        subsite_id: str,
        changes: dict[str, Any],
    ) -> None:
        company_id = _require_tenant(company_id)
        await self.store.update_subsite(company_id, site_id, subsite_id, changes)
        await self.refresh(company_id, force=True)

    async def delete_subsite(self, company_id: str, site_id: str, subsite_id: str) -> None:
        company_id = _require_tenant(company_id)
        await self.store.delete_subsite(company_id, site_id, subsite_id)
        await self.refresh(company_id, force=True)
