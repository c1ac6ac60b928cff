"""
Company Context

The object a session layer owns. Wires together:
- the scope state machine (current selection)
- the hydration pipeline (sites for the active tenant)
- session persistence (selection survives restarts)
- subsite storage-config overrides
- permission and storage-path queries over the current scope
"""

import asyncio
import logging
from typing import Any, Callable

from tenant_scope.cache.base import SiteCache
from tenant_scope.contracts.models import Company, DataManagementConfig, Identity
from tenant_scope.contracts.permissions import Action, PermissionTable
from tenant_scope.errors import InvalidInput, StaleOverride, StoreError
from tenant_scope.hydration.pipeline import (
    DEFAULT_SESSION_KEY,
    HydrationPipeline,
    HydrationResult,
)
from tenant_scope.paths import module_path, read_paths, resolve_path, write_path
from tenant_scope.permissions.resolver import resolve
from tenant_scope.providers.base import SiteStore
from tenant_scope.repair import find_site
from tenant_scope.scope.machine import ScopeStateMachine
from tenant_scope.scope.reducer import parent_config
from tenant_scope.scope.state import ScopeAction, ScopeState
from tenant_scope.session.base import SessionStore

logger = logging.getLogger(__name__)


class CompanyContext:
    """
    Tenant scope for one session.

    Selection methods dispatch synchronously; network work runs as asyncio
    tasks and never delays a selection.
    """

    def __init__(
        self,
        store: SiteStore,
        cache: SiteCache,
        session_store: SessionStore,
        machine: ScopeStateMachine | None = None,
        session_key: str = DEFAULT_SESSION_KEY,
    ):
        self.store = store
        self.session_store = session_store
        self.session_key = session_key
        self.machine = machine or ScopeStateMachine()
        self.pipeline = HydrationPipeline(
            store,
            cache,
            self.machine,
            session=session_store,
            session_key=session_key,
        )
        self._override_tasks: set[asyncio.Task] = set()

    @property
    def state(self) -> ScopeState:
        return self.machine.state

    def subscribe(self, listener: Callable[[ScopeState, ScopeAction], None]) -> Callable[[], None]:
        return self.machine.subscribe(listener)

    def _persist(self, **changes: str | None) -> None:
        self.session_store.save(self.session_key, **changes)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def restore_session(self) -> ScopeState:
        """
        Seed the scope from the persisted session.

        Called once at start, before any network call. Sites are not known
        yet; the persisted selection is re-checked when they arrive.
        """
        persisted = self.session_store.load(self.session_key)
        if persisted.is_empty:
            return self.state

        logger.info(
            "Restoring persisted scope",
            extra={
                "company_id": persisted.company_id,
                "site_id": persisted.site_id,
                "subsite_id": persisted.subsite_id,
            },
        )
        return self.machine.restore(
            company_id=persisted.company_id,
            site_id=persisted.site_id,
            site_name=persisted.site_name,
            subsite_id=persisted.subsite_id,
            subsite_name=persisted.subsite_name,
        )

    async def start(self) -> HydrationResult | None:
        """Restore the persisted session and hydrate its tenant, if any."""
        state = self.restore_session()
        if not state.company_id:
            return None
        return await self.pipeline.hydrate(state.company_id)

    def sign_out(self) -> ScopeState:
        """Forget the persisted session and return to the empty scope."""
        self.session_store.clear(self.session_key)
        return self.machine.reset()

    async def wait_idle(self) -> None:
        """Wait for background fetches and subsite overrides to settle."""
        await self.pipeline.wait_idle()
        while self._override_tasks:
            await asyncio.gather(*list(self._override_tasks), return_exceptions=True)

    async def close(self) -> None:
        await self.wait_idle()
        await self.store.close()

    # =========================================================================
    # Selection
    # =========================================================================

    async def set_tenant(self, company_id: str, name: str = "") -> HydrationResult | None:
        """
        Switch to a tenant and hydrate its sites.

        Returns None without doing anything if that tenant is already loaded.

        Raises:
            InvalidInput: empty tenant id
            FetchFailed: no usable cache and the store fetch failed
        """
        company_id = (company_id or "").strip()
        if not company_id:
            raise InvalidInput("Tenant id must not be empty")

        state = self.state
        if state.company_id == company_id and state.sites:
            logger.debug("Tenant already loaded", extra={"company_id": company_id})
            return None

        self._persist(
            company_id=company_id,
            site_id=None,
            site_name=None,
            subsite_id=None,
            subsite_name=None,
        )
        self.machine.set_tenant(company_id, name)
        return await self.pipeline.hydrate(company_id)

    def set_company(self, company: Company) -> ScopeState:
        """Apply tenant details (name, storage config) loaded elsewhere."""
        return self.machine.set_company(company)

    def select_site(self, site_id: str, name: str | None = None) -> ScopeState:
        if name is None:
            site = find_site(self.state.sites, site_id)
            name = site.name if site else ""

        state = self.machine.select_site(site_id, name)
        self._persist(site_id=site_id, site_name=name, subsite_id=None, subsite_name=None)
        return state

    def select_subsite(self, subsite_id: str, name: str | None = None) -> ScopeState:
        """
        Select a subsite of the selected site.

        The selection applies at once with the parent storage config; the
        subsite's own config is fetched in the background and applied only
        if the same subsite is still selected when it arrives.

        A subsite that is not part of the selected (known) site is ignored:
        nothing is persisted and no config is fetched.

        Raises:
            InvalidInput: no site selected
        """
        current = self.state
        if name is None:
            match = next((s for s in current.subsites if s.subsite_id == subsite_id), None)
            name = match.name if match else ""

        state = self.machine.select_subsite(subsite_id, name, data_management=parent_config(current))
        if state.subsite_id != subsite_id:
            return state
        self._persist(subsite_id=subsite_id, subsite_name=name)
        self._schedule_override(state.company_id, state.site_id, subsite_id)
        return state

    def select_team(self, team_id: str, name: str = "") -> ScopeState:
        return self.machine.select_team(team_id, name)

    def clear_selection(self) -> ScopeState:
        state = self.machine.clear_selection()
        self._persist(site_id=None, site_name=None, subsite_id=None, subsite_name=None)
        return state

    # =========================================================================
    # Subsite storage config
    # =========================================================================

    def _schedule_override(self, company_id: str, site_id: str | None, subsite_id: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(
                "No event loop; keeping parent storage config",
                extra={"company_id": company_id, "subsite_id": subsite_id},
            )
            return

        task = loop.create_task(self._load_override(company_id, site_id or "", subsite_id))
        self._override_tasks.add(task)
        task.add_done_callback(self._override_tasks.discard)

    async def _load_override(self, company_id: str, site_id: str, subsite_id: str) -> None:
        try:
            document = await self.store.fetch_subsite(company_id, site_id, subsite_id)
        except StoreError as e:
            error = StaleOverride(
                f"Subsite config unavailable, keeping parent config: {e}",
                details={"company_id": company_id, "site_id": site_id, "subsite_id": subsite_id},
            )
            logger.warning(str(error), extra=error.details)
            return

        raw = (document or {}).get("dataManagement") or (document or {}).get("data_management")
        if not DataManagementConfig.has_override(raw):
            return

        state = self.state
        if (state.company_id, state.site_id, state.subsite_id) != (company_id, site_id, subsite_id):
            logger.debug(
                "Discarding subsite config for a superseded selection",
                extra={"company_id": company_id, "subsite_id": subsite_id},
            )
            return

        self.machine.set_data_management(DataManagementConfig.from_raw(raw))

    # =========================================================================
    # Queries
    # =========================================================================

    def has_permission(
        self,
        identity: Identity | None,
        table: PermissionTable | None,
        module: str,
        page: str,
        action: Action | str,
        role_override: str | None = None,
        department_override: str | None = None,
    ) -> bool:
        return resolve(
            identity,
            table,
            module,
            page,
            action,
            role_override=role_override,
            department_override=department_override,
            loading=self.state.loading,
        )

    def base_path(self, module: str | None = None) -> str:
        return resolve_path(self.state, module)

    def storage_path(self, module: str) -> str:
        """Path for a module's data, honouring its configured storage scope."""
        return module_path(self.state, module)

    def checklist_paths(self) -> list[str]:
        return read_paths(self.state)

    def checklist_write_path(self) -> str:
        return write_path(self.state)

    # =========================================================================
    # Site mutations
    # =========================================================================

    def _active_tenant(self) -> str:
        if not self.state.company_id:
            raise InvalidInput("No tenant selected")
        return self.state.company_id

    async def refresh(self, force: bool = False) -> None:
        await self.pipeline.refresh(self._active_tenant(), force=force)

    async def create_site(self, site: dict[str, Any]) -> str:
        return await self.pipeline.create_site(self._active_tenant(), site)

    async def update_site(self, site_id: str, changes: dict[str, Any]) -> None:
        await self.pipeline.update_site(self._active_tenant(), site_id, changes)

    async def delete_site(self, site_id: str) -> None:
        await self.pipeline.delete_site(self._active_tenant(), site_id)

    async def create_subsite(self, site_id: str, subsite: dict[str, Any]) -> str:
        return await self.pipeline.create_subsite(self._active_tenant(), site_id, subsite)

    async def update_subsite(self, site_id: str, subsite_id: str, changes: dict[str, Any]) -> None:
        await self.pipeline.update_subsite(self._active_tenant(), site_id, subsite_id, changes)

    async def delete_subsite(self, site_id: str, subsite_id: str) -> None:
        await self.pipeline.delete_subsite(self._active_tenant(), site_id, subsite_id)
