"""
Scope State Machine

Owns the single current ScopeState. All mutations go through `dispatch`,
which applies actions one at a time; concurrent callers queue on the lock
rather than interleave.
"""

import logging
import threading
from typing import Callable

from tenant_scope.contracts.models import Company, DataManagementConfig, Site
from tenant_scope.scope.reducer import reduce
from tenant_scope.scope.state import ScopeAction, ScopeActionType, ScopeState

logger = logging.getLogger(__name__)

Listener = Callable[[ScopeState, ScopeAction], None]


class ScopeStateMachine:
    """
    Single writer for the tenant scope.

    Provides methods to:
    - Dispatch raw actions
    - Apply named transitions (set_tenant, select_site, ...)
    - Subscribe to state changes
    """

    def __init__(self, initial: ScopeState | None = None):
        self._state = initial or ScopeState()
        self._lock = threading.RLock()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> ScopeState:
        return self._state

    def dispatch(self, action: ScopeAction) -> ScopeState:
        """
        Apply an action and notify listeners.

        Raises whatever the reducer raises; the state is unchanged in that case.
        """
        with self._lock:
            old_state = self._state
            new_state = reduce(old_state, action)
            self._state = new_state

            logger.debug(
                f"Scope transition {action.type}",
                extra={"action": str(action.type), **new_state.describe()},
            )

            for listener in list(self._listeners):
                try:
                    listener(new_state, action)
                except Exception as e:
                    logger.error(f"Scope listener failed: {e}", exc_info=True)

            return new_state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    # Named transitions

    def set_tenant(self, company_id: str, name: str = "") -> ScopeState:
        return self.dispatch(
            ScopeAction(ScopeActionType.SET_TENANT, {"company_id": company_id, "name": name})
        )

    def select_site(self, site_id: str, name: str = "") -> ScopeState:
        return self.dispatch(
            ScopeAction(ScopeActionType.SELECT_SITE, {"site_id": site_id, "name": name})
        )

    def select_subsite(
        self,
        subsite_id: str,
        name: str = "",
        data_management: DataManagementConfig | None = None,
    ) -> ScopeState:
        return self.dispatch(
            ScopeAction(
                ScopeActionType.SELECT_SUBSITE,
                {"subsite_id": subsite_id, "name": name, "data_management": data_management},
            )
        )

    def select_team(self, team_id: str, name: str = "") -> ScopeState:
        return self.dispatch(
            ScopeAction(ScopeActionType.SELECT_TEAM, {"team_id": team_id, "name": name})
        )

    def set_sites(self, sites: list[Site]) -> ScopeState:
        return self.dispatch(ScopeAction(ScopeActionType.SET_SITES, {"sites": sites}))

    def clear_selection(self) -> ScopeState:
        return self.dispatch(ScopeAction(ScopeActionType.CLEAR_SELECTION))

    def set_company(self, company: Company) -> ScopeState:
        return self.dispatch(ScopeAction(ScopeActionType.SET_COMPANY, {"company": company}))

    def set_data_management(self, config: DataManagementConfig) -> ScopeState:
        return self.dispatch(
            ScopeAction(ScopeActionType.SET_DATA_MANAGEMENT, {"data_management": config})
        )

    def set_loading(self, loading: bool) -> ScopeState:
        return self.dispatch(ScopeAction(ScopeActionType.SET_LOADING, {"loading": loading}))

    def set_error(self, error: str | None) -> ScopeState:
        return self.dispatch(ScopeAction(ScopeActionType.SET_ERROR, {"error": error}))

    def restore(
        self,
        company_id: str,
        company_name: str = "",
        site_id: str | None = None,
        site_name: str | None = None,
        subsite_id: str | None = None,
        subsite_name: str | None = None,
    ) -> ScopeState:
        return self.dispatch(
            ScopeAction(
                ScopeActionType.RESTORE,
                {
                    "company_id": company_id,
                    "company_name": company_name,
                    "site_id": site_id,
                    "site_name": site_name,
                    "subsite_id": subsite_id,
                    "subsite_name": subsite_name,
                },
            )
        )

    def reset(self) -> ScopeState:
        return self.dispatch(ScopeAction(ScopeActionType.RESET))
