"""In-process session store for development and tests."""

from tenant_scope.session.base import SessionState, SessionStore, check_fields


class MemorySessionStore(SessionStore):
    """Dict-backed session store."""

    def __init__(self):
        self._data: dict[str, dict[str, str]] = {}

    def load(self, key: str) -> SessionState:
        return SessionState.from_mapping(self._data.get(key, {}))

    def save(self, key: str, **changes: str | None) -> None:
        check_fields(changes)
        entry = self._data.setdefault(key, {})
        for name, value in changes.items():
            if value:
                entry[name] = value
            else:
                entry.pop(name, None)

    def clear(self, key: str) -> None:
        self._data.pop(key, None)
