"""
Session Persistence Base

Persisted tenant selection, read once at start-up and written on every
selection change.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, fields


@dataclass
class SessionState:
    """The persisted part of a scope. Empty strings are stored as absent."""

    company_id: str | None = None
    site_id: str | None = None
    site_name: str | None = None
    subsite_id: str | None = None
    subsite_name: str | None = None

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_mapping(cls, data: dict[str, str | None]) -> "SessionState":
        return cls(**{name: data.get(name) or None for name in cls.field_names()})

    def to_dict(self) -> dict[str, str | None]:
        return asdict(self)

    @property
    def is_empty(self) -> bool:
        return not self.company_id


def check_fields(changes: dict[str, str | None]) -> None:
    """Reject keys that are not SessionState fields."""
    unknown = set(changes) - set(SessionState.field_names())
    if unknown:
        raise ValueError(f"Unknown session fields: {sorted(unknown)}")


class SessionStore(ABC):
    """
    Abstract interface for session persistence.

    `save` merges: fields passed as None are removed, fields not passed
    keep their stored value. Backend failures are logged and absorbed; a
    lost session write never undoes a selection.
    """

    @abstractmethod
    def load(self, key: str) -> SessionState:
        """Load the stored state; an empty SessionState if nothing is stored."""
        ...

    @abstractmethod
    def save(self, key: str, **changes: str | None) -> None:
        """Merge the given fields into the stored state."""
        ...

    @abstractmethod
    def clear(self, key: str) -> None:
        """Remove everything stored under the key."""
        ...
