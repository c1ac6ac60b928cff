"""
Tenant Scope Errors

Error kinds raised or logged by the scope engine.
"""

from typing import Any


class ScopeError(Exception):
    """Base error for the scope engine."""

    default_code = "SCOPE_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code or self.default_code
        self.details = details or {}


class InvalidInput(ScopeError):
    """Caller passed an unusable value (e.g. an empty tenant id)."""

    default_code = "INVALID_INPUT"


class FetchFailed(ScopeError):
    """Remote store failed and there was no cached data to fall back on."""

    default_code = "FETCH_FAILED"


class NotFound(ScopeError):
    """A site or subsite id is not present in the current list."""

    default_code = "NOT_FOUND"


class StaleOverride(ScopeError):
    """Subsite-level config could not be fetched; parent config stays in effect."""

    default_code = "STALE_OVERRIDE"


class StoreError(Exception):
    """Error from a remote site store."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.retryable = retryable
