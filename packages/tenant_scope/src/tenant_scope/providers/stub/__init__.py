"""In-memory site store for development and tests."""

from tenant_scope.providers.stub.client import StubSiteStore

__all__ = ["StubSiteStore"]
