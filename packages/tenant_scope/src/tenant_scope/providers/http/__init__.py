"""REST API site store."""

from tenant_scope.providers.http.client import HttpSiteStore

__all__ = ["HttpSiteStore"]
