"""
Site Stores

Implementations of the remote store that owns tenants' sites.
Supports a REST API (production) and Stub (development).
"""

from tenant_scope.providers.base import SiteStore
from tenant_scope.providers.http import HttpSiteStore
from tenant_scope.providers.stub import StubSiteStore

__all__ = [
    "HttpSiteStore",
    "SiteStore",
    "StubSiteStore",
]
