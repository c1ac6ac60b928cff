"""
Component Factory

Builds stores, caches and session persistence from settings.
"""

from basecore.redis import get_redis_client
from basecore.settings import Settings, get_settings
from tenant_scope.cache import MemorySiteCache, RedisSiteCache, SiteCache
from tenant_scope.providers import HttpSiteStore, SiteStore, StubSiteStore
from tenant_scope.service.context import CompanyContext
from tenant_scope.session import (
    MemorySessionStore,
    RedisSessionStore,
    SessionStore,
    SqlSessionStore,
)


def get_site_store(provider_type: str | None = None, settings: Settings | None = None) -> SiteStore:
    """
    Get the site store.

    Uses SITE_STORE_PROVIDER if provider_type is not specified.
    """
    settings = settings or get_settings()
    provider_type = provider_type or settings.SITE_STORE_PROVIDER

    if provider_type == "http":
        return HttpSiteStore(
            api_url=settings.SITE_STORE_URL,
            api_key=settings.SITE_STORE_API_KEY,
            timeout=settings.SITE_STORE_TIMEOUT,
        )
    return StubSiteStore()


def get_site_cache(backend: str | None = None, settings: Settings | None = None) -> SiteCache:
    settings = settings or get_settings()
    backend = backend or settings.SITE_CACHE_BACKEND

    if backend == "redis":
        return RedisSiteCache(
            get_redis_client(),
            prefix=settings.SITE_CACHE_PREFIX,
            ttl=settings.SITE_CACHE_TTL,
        )
    return MemorySiteCache()


def get_session_store(backend: str | None = None, settings: Settings | None = None) -> SessionStore:
    settings = settings or get_settings()
    backend = backend or settings.SESSION_BACKEND

    if backend == "redis":
        return RedisSessionStore(get_redis_client(), prefix=settings.SESSION_PREFIX)
    if backend == "sql":
        SqlSessionStore.create_schema()
        return SqlSessionStore()
    return MemorySessionStore()


def build_context(session_key: str = "default", settings: Settings | None = None) -> CompanyContext:
    """A CompanyContext wired from settings."""
    settings = settings or get_settings()
    return CompanyContext(
        store=get_site_store(settings=settings),
        cache=get_site_cache(settings=settings),
        session_store=get_session_store(settings=settings),
        session_key=session_key,
    )
