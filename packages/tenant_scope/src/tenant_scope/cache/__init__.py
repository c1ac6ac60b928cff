"""
Site Cache

Last known site list per tenant, read synchronously before the remote store
answers.
"""

from tenant_scope.cache.base import SiteCache
from tenant_scope.cache.memory import MemorySiteCache
from tenant_scope.cache.redis import RedisSiteCache

__all__ = [
    "MemorySiteCache",
    "RedisSiteCache",
    "SiteCache",
]
