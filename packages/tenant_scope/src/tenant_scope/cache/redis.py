"""
Redis Site Cache

Stores each tenant's site list as one JSON string under `{prefix}{company_id}`.
"""

import json
import logging
from typing import Any

import redis

from tenant_scope.cache.base import SiteCache
from tenant_scope.contracts.models import Site

logger = logging.getLogger(__name__)


class RedisSiteCache(SiteCache):
    """
    Redis-backed site cache.

    The cache is an optimisation only: Redis errors are logged and read as
    a miss, never raised to the hydration pipeline.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        prefix: str = "tenant_scope:sites:",
        ttl: int = 0,
    ):
        """
        Args:
            redis_client: Client created with decode_responses=True
            prefix: Key prefix
            ttl: Expiry in seconds; 0 keeps entries until replaced
        """
        self.redis = redis_client
        self.prefix = prefix
        self.ttl = ttl

    def _key(self, company_id: str) -> str:
        return f"{self.prefix}{company_id}"

    def get(self, company_id: str) -> list[dict[str, Any]] | None:
        try:
            raw = self.redis.get(self._key(company_id))
        except redis.RedisError as e:
            logger.warning(f"Site cache read failed: {e}", extra={"company_id": company_id})
            return None

        if raw is None:
            return None

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding undecodable site cache entry", extra={"company_id": company_id})
            return None

        if not isinstance(data, list):
            return None
        return [item for item in data if isinstance(item, dict)]

    def put(self, company_id: str, sites: list[Site]) -> None:
        value = json.dumps([site.to_dict() for site in sites])
        try:
            if self.ttl:
                self.redis.set(self._key(company_id), value, ex=self.ttl)
            else:
                self.redis.set(self._key(company_id), value)
        except redis.RedisError as e:
            logger.warning(f"Site cache write failed: {e}", extra={"company_id": company_id})
            return

        logger.debug("Cached sites", extra={"company_id": company_id, "count": len(sites)})

    def invalidate(self, company_id: str) -> None:
        try:
            self.redis.delete(self._key(company_id))
        except redis.RedisError as e:
            logger.warning(f"Site cache invalidate failed: {e}", extra={"company_id": company_id})
