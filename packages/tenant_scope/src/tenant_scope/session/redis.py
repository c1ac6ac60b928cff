"""
Redis Session Store

One Redis hash per session key: `{prefix}{key}` → {field: value}.
Redis errors are logged; reads fall back to an empty session and writes are
dropped.
"""

import logging

import redis

from tenant_scope.session.base import SessionState, SessionStore, check_fields

logger = logging.getLogger(__name__)


class RedisSessionStore(SessionStore):
    """Redis-backed session store."""

    def __init__(self, redis_client: redis.Redis, prefix: str = "tenant_scope:session:"):
        self.redis = redis_client
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def load(self, key: str) -> SessionState:
        try:
            data = self.redis.hgetall(self._key(key))
        except redis.RedisError as e:
            logger.warning(f"Session read failed: {e}", extra={"session_key": key})
            return SessionState()
        return SessionState.from_mapping(data or {})

    def save(self, key: str, **changes: str | None) -> None:
        check_fields(changes)
        to_set = {name: value for name, value in changes.items() if value}
        to_delete = [name for name, value in changes.items() if not value]

        pipe = self.redis.pipeline()
        if to_set:
            pipe.hset(self._key(key), mapping=to_set)
        if to_delete:
            pipe.hdel(self._key(key), *to_delete)
        try:
            pipe.execute()
        except redis.RedisError as e:
            logger.warning(f"Session write failed: {e}", extra={"session_key": key})
            return

        logger.debug("Saved session", extra={"session_key": key, "fields": sorted(changes)})

    def clear(self, key: str) -> None:
        try:
            self.redis.delete(self._key(key))
        except redis.RedisError as e:
            logger.warning(f"Session clear failed: {e}", extra={"session_key": key})
