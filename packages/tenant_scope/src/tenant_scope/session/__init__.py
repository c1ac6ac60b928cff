"""
Session Persistence

Stores the selected tenant, site and subsite across restarts.
"""

from tenant_scope.session.base import SessionState, SessionStore
from tenant_scope.session.memory import MemorySessionStore
from tenant_scope.session.redis import RedisSessionStore
from tenant_scope.session.sql import SqlSessionStore, TenantScopeSession

__all__ = [
    "MemorySessionStore",
    "RedisSessionStore",
    "SessionState",
    "SessionStore",
    "SqlSessionStore",
    "TenantScopeSession",
]
