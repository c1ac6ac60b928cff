"""
Tests for session persistence.
"""

from unittest.mock import MagicMock

import pytest
import redis
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tenant_scope.session import (
    MemorySessionStore,
    RedisSessionStore,
    SessionState,
    SqlSessionStore,
)


@pytest.fixture
def sql_store():
    """SQL store on a private in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SqlSessionStore.create_schema(engine)
    return SqlSessionStore(sessionmaker(bind=engine, autoflush=False))


@pytest.fixture(params=["memory", "sql"])
def any_store(request, sql_store):
    if request.param == "sql":
        return sql_store
    return MemorySessionStore()


class TestSessionStores:
    """Behaviour shared by the memory and SQL stores."""

    def test_empty_load(self, any_store):
        """Test that nothing stored loads as an empty state."""
        state = any_store.load("nobody")
        assert state == SessionState()
        assert state.is_empty

    def test_save_merges(self, any_store):
        """Test that saves merge and None removes a field."""
        any_store.save("k", company_id="acme", site_id="s1", site_name="Downtown")
        any_store.save("k", subsite_id="xyz")
        any_store.save("k", site_name=None)

        state = any_store.load("k")
        assert state.company_id == "acme"
        assert state.site_id == "s1"
        assert state.site_name is None
        assert state.subsite_id == "xyz"

    def test_clear(self, any_store):
        """Test clearing removes everything for the key only."""
        any_store.save("k", company_id="acme")
        any_store.save("other", company_id="beta")
        any_store.clear("k")

        assert any_store.load("k").is_empty
        assert any_store.load("other").company_id == "beta"

    def test_unknown_field_rejected(self, any_store):
        """Test that unknown fields are a programming error."""
        with pytest.raises(ValueError):
            any_store.save("k", colour="blue")


class TestRedisSessionStore:
    """Tests for the Redis hash store."""

    def test_load(self):
        """Test loading from a hash."""
        client = MagicMock()
        client.hgetall.return_value = {"company_id": "acme", "site_id": "s1"}
        state = RedisSessionStore(client, prefix="test:").load("k")

        client.hgetall.assert_called_once_with("test:k")
        assert (state.company_id, state.site_id, state.subsite_id) == ("acme", "s1", None)

    def test_save_sets_and_deletes(self):
        """Test that values are set and empty fields deleted in one pipeline."""
        client = MagicMock()
        pipe = client.pipeline.return_value
        RedisSessionStore(client, prefix="test:").save("k", company_id="acme", site_id=None)

        pipe.hset.assert_called_once_with("test:k", mapping={"company_id": "acme"})
        pipe.hdel.assert_called_once_with("test:k", "site_id")
        pipe.execute.assert_called_once()

    def test_clear(self):
        """Test clearing deletes the hash."""
        client = MagicMock()
        RedisSessionStore(client).clear("k")
        client.delete.assert_called_once_with("tenant_scope:session:k")

    def test_write_errors_absorbed(self):
        """Test that Redis failures on save and clear are logged, not raised."""
        client = MagicMock()
        client.pipeline.return_value.execute.side_effect = redis.ConnectionError("down")
        client.delete.side_effect = redis.ConnectionError("down")
        store = RedisSessionStore(client)

        store.save("k", company_id="acme")
        store.clear("k")

    def test_read_error_is_empty(self):
        """Test that a failed read loads an empty session."""
        client = MagicMock()
        client.hgetall.side_effect = redis.ConnectionError("down")
        assert RedisSessionStore(client).load("k").is_empty


class TestSqlSessionStoreFailures:
    """Tests for database errors in the SQL store."""

    def test_missing_table_absorbed(self):
        """Test that a database without the sessions table degrades to no persistence."""
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        store = SqlSessionStore(sessionmaker(bind=engine, autoflush=False))

        store.save("k", company_id="acme")
        store.clear("k")
        assert store.load("k").is_empty
