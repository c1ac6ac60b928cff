"""
SQL Session Store

Persists sessions in the `tenant_scope_sessions` table through SQLAlchemy.
Database errors are logged; reads fall back to an empty session and writes
are dropped.
"""

import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy import Column, DateTime, String
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from basecore.db import Base, get_engine, get_sessionmaker
from tenant_scope.session.base import SessionState, SessionStore, check_fields

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TenantScopeSession(Base):
    """One persisted tenant selection per session key."""

    __tablename__ = "tenant_scope_sessions"

    session_key = Column(String(255), primary_key=True)
    company_id = Column(String(255), nullable=True)
    site_id = Column(String(255), nullable=True)
    site_name = Column(String(255), nullable=True)
    subsite_id = Column(String(255), nullable=True)
    subsite_name = Column(String(255), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<TenantScopeSession {self.session_key} company={self.company_id}>"


class SqlSessionStore(SessionStore):
    """SQLAlchemy-backed session store."""

    def __init__(self, session_factory: Callable[[], Session] | None = None):
        """
        Args:
            session_factory: Returns a new ORM session; defaults to the
                basecore sessionmaker (DATABASE_URL)
        """
        self._session_factory = session_factory or get_sessionmaker()

    @staticmethod
    def create_schema(engine=None) -> None:
        """Create the sessions table if it does not exist."""
        TenantScopeSession.__table__.create(bind=engine or get_engine(), checkfirst=True)

    def load(self, key: str) -> SessionState:
        db = self._session_factory()
        try:
            row = db.get(TenantScopeSession, key)
            if row is None:
                return SessionState()
            return SessionState.from_mapping(
                {name: getattr(row, name) for name in SessionState.field_names()}
            )
        except SQLAlchemyError as e:
            logger.warning(f"Session read failed: {e}", extra={"session_key": key})
            return SessionState()
        finally:
            db.close()

    def save(self, key: str, **changes: str | None) -> None:
        check_fields(changes)
        db = self._session_factory()
        try:
            row = db.get(TenantScopeSession, key)
            if row is None:
                row = TenantScopeSession(session_key=key)
                db.add(row)
            for name, value in changes.items():
                setattr(row, name, value or None)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Session write failed: {e}", extra={"session_key": key})
            return
        finally:
            db.close()

        logger.debug("Saved session", extra={"session_key": key, "fields": sorted(changes)})

    def clear(self, key: str) -> None:
        db = self._session_factory()
        try:
            db.query(TenantScopeSession).filter(TenantScopeSession.session_key == key).delete()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Session clear failed: {e}", extra={"session_key": key})
        finally:
            db.close()
