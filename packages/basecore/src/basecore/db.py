"""
SQLAlchemy helpers for basecore.

The engine and sessionmaker are created lazily from DATABASE_URL.
"""

import functools

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

from basecore.settings import get_settings

Base = declarative_base()


@functools.lru_cache()
def get_engine() -> Engine:
    """Get SQLAlchemy engine (cached)."""
    url = get_settings().DATABASE_URL
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


@functools.lru_cache()
def get_sessionmaker() -> sessionmaker:
    """Get SQLAlchemy sessionmaker (cached)."""
    return sessionmaker(autoflush=False, bind=get_engine())
