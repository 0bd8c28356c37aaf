"""Database engine, sessions and connectivity check for mux_sync."""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Iterator, Optional, Tuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from muxsync.core.config import get_settings


Base = declarative_base()


def _engine_options(database_url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"pool_pre_ping": True, "future": True}
    if not database_url.startswith("sqlite"):
        return options

    options["connect_args"] = {"check_same_thread": False}
    # An in-memory database only survives on a single shared connection.
    if database_url.rstrip("/").endswith(("sqlite:", "pysqlite:")) or ":memory:" in database_url:
        options["poolclass"] = StaticPool
    return options


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    database_url = get_settings().database_url
    return create_engine(database_url, **_engine_options(database_url))


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker:
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, expire_on_commit=False)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for work outside a request; uncommitted changes are rolled back on error."""

    session = get_session_factory()()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_session() -> Iterator[Session]:
    with session_scope() as session:
        yield session


def test_connection() -> Tuple[bool, Optional[str]]:
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
    except Exception as exc:
        return False, str(exc)
    return True, None


def load_models() -> None:
    """Register the ORM tables on ``Base.metadata``."""

    import muxsync.storage.models  # noqa: F401
