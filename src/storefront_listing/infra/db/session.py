"""Database engine and session scopes for the `database` catalog backend."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from storefront_listing.infra.config import database_url

# Built on first use so the http backend never needs DATABASE_URL.
_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None


def get_engine() -> Engine:
    """
    Shared engine, created lazily.

    Listing searches run three or four short SELECTs per page from worker
    threads; the pool is sized for that rather than for long transactions.
    """
    global _engine
    if _engine is None:
        _engine = create_engine(
            database_url(),
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


@contextmanager
def catalog_session() -> Iterator[Session]:
    """Read-only scope for one catalog search; nothing is ever committed."""
    session = get_session_factory()()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@contextmanager
def write_session() -> Iterator[Session]:
    """Transactional scope: commit on success, rollback on error."""
    with get_session_factory().begin() as session:
        yield session
