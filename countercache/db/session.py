from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from countercache.core.config import settings
from countercache.db.store import CounterStore


def _make_engine():
    connect_args = {}
    if settings.database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(settings.database_url, echo=settings.sql_echo, future=True, connect_args=connect_args)


engine = _make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@contextmanager
def open_store() -> Iterator[CounterStore]:
    """Bind a store to one autocommit connection.

    Temporary aggregate tables only live on the connection that created them,
    so every statement of a job has to go through the same store.
    """

    with engine.connect() as conn:
        conn = conn.execution_options(isolation_level="AUTOCOMMIT")
        yield CounterStore(conn)
