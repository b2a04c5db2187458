"""SQLAlchemy engine factory and session factory.

This module provides:

* ``create_pagelog_engine``   -- Create a SA engine from a URL.
* ``is_memory_url``           -- SQLite in-memory URLs (single shared connection).
* ``PagelogSession``          -- A pre-configured ``Session`` subclass.
* ``pagelog_session_factory`` -- ``sessionmaker`` bound to an engine.
* ``init_db``                 -- Create every pagelog table that is missing.

Tags:
    pagelog, orm, sqlalchemy, session, engine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import create_engine as _sa_create_engine
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pagelog.core.orm.base import PagelogBase


def is_memory_url(url: str) -> bool:
    """True for SQLite URLs that name a private in-memory database."""
    return url in ("sqlite://", "sqlite:///:memory:")


def create_pagelog_engine(
    url: str = "sqlite:///pagelog.db",
    *,
    echo: bool = False,
    pool_size: int | None = None,
    max_overflow: int | None = None,
    pool_timeout: int | None = None,
    **kwargs: Any,
) -> Engine:
    """Create a SQLAlchemy engine with sane defaults.

    Parameters
    ----------
    url:
        Database URL (``sqlite:///…``, ``postgresql://…``, etc.)
    echo:
        If ``True``, log all SQL through the ``sqlalchemy.engine`` logger.
    pool_size, max_overflow, pool_timeout:
        Connection pool parameters (ignored for SQLite).
    **kwargs:
        Extra arguments forwarded to ``sqlalchemy.create_engine``.
    """

    if url.startswith("sqlite"):
        # Request cycles finish on worker threads; the connection must be shareable.
        kwargs.setdefault("connect_args", {"check_same_thread": False})
        in_memory = is_memory_url(url)
        if in_memory:
            # One shared connection, or every checkout would see a fresh empty
            # database.  Concurrent sessions share its transaction, so a
            # rollback in one undoes the others' pending writes: tests only.
            kwargs.setdefault("poolclass", StaticPool)

        engine = _sa_create_engine(url, echo=echo, **kwargs)

        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection: Any, _rec: Any) -> None:
            cursor = dbapi_connection.cursor()
            if not in_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    pool_kwargs: dict[str, Any] = {}
    if pool_size is not None:
        pool_kwargs["pool_size"] = pool_size
    if max_overflow is not None:
        pool_kwargs["max_overflow"] = max_overflow
    if pool_timeout is not None:
        pool_kwargs["pool_timeout"] = pool_timeout

    return _sa_create_engine(url, echo=echo, **pool_kwargs, **kwargs)


class PagelogSession(Session):
    """Pre-configured session with ``expire_on_commit=False``.

    Records handed back to callers after commit keep their loaded values
    instead of lazily reloading on attribute access.  ``sessionmaker`` passes
    its own ``expire_on_commit``, so :func:`pagelog_session_factory` sets it
    there as well.
    """

    def __init__(self, bind: Engine | None = None, **kwargs: Any) -> None:
        kwargs.setdefault("expire_on_commit", False)
        super().__init__(bind=bind, **kwargs)


def pagelog_session_factory(engine: Engine) -> sessionmaker[PagelogSession]:
    """Return a ``sessionmaker`` bound to *engine* that produces ``PagelogSession`` instances."""
    return sessionmaker(bind=engine, class_=PagelogSession, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create every pagelog table that does not exist yet."""
    PagelogBase.metadata.create_all(engine)
