"""
FastAPI application factory.

``create_app()`` is the single composition root: it builds the engine,
the session factory and the notifier, registers the subscribers on that
notifier, and wires middleware and routers around them.  Subscribers live
exactly as long as the app: they are registered here and unregistered in
the lifespan's shutdown phase.

Tags:
    pagelog, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.engine import Engine

from pagelog.api.middleware.errors import unhandled_exception_handler
from pagelog.api.middleware.instrumentation import InstrumentationMiddleware
from pagelog.api.middleware.request_id import RequestIDMiddleware
from pagelog.core.errors import ConfigError
from pagelog.core.events import Notifier
from pagelog.core.logging import configure_logging, get_logger
from pagelog.core.orm import create_pagelog_engine, init_db, is_memory_url, pagelog_session_factory
from pagelog.core.settings import PagelogSettings, get_settings
from pagelog.observability import EventRecorder, LogSubscriber, Subscriber, instrument_engine


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — create tables on startup, detach subscribers on shutdown."""
    log = get_logger("pagelog.api")
    log.info("pagelog API starting", version=app.version)

    init_db(app.state.engine)
    log.info("database initialized", url=app.state.engine.url.render_as_string(hide_password=True))

    yield

    for subscriber in app.state.subscribers:
        subscriber.unregister()
    if app.state.owns_engine:
        app.state.engine.dispose()
    log.info("pagelog API shutting down")


def create_app(
    settings: PagelogSettings | None = None,
    *,
    engine: Engine | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : PagelogSettings | None
        Override settings (useful for testing).  When ``None`` the cached
        singleton from :func:`get_settings` is used.
    engine : Engine | None
        Use an existing engine instead of creating one from
        ``settings.database_url``.  The caller keeps ownership of it.
    """

    settings = settings or get_settings()
    owns_engine = engine is None
    if engine is None:
        engine = create_pagelog_engine(settings.database_url, echo=settings.echo_sql)

    notifier = Notifier()
    instrument_engine(engine, notifier)
    session_factory = pagelog_session_factory(engine)

    subscribers: list[Subscriber] = []
    if settings.record_requests:
        subscribers.append(EventRecorder(session_factory))
    if settings.log_requests:
        subscribers.append(LogSubscriber(log_sql=settings.log_sql))
    for subscriber in subscribers:
        subscriber.register(notifier)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.owns_engine = owns_engine
    app.state.session_factory = session_factory
    app.state.notifier = notifier
    app.state.subscribers = subscribers

    # ── Middleware (outermost → innermost) ────────────────────────────
    # add_middleware prepends, so the last one added wraps everything else.
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(InstrumentationMiddleware, notifier=notifier)

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from pagelog.api.routers import health, home, page_requests

    app.include_router(home.router)
    app.include_router(health.router, tags=["health"])
    app.include_router(page_requests.router, tags=["page_requests"])

    return app


def create_server() -> FastAPI:
    """Uvicorn factory: configure logging from settings, then build the app.

    Raises:
        ConfigError: if ``database_url`` names an in-memory SQLite database,
            whose single shared connection cannot isolate concurrent writes.
    """
    settings = get_settings()
    if is_memory_url(settings.database_url):
        raise ConfigError(
            "in-memory SQLite cannot back a server; set PAGELOG_DATABASE_URL to a file or server URL"
        ).with_context(database_url=settings.database_url)
    configure_logging(level=settings.log_level, json_format=settings.log_json, service=settings.api_title)
    return create_app(settings)
