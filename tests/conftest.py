"""
Shared pytest fixtures for pagelog tests.

This module provides:
- An in-memory SQLite engine with the schema created
- Session factory, notifier and a registered recorder
- Settings and a FastAPI app/client wired to the in-memory engine
- A factory for ``request.completed`` events

Usage:
    Fixtures are auto-discovered by pytest; use them as function arguments.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import structlog
from fastapi.testclient import TestClient
from sqlalchemy import func, select

# Ensure pagelog package is importable without installation
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pagelog.api import create_app  # noqa: E402
from pagelog.core.events import REQUEST_COMPLETED, Event, Notifier  # noqa: E402
from pagelog.core.orm import (  # noqa: E402
    PageRequestTable,
    create_pagelog_engine,
    init_db,
    pagelog_session_factory,
)
from pagelog.core.settings import PagelogSettings  # noqa: E402
from pagelog.observability.recorder import EventRecorder  # noqa: E402


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if test_path.parts and test_path.parts[0] == "api":
            item.add_marker(pytest.mark.integration)
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Undo any structlog configuration a test applied."""
    yield
    structlog.reset_defaults()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    eng = create_pagelog_engine("sqlite:///:memory:")
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return pagelog_session_factory(engine)


@pytest.fixture
def count_rows(session_factory) -> Callable[[], int]:
    """Return a callable counting rows in ``page_requests``."""

    def _count() -> int:
        with session_factory() as session:
            return session.scalar(select(func.count()).select_from(PageRequestTable))

    return _count


@pytest.fixture
def all_rows(session_factory) -> Callable[[], list[PageRequestTable]]:
    """Return a callable loading every ``page_requests`` row in id order."""

    def _rows() -> list[PageRequestTable]:
        with session_factory() as session:
            return list(session.scalars(select(PageRequestTable).order_by(PageRequestTable.id)))

    return _rows


# =============================================================================
# Event Fixtures
# =============================================================================


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def recorder(session_factory, notifier) -> Generator[EventRecorder, None, None]:
    """EventRecorder registered on the ``notifier`` fixture."""
    rec = EventRecorder(session_factory)
    rec.register(notifier)
    yield rec
    rec.unregister()


@pytest.fixture
def make_event() -> Callable[..., Event]:
    """Factory for ``request.completed`` events."""

    def _make(duration: float = 195.0, transaction_id: str | None = None, **payload: Any) -> Event:
        return Event(
            name=REQUEST_COMPLETED,
            payload=payload,
            duration=duration,
            transaction_id=transaction_id,
        )

    return _make


@pytest.fixture
def full_payload() -> dict[str, Any]:
    return {
        "status": 200,
        "method": "GET",
        "path": "/posts/1",
        "format": "html",
        "controller": "posts",
        "action": "show",
        "view_runtime": 12.3,
        "db_runtime": 4.5,
    }


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def settings() -> PagelogSettings:
    return PagelogSettings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        log_requests=False,
    )


@pytest.fixture
def app(settings, engine):
    return create_app(settings, engine=engine)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c
