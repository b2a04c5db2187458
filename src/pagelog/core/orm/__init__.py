"""SQLAlchemy 2.0 ORM layer for pagelog.

Modules
-------
base        PagelogBase (declarative base) + TimestampMixin
session     Engine factory, PagelogSession, init_db
tables      PageRequestTable

Tags:
    pagelog, orm, sqlalchemy, declarative

Doc-Types:
    package-overview, module-index
"""

from __future__ import annotations

from pagelog.core.orm.base import PagelogBase, TimestampMixin
from pagelog.core.orm.session import (
    PagelogSession,
    create_pagelog_engine,
    init_db,
    is_memory_url,
    pagelog_session_factory,
)
from pagelog.core.orm.tables import PageRequestTable

__all__ = [
    "PagelogBase",
    "TimestampMixin",
    "PageRequestTable",
    "PagelogSession",
    "create_pagelog_engine",
    "init_db",
    "is_memory_url",
    "pagelog_session_factory",
]
