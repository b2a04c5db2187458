"""Declarative base, mixins and type-map for pagelog ORM models.

Uses SQLAlchemy 2.0 ``DeclarativeBase`` with a ``type_annotation_map``
that maps Python built-in types to portable SA column types.

Mixins
------
* **TimestampMixin** — ``created_at`` / ``updated_at`` assigned by the store.
"""

from __future__ import annotations

import datetime

from sqlalchemy import DateTime, Float, Integer, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class PagelogBase(DeclarativeBase):
    """Shared declarative base for every pagelog table.

    * ``str``   → ``Text``
    * ``int``   → ``Integer``
    * ``float`` → ``Float``
    * ``datetime.datetime`` → ``DateTime``
    """

    type_annotation_map = {
        str: Text,
        int: Integer,
        float: Float,
        datetime.datetime: DateTime,
    }


class TimestampMixin:
    """Mixin that adds ``created_at`` and ``updated_at`` with server defaults.

    ``func.now()`` renders as ``CURRENT_TIMESTAMP`` on SQLite and ``now()``
    on PostgreSQL, so the store stamps the row on insert.
    """

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
    )
