"""Table definitions — the ``page_requests`` ledger.

Tags:
    pagelog, orm, sqlalchemy, tables

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

from sqlalchemy import CheckConstraint, Float, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from pagelog.core.orm.base import PagelogBase, TimestampMixin


class PageRequestTable(TimestampMixin, PagelogBase):
    """One completed request/response cycle.

    Rows are written once by the recorder and never updated.  Every column
    except ``duration`` is nullable: ``view_runtime`` and ``db_runtime`` stay
    NULL when the cycle never rendered or never touched the database.
    """

    __tablename__ = "page_requests"
    __table_args__ = (
        CheckConstraint("duration >= 0", name="ck_page_requests_duration_non_negative"),
    )
    # Fetch created_at / updated_at on insert; rows are read after their session closes.
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    status: Mapped[int | None] = mapped_column(Integer)
    http_method: Mapped[str | None] = mapped_column(Text)
    path: Mapped[str | None] = mapped_column(Text)
    http_format: Mapped[str | None] = mapped_column(Text)
    controller_name: Mapped[str | None] = mapped_column(Text)
    action_name: Mapped[str | None] = mapped_column(Text)
    view_runtime: Mapped[float | None] = mapped_column(Float)
    db_runtime: Mapped[float | None] = mapped_column(Float)
    duration: Mapped[float] = mapped_column(Float, nullable=False)

    def __str__(self) -> str:
        return (
            f"({self.status}) {self.http_method} '{self.path}' "
            f"to {self.controller_name}#{self.action_name}"
        )

    def __repr__(self) -> str:
        return f"<PageRequestTable(id={self.id}, status={self.status}, path={self.path!r})>"
