"""Idempotent schema setup for the equipment database."""

from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

from .session import Base

LOGGER = logging.getLogger(__name__)

EQUIPMENT_TABLE = "equipment"


def _create_index_if_not_exists(
    conn: Connection, table: str, name: str, cols: Iterable[str], unique: bool = False
) -> None:
    """Build an index only if it hasn't already been defined."""

    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


def ensure_schema(engine: Engine) -> None:
    """Create the table and its lookup indexes; safe to call on every open."""

    # Importing the model registers it with ``Base.metadata``.
    from ..models import equipment as _equipment  # noqa: F401

    Base.metadata.create_all(bind=engine)
    with engine.begin() as conn:
        _create_index_if_not_exists(conn, EQUIPMENT_TABLE, "ix_equipment_kind", ["kind"])
        _create_index_if_not_exists(
            conn, EQUIPMENT_TABLE, "ix_equipment_place", ["building", "floor", "room"]
        )
    LOGGER.debug("schema.ready", extra={"extra_data": {"url": str(engine.url)}})


def rebase_identity(conn: Connection, next_after: int, table: str = EQUIPMENT_TABLE) -> None:
    """Make the next generated id ``next_after + 1``.

    Only SQLite ``AUTOINCREMENT`` tables keep a sequence row; other dialects
    are left alone.
    """

    if conn.dialect.name != "sqlite":
        LOGGER.warning("Identity rebase skipped for dialect %s", conn.dialect.name)
        return
    updated = conn.execute(
        text("UPDATE sqlite_sequence SET seq = :seq WHERE name = :name"),
        {"seq": next_after, "name": table},
    ).rowcount
    if not updated:
        conn.execute(
            text("INSERT INTO sqlite_sequence (name, seq) VALUES (:name, :seq)"),
            {"seq": next_after, "name": table},
        )


__all__ = ["ensure_schema", "rebase_identity"]
