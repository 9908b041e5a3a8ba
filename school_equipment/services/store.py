"""The equipment store: one owned database handle behind a lock.

*What:* ``EquipmentStore`` wraps the CRUD helpers with session handling,
error translation and structured logging.
*When:* Opened once per process (CLI run, test, or embedding UI) and passed
to whatever needs it.
*How:* Each public method takes the lock, opens a short-lived session, runs
one CRUD helper and closes the session again. SQLAlchemy failures surface as
``StorageError``; rows that cannot be read surface as ``RecordIntegrityError``.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterable, Iterator, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.context import tracked_operation
from ..core.errors import StorageError
from ..core.kinds import EquipmentKind
from ..core.locations import Building, validate_floor
from ..crud import equipment as crud
from ..db.migrate import ensure_schema
from ..db.session import build_engine, build_session_factory, session_scope
from ..schemas.equipment import SQLITE_INT_MAX, EquipmentRecord
from ..schemas.location import Location

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def _storable_id(record_id: int) -> bool:
    return 0 < record_id <= SQLITE_INT_MAX


class EquipmentStore:
    """Sole source of truth for equipment records."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._session_factory = build_session_factory(engine)
        self._lock = threading.RLock()
        try:
            ensure_schema(engine)
        except SQLAlchemyError as exc:
            raise StorageError("open", f"Could not prepare database: {exc}") from exc

    @classmethod
    def open(cls, url: str) -> "EquipmentStore":
        LOGGER.info("Opening equipment store at %s", url)
        try:
            engine = build_engine(url)
        except (SQLAlchemyError, OSError) as exc:
            raise StorageError("open", f"Could not open database {url}: {exc}") from exc
        return cls(engine)

    # ─── plumbing ───

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with session_scope(self._session_factory) as db:
            yield db

    def _run(self, operation: str, func: Callable[[Session], T], **fields: object) -> T:
        with self._lock, tracked_operation(operation, **fields):
            try:
                with self._session() as db:
                    return func(db)
            except (SQLAlchemyError, OverflowError) as exc:
                LOGGER.exception("Store operation %s failed", operation)
                raise StorageError(operation, f"{operation} failed: {exc}") from exc

    # ─── writes ───

    def insert(self, record: EquipmentRecord) -> int:
        """Persist a new record and return the id the database assigned."""

        return self._run("insert", lambda db: crud.insert_equipment(db, record), kind=record.kind.value)

    def delete(self, record_id: int) -> bool:
        """``True`` if a row was removed, ``False`` if there was no such id."""

        if not _storable_id(record_id):
            return False
        return self._run("delete", lambda db: crud.delete_equipment(db, record_id), id=record_id)

    def update_location(self, record_id: int, location: Location) -> bool:
        if not _storable_id(record_id):
            return False
        return self._run(
            "update_location",
            lambda db: crud.update_location(db, record_id, location),
            id=record_id,
            location=str(location),
        )

    def replace_all(self, records: Iterable[EquipmentRecord], preserve_ids: bool) -> int:
        """Swap the whole table for ``records`` (import path)."""

        items = list(records)
        return self._run(
            "replace_all",
            lambda db: crud.replace_all(db, items, preserve_ids=preserve_ids),
            count=len(items),
            preserve_ids=preserve_ids,
        )

    # ─── reads ───

    def get(self, record_id: int) -> EquipmentRecord | None:
        if not _storable_id(record_id):
            return None
        return self._run("get", lambda db: crud.get_equipment(db, record_id), id=record_id)

    def list_all(self) -> list[EquipmentRecord]:
        return self._run("list_all", crud.list_all)

    def list_by_building(self, building: Building) -> list[EquipmentRecord]:
        return self._run(
            "list_by_building",
            lambda db: crud.list_by_building(db, building),
            building=building.value,
        )

    def list_by_kind(self, kind: EquipmentKind) -> list[EquipmentRecord]:
        return self._run("list_by_kind", lambda db: crud.list_by_kind(db, kind), kind=kind.value)

    def list_by_room(self, location: Location) -> list[EquipmentRecord]:
        return self._run(
            "list_by_room",
            lambda db: crud.list_by_room(db, location),
            location=str(location),
        )

    def list_by_floor(self, building: Building, floor: int) -> list[EquipmentRecord]:
        validate_floor(floor)
        return self._run(
            "list_by_floor",
            lambda db: crud.list_by_floor(db, building, floor),
            building=building.value,
            floor=floor,
        )

    def count(self) -> int:
        return self._run("count", crud.count_equipment)

    # ─── lifecycle ───

    def close(self) -> None:
        with self._lock:
            self.engine.dispose()

    def __enter__(self) -> "EquipmentStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["EquipmentStore"]
