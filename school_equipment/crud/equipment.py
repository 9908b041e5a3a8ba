# school_equipment/crud/equipment.py
from __future__ import annotations

from typing import Iterable

from pydantic import ValidationError
from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from ..core.errors import InvalidRecord, RecordIntegrityError
from ..core.kinds import ChairKind, EquipmentKind
from ..core.locations import Building
from ..db.migrate import rebase_identity
from ..models.equipment import Equipment
from ..schemas.equipment import EquipmentRecord, variant_problem
from ..schemas.location import Location

# building, then floor, then room, then kind; id keeps equal rows deterministic.
ORDERING = (
    Equipment.building,
    Equipment.floor,
    Equipment.room,
    Equipment.kind,
    Equipment.id,
)


def _check_insertable(record: EquipmentRecord) -> None:
    problem = variant_problem(record.kind, record.seats, record.chair_kind, record.lumens)
    if problem:
        field, message = problem
        raise InvalidRecord(message, field=field)


def _row_values(record: EquipmentRecord) -> dict:
    return {
        "kind": record.kind.value,
        "building": record.location.building.value,
        "floor": record.location.floor,
        "room": record.location.room,
        "value_isk": record.value_isk,
        "seats": record.seats,
        "chair_kind": record.chair_kind.value if record.chair_kind else None,
        "lumens": record.lumens,
    }


def row_to_record(row: Equipment) -> EquipmentRecord:
    """
    Rebuild an ``EquipmentRecord`` from a stored row.
    Rows that do not fit the model raise ``RecordIntegrityError`` instead of
    being coerced into some default variant.
    """
    try:
        kind = EquipmentKind.parse(row.kind)
        chair_kind = ChairKind.parse(row.chair_kind) if row.chair_kind is not None else None
        location = Location(
            building=Building.from_code(row.building),
            floor=row.floor,
            room=row.room,
        )
        return EquipmentRecord(
            id=row.id,
            kind=kind,
            value_isk=row.value_isk,
            location=location,
            seats=row.seats,
            chair_kind=chair_kind,
            lumens=row.lumens,
        )
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        raise RecordIntegrityError(row.id, f"Stored equipment {row.id} is invalid: {messages}") from exc
    except ValueError as exc:
        raise RecordIntegrityError(row.id, f"Stored equipment {row.id} is invalid: {exc}") from exc


def insert_equipment(db: Session, record: EquipmentRecord) -> int:
    """
    Persist ``record`` and return its new id. Any id already on the record is ignored.
    """
    _check_insertable(record)
    obj = Equipment(**_row_values(record))
    db.add(obj)
    db.commit()
    return obj.id


def get_equipment(db: Session, record_id: int) -> EquipmentRecord | None:
    """
    Fetch a single record by primary key; ``None`` when it does not exist.
    """
    row = db.get(Equipment, record_id)
    if row is None:
        return None
    return row_to_record(row)


def delete_equipment(db: Session, record_id: int) -> bool:
    result = db.execute(delete(Equipment).where(Equipment.id == record_id))
    db.commit()
    return result.rowcount > 0


def update_location(db: Session, record_id: int, location: Location) -> bool:
    """
    Move a record. Only building/floor/room change; kind, value and the
    kind-specific attribute stay as they are.
    """
    result = db.execute(
        update(Equipment)
        .where(Equipment.id == record_id)
        .values(
            building=location.building.value,
            floor=location.floor,
            room=location.room,
        )
    )
    db.commit()
    return result.rowcount > 0


def list_equipment(
    db: Session,
    *,
    building: Building | None = None,
    floor: int | None = None,
    room: int | None = None,
    kind: EquipmentKind | None = None,
) -> list[EquipmentRecord]:
    """
    Return records matching every supplied filter, in the canonical order.
    """
    stmt = select(Equipment)
    if building is not None:
        stmt = stmt.where(Equipment.building == building.value)
    if floor is not None:
        stmt = stmt.where(Equipment.floor == floor)
    if room is not None:
        stmt = stmt.where(Equipment.room == room)
    if kind is not None:
        stmt = stmt.where(Equipment.kind == kind.value)
    rows = db.execute(stmt.order_by(*ORDERING)).scalars().all()
    return [row_to_record(row) for row in rows]


def list_all(db: Session) -> list[EquipmentRecord]:
    return list_equipment(db)


def list_by_building(db: Session, building: Building) -> list[EquipmentRecord]:
    return list_equipment(db, building=building)


def list_by_kind(db: Session, kind: EquipmentKind) -> list[EquipmentRecord]:
    return list_equipment(db, kind=kind)


def list_by_room(db: Session, location: Location) -> list[EquipmentRecord]:
    return list_equipment(
        db, building=location.building, floor=location.floor, room=location.room
    )


def list_by_floor(db: Session, building: Building, floor: int) -> list[EquipmentRecord]:
    return list_equipment(db, building=building, floor=floor)


def count_equipment(db: Session) -> int:
    return db.execute(select(func.count()).select_from(Equipment)).scalar_one()


def replace_all(db: Session, records: Iterable[EquipmentRecord], preserve_ids: bool) -> int:
    """
    Clear the table and insert ``records``.
    With ``preserve_ids`` each record keeps its id and the id generator is
    rebased to the largest one, so later inserts continue after it.
    Otherwise ids are dropped and fresh ones are issued.
    """
    items = list(records)
    for record in items:
        _check_insertable(record)

    if preserve_ids:
        seen: set[int] = set()
        for record in items:
            if record.id is None:
                raise InvalidRecord("Every record needs an id when ids are preserved", field="id")
            if record.id in seen:
                raise InvalidRecord(f"Duplicate id {record.id} in import", field="id")
            seen.add(record.id)

    db.execute(delete(Equipment))
    for record in items:
        values = _row_values(record)
        if preserve_ids:
            values["id"] = record.id
        db.add(Equipment(**values))
    db.flush()
    if preserve_ids and items:
        rebase_identity(db.connection(), max(record.id for record in items))
    db.commit()
    return len(items)


__all__ = [
    "count_equipment",
    "delete_equipment",
    "get_equipment",
    "insert_equipment",
    "list_all",
    "list_by_building",
    "list_by_floor",
    "list_by_kind",
    "list_by_room",
    "list_equipment",
    "replace_all",
    "row_to_record",
    "update_location",
]
