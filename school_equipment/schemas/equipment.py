"""Pydantic schema for equipment records and the helpers built on it."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.formatting import format_isk, group_thousands
from ..core.kinds import KIND_ATTRIBUTES, ChairKind, EquipmentKind
from .location import Location

UNASSIGNED_ID_TEXT = "(unassigned)"

# Largest value a SQLite INTEGER column can hold.
SQLITE_INT_MAX = 2**63 - 1


def variant_problem(
    kind: EquipmentKind,
    seats: int | None,
    chair_kind: ChairKind | None,
    lumens: int | None,
) -> tuple[str, str] | None:
    """Return ``(field, message)`` when the kind-specific attributes do not fit ``kind``."""

    values = {"seats": seats, "chair_kind": chair_kind, "lumens": lumens}
    required = KIND_ATTRIBUTES[kind]
    if values[required] is None:
        return required, f"{kind.value} requires {required}"
    for name, value in values.items():
        if name != required and value is not None:
            return name, f"{kind.value} must not set {name}"
    return None


class EquipmentRecord(BaseModel):
    """One piece of equipment.

    Exactly the attribute that matches ``kind`` is populated: ``seats`` for a
    table, ``chair_kind`` for a chair and ``lumens`` for a projector. ``id`` is
    ``None`` until the store assigns one.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = Field(default=None, gt=0, le=SQLITE_INT_MAX)
    kind: EquipmentKind
    value_isk: int = Field(ge=0, le=SQLITE_INT_MAX)
    location: Location
    seats: Optional[int] = Field(default=None, gt=0, le=SQLITE_INT_MAX)
    chair_kind: Optional[ChairKind] = None
    lumens: Optional[int] = Field(default=None, gt=0, le=SQLITE_INT_MAX)

    @field_validator("kind", mode="before")
    @classmethod
    def parse_kind(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, EquipmentKind):
            return EquipmentKind.parse(value)
        return value

    @field_validator("chair_kind", mode="before")
    @classmethod
    def parse_chair_kind(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, ChairKind):
            return ChairKind.parse(value)
        return value

    @model_validator(mode="after")
    def check_variant(self) -> "EquipmentRecord":
        problem = variant_problem(self.kind, self.seats, self.chair_kind, self.lumens)
        if problem:
            raise ValueError(problem[1])
        return self

    @property
    def kind_attribute(self) -> str:
        return self.kind.attribute

    @property
    def kind_value(self) -> int | ChairKind | None:
        return getattr(self, self.kind.attribute)

    def with_id(self, record_id: int) -> "EquipmentRecord":
        return self.model_copy(update={"id": record_id})

    def with_location(self, location: Location) -> "EquipmentRecord":
        return self.model_copy(update={"location": location})

    def describe(self) -> str:
        return describe(self)

    def __str__(self) -> str:
        return describe(self)


def _describe_table(record: EquipmentRecord) -> str:
    seats = record.seats or 0
    return f"{seats} {'seat' if seats == 1 else 'seats'}"


def _describe_chair(record: EquipmentRecord) -> str:
    return record.chair_kind.label if record.chair_kind else "unknown chair kind"


def _describe_projector(record: EquipmentRecord) -> str:
    return f"{group_thousands(record.lumens)} lumens"


# One entry per kind; a new kind without a describer fails at lookup time.
_ATTRIBUTE_DESCRIBERS: dict[EquipmentKind, Callable[[EquipmentRecord], str]] = {
    EquipmentKind.TABLE: _describe_table,
    EquipmentKind.CHAIR: _describe_chair,
    EquipmentKind.PROJECTOR: _describe_projector,
}


def describe(record: EquipmentRecord) -> str:
    """One-line human-readable description used on screen, in print and in PDFs."""

    id_text = f"#{record.id}" if record.id is not None else UNASSIGNED_ID_TEXT
    attribute_text = _ATTRIBUTE_DESCRIBERS[record.kind](record)
    return (
        f"{record.kind.label} {id_text}: {attribute_text}, "
        f"value {format_isk(record.value_isk)}, "
        f"located in {record.location.display_name}."
    )


SORT_KEYS: dict[str, Callable[[EquipmentRecord], Any]] = {
    "id": lambda r: (r.id is None, r.id or 0),
    "kind": lambda r: r.kind.value,
    "location": lambda r: str(r.location),
    "value": lambda r: r.value_isk,
}


def sort_records(
    records: Iterable[EquipmentRecord], key: str = "id", reverse: bool = False
) -> list[EquipmentRecord]:
    """Stable sort by one of ``SORT_KEYS``; ties keep their input order.

    Unassigned ids stay last for the ``id`` key in either direction.
    """

    try:
        key_func = SORT_KEYS[key]
    except KeyError:
        raise ValueError(f"Unknown sort key {key!r}; choose from {', '.join(SORT_KEYS)}") from None
    items = list(records)
    if key == "id" and reverse:
        assigned = sorted((r for r in items if r.id is not None), key=lambda r: r.id, reverse=True)
        return assigned + [r for r in items if r.id is None]
    return sorted(items, key=key_func, reverse=reverse)


__all__ = [
    "EquipmentRecord",
    "SORT_KEYS",
    "SQLITE_INT_MAX",
    "UNASSIGNED_ID_TEXT",
    "describe",
    "sort_records",
    "variant_problem",
]
