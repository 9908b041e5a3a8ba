"""School equipment registry.

Tables, chairs and projectors owned by the school are recorded with the room
they stand in (``H-202``, ``HA-123``, ...). This package holds the typed record
model, the location-code grammar and the SQLite-backed store, plus JSON
transfer and printable reports built on top of the store.

Typical use::

    from school_equipment import open_store, EquipmentRecord, Location

    with open_store() as store:
        new_id = store.insert(EquipmentRecord(
            kind="Table", value_isk=50000, location=Location.parse("H-202"), seats=4,
        ))
        store.get(new_id)
"""

from __future__ import annotations

from typing import Optional

from .core.errors import (
    InvalidLocation,
    InvalidRecord,
    InventoryError,
    RecordIntegrityError,
    ReportError,
    StorageError,
    TransferError,
)
from .core.kinds import ChairKind, EquipmentKind
from .core.locations import Building
from .schemas.equipment import EquipmentRecord, describe, sort_records
from .schemas.location import Location, to_display_name
from .services.store import EquipmentStore
from .services.transfer import IdPolicy
from .settings import AppSettings, get_settings


def open_store(settings: Optional[AppSettings] = None) -> EquipmentStore:
    """Open the store configured by ``settings`` (environment by default)."""

    settings = settings or get_settings()
    return EquipmentStore.open(settings.database_url)


__all__ = [
    "AppSettings",
    "Building",
    "ChairKind",
    "EquipmentKind",
    "EquipmentRecord",
    "EquipmentStore",
    "IdPolicy",
    "InvalidLocation",
    "InvalidRecord",
    "InventoryError",
    "Location",
    "RecordIntegrityError",
    "ReportError",
    "StorageError",
    "TransferError",
    "describe",
    "get_settings",
    "open_store",
    "sort_records",
    "to_display_name",
]
