"""JSON export/import of the full record set."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from ..core.errors import InvalidRecord, TransferError
from ..schemas.equipment import EquipmentRecord
from ..schemas.transfer import TRANSFER_VERSION, TransferDocument
from .store import EquipmentStore

LOGGER = logging.getLogger(__name__)


class IdPolicy(str, Enum):
    """What happens to the ids carried by imported records."""

    PRESERVE = "preserve"  # keep ids, rebase the generator to the largest one
    REASSIGN = "reassign"  # drop ids, let the store issue new ones


def dump_records(records: Iterable[EquipmentRecord]) -> dict[str, Any]:
    return {
        "version": TRANSFER_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "items": [record.model_dump(mode="json") for record in records],
    }


def _describe_errors(exc: ValidationError) -> list[str]:
    described = []
    for err in exc.errors():
        where = ".".join(str(part) for part in err.get("loc", ()))
        described.append(f"{where}: {err.get('msg')}" if where else str(err.get("msg")))
    return described


def load_document(data: Any) -> list[EquipmentRecord]:
    """Validate a decoded JSON document and return its records.

    Accepts ``{"version": 1, "items": [...]}`` as well as a bare list of items.
    """

    if isinstance(data, list):
        data = {"version": TRANSFER_VERSION, "items": data}
    if not isinstance(data, dict):
        raise TransferError("Transfer document must be an object or a list of records")
    version = data.get("version", TRANSFER_VERSION)
    if version != TRANSFER_VERSION:
        raise TransferError(
            f"Unsupported transfer version {version!r}; expected {TRANSFER_VERSION}",
            details={"version": version},
        )
    try:
        document = TransferDocument.model_validate(data)
    except ValidationError as exc:
        errors = _describe_errors(exc)
        raise TransferError(
            f"Transfer document has {len(errors)} invalid field(s)",
            details={"errors": errors},
        ) from exc
    return document.items


def import_records(
    store: EquipmentStore,
    records: Iterable[EquipmentRecord],
    id_policy: IdPolicy | str = IdPolicy.PRESERVE,
    replace: bool = True,
) -> int:
    """Load ``records`` into ``store`` under the chosen id policy.

    ``replace`` clears the store first. Appending is only possible when ids are
    reassigned, since preserved ids could collide with existing rows.
    """

    policy = IdPolicy(id_policy)
    items = list(records)
    if policy is IdPolicy.REASSIGN:
        items = [record.model_copy(update={"id": None}) for record in items]

    if not replace:
        if policy is IdPolicy.PRESERVE:
            raise TransferError("Preserving ids requires replacing the stored records")
        for record in items:
            store.insert(record)
        LOGGER.info("Appended %d imported records", len(items))
        return len(items)

    try:
        count = store.replace_all(items, preserve_ids=policy is IdPolicy.PRESERVE)
    except InvalidRecord as exc:
        raise TransferError(exc.message, details=exc.details) from exc
    LOGGER.info("Replaced store contents with %d imported records (ids %s)", count, policy.value)
    return count


def export_json(store: EquipmentStore, path: str | Path) -> int:
    """Write every stored record to ``path``; returns how many were written."""

    records = store.list_all()
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            json.dumps(dump_records(records), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
    except OSError as exc:
        raise TransferError(f"Could not write {target}: {exc}") from exc
    LOGGER.info("Exported %d records to %s", len(records), target)
    return len(records)


def import_json(
    store: EquipmentStore,
    path: str | Path,
    id_policy: IdPolicy | str = IdPolicy.PRESERVE,
    replace: bool = True,
) -> int:
    source = Path(path)
    try:
        raw = source.read_text(encoding="utf-8")
    except OSError as exc:
        raise TransferError(f"Could not read {source}: {exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise TransferError(f"{source} is not valid JSON: {exc}") from exc
    return import_records(store, load_document(data), id_policy=id_policy, replace=replace)


__all__ = [
    "IdPolicy",
    "dump_records",
    "export_json",
    "import_json",
    "import_records",
    "load_document",
]
