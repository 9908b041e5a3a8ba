from __future__ import annotations

from typing import Any, Dict, Iterable

from ..core.kinds import EquipmentKind
from ..core.locations import Building
from ..schemas.equipment import EquipmentRecord


def summarize(records: Iterable[EquipmentRecord]) -> Dict[str, Any]:
    """Count and total value overall, per kind and per building.

    Every kind and building appears in the result, with zeros where nothing
    is registered, so reports keep a fixed layout.
    """

    by_kind = {kind.value: {"label": kind.label, "count": 0, "value_isk": 0} for kind in EquipmentKind}
    by_building = {
        building.value: {"label": building.display_name, "count": 0, "value_isk": 0}
        for building in Building
    }
    totals = {"count": 0, "value_isk": 0}

    for record in records:
        for bucket in (
            totals,
            by_kind[record.kind.value],
            by_building[record.location.building.value],
        ):
            bucket["count"] += 1
            bucket["value_isk"] += record.value_isk

    return {**totals, "by_kind": by_kind, "by_building": by_building}


__all__ = ["summarize"]
