"""Shared equipment kind constants and helpers."""

from __future__ import annotations

import unicodedata
from enum import Enum


def fold_text(value: str) -> str:
    """Lower-case ``value`` and strip Icelandic diacritics for lenient matching."""

    value = value.strip().lower().replace("ð", "d").replace("þ", "th").replace("æ", "ae")
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


class EquipmentKind(str, Enum):
    """Closed set of equipment variants. The value is the stored discriminator."""

    TABLE = "Table"
    CHAIR = "Chair"
    PROJECTOR = "Projector"

    @property
    def label(self) -> str:
        return self.value

    @property
    def attribute(self) -> str:
        """Name of the single kind-specific attribute this kind requires."""

        return KIND_ATTRIBUTES[self]

    @classmethod
    def parse(cls, raw: str) -> "EquipmentKind":
        folded = fold_text(raw or "")
        for kind in cls:
            if folded == kind.value.lower():
                return kind
        raise ValueError(f"Unknown equipment kind: {raw!r}")


class ChairKind(str, Enum):
    COMFORT = "comfort"
    SCHOOL = "school"
    OFFICE = "office"
    OTHER = "other"

    @property
    def label(self) -> str:
        return CHAIR_KIND_LABELS[self]

    @classmethod
    def parse(cls, raw: str) -> "ChairKind":
        """Resolve a chair kind from its code, label or a legacy stored value.

        Unknown values raise ``ValueError``; nothing is mapped to ``OTHER``
        unless it actually says so.
        """

        folded = fold_text(raw or "")
        kind = _CHAIR_KIND_ALIASES.get(folded)
        if kind is None:
            raise ValueError(f"Unknown chair kind: {raw!r}")
        return kind


KIND_ATTRIBUTES = {
    EquipmentKind.TABLE: "seats",
    EquipmentKind.CHAIR: "chair_kind",
    EquipmentKind.PROJECTOR: "lumens",
}

CHAIR_KIND_LABELS = {
    ChairKind.COMFORT: "comfort chair",
    ChairKind.SCHOOL: "school chair",
    ChairKind.OFFICE: "office chair",
    ChairKind.OTHER: "other",
}

# Legacy databases stored the Icelandic enum names (e.g. ``Skolastoll``).
_CHAIR_KIND_ALIASES = {
    "comfort": ChairKind.COMFORT,
    "comfort chair": ChairKind.COMFORT,
    "haegindastoll": ChairKind.COMFORT,
    "haegi": ChairKind.COMFORT,
    "school": ChairKind.SCHOOL,
    "school chair": ChairKind.SCHOOL,
    "skolastoll": ChairKind.SCHOOL,
    "office": ChairKind.OFFICE,
    "office chair": ChairKind.OFFICE,
    "skrifstofustoll": ChairKind.OFFICE,
    "skrifsto": ChairKind.OFFICE,
    "other": ChairKind.OTHER,
    "annad": ChairKind.OTHER,
}


__all__ = [
    "CHAIR_KIND_LABELS",
    "ChairKind",
    "EquipmentKind",
    "KIND_ATTRIBUTES",
    "fold_text",
]
