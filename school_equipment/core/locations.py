"""Building codes and the location-code grammar.

A location code is what people type and what old exports contain, so the
grammar here is the compatibility surface of the whole registry:

* ``<building>-<floor><room>`` where the building is ``HA``, ``H`` or ``S``,
  the floor is exactly one digit and the room is one to three digits.
* Room numbers are written zero-padded to two digits, so ``H-202`` is
  building H, floor 2, room 2 and ``HA-123`` is floor 1, room 23.
* Building codes are matched case-insensitively.
"""

from __future__ import annotations

import re
from enum import Enum

from .errors import InvalidLocation
from .kinds import fold_text

__all__ = [
    "Building",
    "FLOOR_MAX",
    "ROOM_MAX",
    "format_location_code",
    "split_location_code",
    "validate_floor",
    "validate_room",
]

FLOOR_MAX = 9
ROOM_MAX = 999

_LOCATION_RE = re.compile(r"^(?P<building>[^\s-]+)-(?P<floor>.)(?P<room>.*)$")
_ROOM_RE = re.compile(r"^[0-9]{1,3}$")


class Building(str, Enum):
    """School buildings. The value is the short code stored in the database."""

    HA = "HA"
    H = "H"
    S = "S"

    @property
    def code(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return BUILDING_NAMES[self]

    @classmethod
    def from_code(cls, code: str) -> "Building":
        """Strict lookup by short code (case-insensitive)."""

        normalized = (code or "").strip().upper()
        for building in cls:
            if building.value == normalized:
                return building
        raise InvalidLocation(
            f"Unknown building code {code!r}; expected one of HA, H, S",
            field="building",
            token=code,
        )

    @classmethod
    def parse(cls, raw: str) -> "Building":
        """Lenient lookup accepting a code or a display name, with or without accents."""

        folded = fold_text(raw or "")
        building = _BUILDING_ALIASES.get(folded)
        if building is None:
            raise InvalidLocation(
                f"Unknown building {raw!r}",
                field="building",
                token=raw,
            )
        return building


BUILDING_NAMES = {
    Building.HA: "Hafnarfjörður",
    Building.H: "Háteigsvegur",
    Building.S: "Skólavörðuholt",
}

_BUILDING_ALIASES = {
    "ha": Building.HA,
    "hafnarfjordur": Building.HA,
    "h": Building.H,
    "hateigsvegur": Building.H,
    "hateigssvegur": Building.H,
    "s": Building.S,
    "skolavorduholt": Building.S,
    "skolavorduhollt": Building.S,
}


def validate_floor(floor: int) -> int:
    if isinstance(floor, bool) or not isinstance(floor, int) or not 0 <= floor <= FLOOR_MAX:
        raise InvalidLocation(
            f"Floor must be a single digit 0-{FLOOR_MAX}, got {floor!r}",
            field="floor",
            token=str(floor),
        )
    return floor


def validate_room(room: int) -> int:
    if isinstance(room, bool) or not isinstance(room, int) or not 0 <= room <= ROOM_MAX:
        raise InvalidLocation(
            f"Room number must be between 0 and {ROOM_MAX}, got {room!r}",
            field="room",
            token=str(room),
        )
    return room


def split_location_code(text: str) -> tuple[Building, int, int]:
    """Break ``text`` into ``(building, floor, room)`` or raise ``InvalidLocation``."""

    if not isinstance(text, str):
        raise InvalidLocation(
            f"Location must be text such as H-202, got {type(text).__name__}",
            field="location",
        )
    cleaned = text.strip()
    match = _LOCATION_RE.match(cleaned)
    if not match:
        raise InvalidLocation(
            f"Invalid location {text!r}; expected a code such as H-202 or HA-123",
            field="location",
            token=text,
        )

    building = Building.from_code(match.group("building"))

    floor_token = match.group("floor")
    if not floor_token.isascii() or not floor_token.isdigit():
        raise InvalidLocation(
            f"Floor must be a single digit, got {floor_token!r}",
            field="floor",
            token=floor_token,
        )

    room_token = match.group("room")
    if not room_token:
        raise InvalidLocation(
            f"Missing room number after floor in {text!r}",
            field="room",
            token=room_token,
        )
    if not _ROOM_RE.match(room_token):
        if room_token.isascii() and room_token.isdigit():
            message = f"Room number {room_token!r} exceeds the maximum of {ROOM_MAX}"
        else:
            message = f"Room number must be 1-3 digits, got {room_token!r}"
        raise InvalidLocation(message, field="room", token=room_token)

    return building, int(floor_token), validate_room(int(room_token))


def format_location_code(building: Building, floor: int, room: int) -> str:
    return f"{building.value}-{floor}{room:02d}"
