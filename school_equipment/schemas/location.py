"""Pydantic value type for a building/floor/room triple."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from ..core.locations import (
    Building,
    format_location_code,
    split_location_code,
    validate_floor,
    validate_room,
)


class Location(BaseModel):
    """Immutable room address. ``str(location)`` is the canonical code."""

    model_config = ConfigDict(frozen=True)

    building: Building = Field(validation_alias=AliasChoices("building", "house"))
    floor: int
    room: int

    @model_validator(mode="before")
    @classmethod
    def accept_location_code(cls, value: Any) -> Any:
        # Exports and CLI input may carry the code string instead of an object.
        if isinstance(value, str):
            building, floor, room = split_location_code(value)
            return {"building": building, "floor": floor, "room": room}
        return value

    @field_validator("building", mode="before")
    @classmethod
    def parse_building(cls, value: Any) -> Any:
        if isinstance(value, str) and not isinstance(value, Building):
            return Building.parse(value)
        return value

    @field_validator("floor")
    @classmethod
    def check_floor(cls, value: int) -> int:
        return validate_floor(value)

    @field_validator("room")
    @classmethod
    def check_room(cls, value: int) -> int:
        return validate_room(value)

    @classmethod
    def parse(cls, text: str) -> "Location":
        """Parse a location code such as ``H-202``; raises ``InvalidLocation``."""

        building, floor, room = split_location_code(text)
        return cls(building=building, floor=floor, room=room)

    @property
    def code(self) -> str:
        return format_location_code(self.building, self.floor, self.room)

    @property
    def display_name(self) -> str:
        return f"{self.code} ({self.building.display_name})"

    def sort_key(self) -> tuple[str, int, int]:
        return (self.building.value, self.floor, self.room)

    def __str__(self) -> str:
        return self.code


def to_display_name(building: Building) -> str:
    return building.display_name


__all__ = ["Location", "to_display_name"]
