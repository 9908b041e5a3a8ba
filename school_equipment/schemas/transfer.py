"""Pydantic schema for the JSON bulk-transfer document."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field

from .equipment import EquipmentRecord

TRANSFER_VERSION = 1


class TransferDocument(BaseModel):
    version: Literal[1] = TRANSFER_VERSION
    exported_at: Optional[str] = None
    items: list[EquipmentRecord] = Field(default_factory=list)


__all__ = ["TRANSFER_VERSION", "TransferDocument"]
