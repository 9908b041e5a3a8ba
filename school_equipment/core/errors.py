"""Exception types raised by the equipment registry.

Not-found is never an exception: lookups return ``None`` and mutations return
``False``. Everything below is a real failure the caller has to handle.
"""

from __future__ import annotations

from typing import Any


class InventoryError(Exception):
    """Base class; renders as a ``{code, message, details}`` envelope."""

    code = "inventory_error"

    def __init__(self, message: str, *, details: Any | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class InvalidLocation(InventoryError, ValueError):
    """Location text or components that do not fit the location grammar."""

    code = "invalid_location"

    def __init__(self, message: str, *, field: str, token: str | None = None) -> None:
        super().__init__(message, details={"field": field, "token": token})
        self.field = field
        self.token = token


class InvalidRecord(InventoryError, ValueError):
    """A record rejected before it reaches the database."""

    code = "validation_error"

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class StorageError(InventoryError):
    """The database could not complete an operation."""

    code = "storage_error"

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(message, details={"operation": operation})
        self.operation = operation


class RecordIntegrityError(InventoryError):
    """A stored row cannot be rebuilt into a valid equipment record."""

    code = "integrity_error"

    def __init__(self, record_id: int | None, message: str) -> None:
        super().__init__(message, details={"id": record_id})
        self.record_id = record_id


class TransferError(InventoryError):
    """A bulk-transfer document is unreadable or malformed."""

    code = "transfer_error"


class ReportError(InventoryError):
    """A report could not be written."""

    code = "report_error"


__all__ = [
    "InvalidLocation",
    "InvalidRecord",
    "InventoryError",
    "RecordIntegrityError",
    "ReportError",
    "StorageError",
    "TransferError",
]
