from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator
from uuid import uuid4

operation_ctx_var: ContextVar[str | None] = ContextVar("operation_id", default=None)
logger = logging.getLogger("school_equipment.store")


@contextmanager
def tracked_operation(name: str, **fields: object) -> Iterator[str]:
    """Give a store call a correlation id and emit one structured log line for it."""

    operation_id = operation_ctx_var.get() or uuid4().hex[:12]
    token = operation_ctx_var.set(operation_id)
    start = time.perf_counter()
    outcome = "ok"
    try:
        yield operation_id
    except Exception as exc:
        outcome = type(exc).__name__
        raise
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        extra = {
            "extra_data": {
                "operation": name,
                "outcome": outcome,
                "duration_ms": round(duration_ms, 2),
                **fields,
            }
        }
        logger.info("store.completed", extra=extra)
        operation_ctx_var.reset(token)


__all__ = ["operation_ctx_var", "tracked_operation"]
