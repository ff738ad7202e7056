"""Logging context: ContextVar-based log enrichment for request handlers.

Every log record is automatically enriched with a ``[op:req:fax]`` prefix
via a `ContextFilter` attached to the root logger handlers.

Operation codes: ``rx`` (receive decision), ``done`` (fax received),
``sync`` (directory refresh).
"""

from __future__ import annotations

import itertools
import logging
from contextvars import ContextVar

ctx_operation: ContextVar[str | None] = ContextVar("ctx_operation", default=None)
ctx_request_id: ContextVar[int | None] = ContextVar("ctx_request_id", default=None)
ctx_fax_number: ContextVar[str | None] = ContextVar("ctx_fax_number", default=None)

_request_ids = itertools.count(1)


def next_request_id() -> int:
    """Return a process-wide, monotonically increasing request id."""
    return next(_request_ids)


class ContextFilter(logging.Filter):
    """Inject ContextVar values into every LogRecord as ``record.ctx``."""

    def filter(self, record: logging.LogRecord) -> bool:
        op = ctx_operation.get(None)
        req = ctx_request_id.get(None)
        fax = ctx_fax_number.get(None)
        parts: list[str] = []
        if op:
            parts.append(op)
        if req is not None:
            parts.append(str(req))
        if fax:
            parts.append(fax)
        record.ctx = f"[{':'.join(parts)}] " if parts else ""
        return True


def set_log_context(
    *,
    operation: str | None = None,
    request_id: int | None = None,
    fax_number: str | None = None,
) -> None:
    """Set logging context for the current asyncio task.

    aiohttp runs each request handler in its own task, so values never leak
    between concurrent requests.
    """
    if operation is not None:
        ctx_operation.set(operation)
    if request_id is not None:
        ctx_request_id.set(request_id)
    if fax_number is not None:
        ctx_fax_number.set(fax_number)
