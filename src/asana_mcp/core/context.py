"""Request-scoped context propagated through contextvars.

Each tool invocation gets a correlation ID that is attached to response
metadata and audit entries. The ID lives in a ``ContextVar`` so concurrent
invocations on the same event loop never see each other's values.
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Return the active correlation ID, or an empty string outside a request."""
    return _correlation_id.get()


def generate_correlation_id(prefix: Optional[str] = None) -> str:
    """Generate a new correlation ID, optionally prefixed with a tool name."""
    token = uuid.uuid4().hex[:12]
    if prefix:
        return f"{prefix}_{token}"
    return token


@contextmanager
def sync_request_context(*, correlation_id: Optional[str] = None) -> Iterator[str]:
    """Bind *correlation_id* (or a fresh one) for the duration of the block.

    Works for both sync code and code awaited inside the block, since the
    variable is reset on exit regardless of how the block is left.
    """
    corr_id = correlation_id or generate_correlation_id()
    token = _correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        _correlation_id.reset(token)


__all__ = [
    "generate_correlation_id",
    "get_correlation_id",
    "sync_request_context",
]
