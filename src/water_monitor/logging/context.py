"""Owner-scoped log context.

Records emitted inside ``owner_context`` carry ``owner_id``, both in the
rendered output and in the ring buffer behind ``GET /api/logs``.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog

OWNER_KEY = "owner_id"


@contextmanager
def owner_context(owner_id: str, **extra: object) -> Iterator[None]:
    """Bind *owner_id* (plus any extra fields) for the enclosed block."""
    tokens = structlog.contextvars.bind_contextvars(**{OWNER_KEY: owner_id}, **extra)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


def current_owner() -> str | None:
    """Owner bound in the current task, or None outside any request/import."""
    return structlog.contextvars.get_contextvars().get(OWNER_KEY)
