"""skyfeed.feed.telemetry

Visitor telemetry: one append-only row per feed skeleton request.

Best effort by contract. Recording runs as a detached task; nobody awaits it
before responding, and its failure is logged and dropped. Serving must never
depend on this table being writable.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3

import anyio.to_thread

from skyfeed.core.database import Store
from skyfeed.core.exceptions import TelemetryError
from skyfeed.security.gateway import ANONYMOUS, Authenticated, RequestIdentity

logger = logging.getLogger(__name__)


def visit_for(identity: RequestIdentity, service_did: str) -> tuple[str, str]:
    """Return (visitor, service) for a resolved request identity.

    Anonymous visits are attributed to this service itself.
    """

    if isinstance(identity, Authenticated):
        return identity.claims.issuer, identity.claims.audience
    return ANONYMOUS, service_did


class VisitorTelemetry:
    def __init__(self, store: Store) -> None:
        self.store = store
        self._tasks: set[asyncio.Task[None]] = set()

    def record(self, visitor: str, service: str) -> None:
        try:
            with self.store.connection() as conn, conn:
                conn.execute("INSERT INTO visitor (did, web) VALUES (?, ?)", (visitor, service))
        except sqlite3.Error as e:
            raise TelemetryError(f"visitor insert failed: {e}") from e

    def schedule(self, identity: RequestIdentity, service_did: str) -> asyncio.Task[None]:
        visitor, service = visit_for(identity, service_did)
        task = asyncio.create_task(anyio.to_thread.run_sync(self.record, visitor, service))
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                "visitor_record_failed",
                extra={"error": str(exc), "error_type": type(exc).__name__},
            )

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for outstanding records. Failures stay in the log."""

        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
