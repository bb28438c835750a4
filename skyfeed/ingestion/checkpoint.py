"""skyfeed.ingestion.checkpoint

Per-service subscription cursors.

Writes go to the authoritative store; reads come from the replica. A read
right after a write may therefore see an older value (or none). Consumers
resuming a stream replay a small overlap, which the queue tolerates.

Last writer wins. Monotonicity is the caller's convention, not enforced here.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass

from skyfeed.core.exceptions import NotFound, StoreError


@dataclass(frozen=True)
class CursorState:
    service: str
    sequence: int


class CursorCheckpoint:
    def set_cursor(self, conn: sqlite3.Connection, service: str, sequence: int) -> CursorState:
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO sub_state (service, cursor) VALUES (?, ?)
                    ON CONFLICT(service) DO UPDATE SET cursor = excluded.cursor
                    """,
                    (service, int(sequence)),
                )
        except sqlite3.Error as e:
            raise StoreError(f"cursor update failed for {service}: {e}") from e
        return CursorState(service=service, sequence=int(sequence))

    def get_cursor(self, conn: sqlite3.Connection, service: str) -> CursorState:
        try:
            row = conn.execute("SELECT service, cursor FROM sub_state WHERE service = ?", (service,)).fetchone()
        except sqlite3.Error as e:
            raise StoreError(f"cursor read failed for {service}: {e}") from e
        if row is None:
            raise NotFound(f"no cursor for {service}")
        return CursorState(service=str(row["service"]), sequence=int(row["cursor"]))
