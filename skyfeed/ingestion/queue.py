"""skyfeed.ingestion.queue

Applies create/delete batches from the upstream event stream to the write
store.

Rules:
- one batch, one transaction: all of it lands or none of it does
- events apply in batch order, so for a repeated uri the last event wins
- create of a present uri and delete of an absent uri are no-ops, which makes
  replaying an overlap after a cursor restore harmless
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from skyfeed.core.exceptions import IngestionError
from skyfeed.core.time import to_ms, utc_now

logger = logging.getLogger(__name__)


class EventKind(StrEnum):
    CREATE = "create"
    DELETE = "delete"


@dataclass(frozen=True)
class PostReference:
    uri: str
    cid: str = ""
    author: str | None = None
    reply_parent: str | None = None
    reply_root: str | None = None
    sequence: int | None = None
    indexed_at: datetime | None = None


@dataclass(frozen=True)
class IngestionEvent:
    kind: EventKind
    reference: PostReference


@dataclass(frozen=True)
class BatchResult:
    created: int = 0
    deleted: int = 0


def creates(references: Iterable[PostReference]) -> list[IngestionEvent]:
    return [IngestionEvent(EventKind.CREATE, ref) for ref in references]


def deletes(uris: Iterable[str]) -> list[IngestionEvent]:
    return [IngestionEvent(EventKind.DELETE, PostReference(uri=uri)) for uri in uris]


class IngestionQueue:
    def apply_batch(self, conn: sqlite3.Connection, events: Sequence[IngestionEvent]) -> BatchResult:
        created = 0
        deleted = 0
        now_ms = to_ms(utc_now())

        try:
            with conn:
                for ev in events:
                    ref = ev.reference
                    if ev.kind is EventKind.CREATE:
                        cur = conn.execute(
                            """
                            INSERT INTO post (
                                uri, cid, author, reply_parent, reply_root, sequence, indexed_at
                            ) VALUES (?, ?, ?, ?, ?, ?, ?)
                            ON CONFLICT(uri) DO NOTHING
                            """,
                            (
                                ref.uri,
                                ref.cid,
                                ref.author,
                                ref.reply_parent,
                                ref.reply_root,
                                ref.sequence,
                                to_ms(ref.indexed_at) if ref.indexed_at else now_ms,
                            ),
                        )
                        created += max(cur.rowcount, 0)
                    else:
                        cur = conn.execute("DELETE FROM post WHERE uri = ?", (ref.uri,))
                        deleted += max(cur.rowcount, 0)
        except sqlite3.Error as e:
            logger.error("ingestion_batch_rolled_back", extra={"events": len(events), "error": str(e)})
            raise IngestionError(f"batch of {len(events)} rolled back: {e}") from e

        result = BatchResult(created=created, deleted=deleted)
        logger.info(
            "ingestion_batch_applied",
            extra={"events": len(events), "posts_created": result.created, "posts_deleted": result.deleted},
        )
        return result
