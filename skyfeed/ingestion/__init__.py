"""skyfeed.ingestion

The machine-to-machine side: post create/delete batches and stream cursors.
"""

from skyfeed.ingestion.checkpoint import CursorCheckpoint, CursorState
from skyfeed.ingestion.queue import (
    BatchResult,
    EventKind,
    IngestionEvent,
    IngestionQueue,
    PostReference,
    creates,
    deletes,
)

__all__ = [
    "BatchResult",
    "CursorCheckpoint",
    "CursorState",
    "EventKind",
    "IngestionEvent",
    "IngestionQueue",
    "PostReference",
    "creates",
    "deletes",
]
