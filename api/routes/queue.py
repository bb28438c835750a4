from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter, Depends, Request, Response

from api.auth import ServiceKeyDep
from api.deps import get_queue, get_write_conn
from api.errors import ApiError
from api.schemas.ingestion import CreateRequest, DeleteRequest
from skyfeed.core.exceptions import SkyfeedError
from skyfeed.ingestion import IngestionEvent, IngestionQueue, creates, deletes

logger = logging.getLogger(__name__)


def require_json(request: Request) -> None:
    content_type = request.headers.get("content-type", "")
    media = content_type.split(";", 1)[0].strip().lower()
    if media != "application/json" and not media.endswith("+json"):
        raise ApiError.unsupported_media()


router = APIRouter(prefix="/queue", dependencies=[ServiceKeyDep, Depends(require_json)])


def _apply(queue: IngestionQueue, conn: sqlite3.Connection, events: list[IngestionEvent], kind: str) -> Response:
    try:
        queue.apply_batch(conn, events)
    except SkyfeedError:
        logger.exception("queue_batch_failed", extra={"kind": kind, "events": len(events)})
        raise ApiError.internal() from None
    return Response(status_code=200)


@router.put("/create")
def queue_creation(
    body: list[CreateRequest],
    queue: IngestionQueue = Depends(get_queue),
    conn: sqlite3.Connection = Depends(get_write_conn),
) -> Response:
    return _apply(queue, conn, creates(r.to_reference() for r in body), "create")


@router.put("/delete")
def queue_deletion(
    body: list[DeleteRequest],
    queue: IngestionQueue = Depends(get_queue),
    conn: sqlite3.Connection = Depends(get_write_conn),
) -> Response:
    return _apply(queue, conn, deletes(r.uri for r in body), "delete")
