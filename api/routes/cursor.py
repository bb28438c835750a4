from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter, Depends, Query, Response

from api.auth import ServiceKeyDep
from api.deps import get_checkpoint, get_read_conn, get_write_conn
from api.errors import ApiError
from api.schemas.ingestion import CursorResponse
from skyfeed.core.exceptions import NotFound, SkyfeedError
from skyfeed.ingestion import CursorCheckpoint

logger = logging.getLogger(__name__)

INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

router = APIRouter(prefix="/cursor", dependencies=[ServiceKeyDep])


@router.put("")
def update_cursor(
    service: str = Query(..., min_length=1),
    sequence: int = Query(..., ge=INT64_MIN, le=INT64_MAX),
    checkpoint: CursorCheckpoint = Depends(get_checkpoint),
    conn: sqlite3.Connection = Depends(get_write_conn),
) -> Response:
    try:
        checkpoint.set_cursor(conn, service, sequence)
    except SkyfeedError:
        logger.exception("cursor_update_failed", extra={"service": service})
        raise ApiError.internal() from None
    return Response(status_code=200)


@router.get("", response_model=CursorResponse)
def get_cursor(
    service: str = Query(..., min_length=1),
    checkpoint: CursorCheckpoint = Depends(get_checkpoint),
    conn: sqlite3.Connection = Depends(get_read_conn),
) -> CursorResponse:
    try:
        state = checkpoint.get_cursor(conn, service)
    except NotFound:
        raise ApiError.not_found() from None
    except SkyfeedError:
        logger.exception("cursor_read_failed", extra={"service": service})
        raise ApiError.not_found() from None
    return CursorResponse(service=state.service, sequence=state.sequence)
