from __future__ import annotations

import time
from pathlib import Path

from fastapi import APIRouter, Request
from pydantic import BaseModel

from skyfeed import __version__

router = APIRouter()


class HealthResponse(BaseModel):
    version: str
    uptime_seconds: float
    write_store_bytes: int
    replica_separate: bool


def _size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


@router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    state = request.app.state
    started_at = float(getattr(state, "started_at", time.monotonic()))
    return HealthResponse(
        version=__version__,
        uptime_seconds=time.monotonic() - started_at,
        write_store_bytes=_size(state.write_store.db_path),
        replica_separate=state.read_store.db_path != state.write_store.db_path,
    )
