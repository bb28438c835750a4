from __future__ import annotations

from fastapi import APIRouter, Response

router = APIRouter()


@router.options("/{rest:path}", include_in_schema=False)
def all_options(rest: str) -> Response:
    # Exists so preflight requests get a 200 carrying the CORS headers.
    return Response(status_code=200)
