from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from api.errors import MSG_INTERNAL, error_response
from api.schemas.common import ErrorCode

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, PATCH, OPTIONS, DELETE",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Allow-Credentials": "true",
}


class CorsHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp CORS headers on every response, errors included.

    Anything that escaped the exception handlers becomes the generic 500
    envelope here, so it gets the headers too.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("unhandled_request_error", extra={"path": request.url.path, "method": request.method})
            response = error_response(500, ErrorCode.INTERNAL, MSG_INTERNAL)

        for k, v in CORS_HEADERS.items():
            response.headers[k] = v
        return response
