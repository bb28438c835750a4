from __future__ import annotations

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.schemas.common import ErrorCode, ErrorResponse

logger = logging.getLogger(__name__)

# Callers get one of these, never the underlying error text.
MSG_BAD_REQUEST = "The request was improperly formed."
MSG_UNPROCESSABLE = "The request was well-formed but was unable to be followed due to semantic errors."
MSG_UNSUPPORTED_MEDIA = "The request media type is not supported."
MSG_UNAUTHORIZED = "Request could not be processed."
MSG_NOT_FOUND = "Not Found"
MSG_INTERNAL = "Internal error."


class ApiError(Exception):
    def __init__(self, code: ErrorCode, message: str, status: int = 400) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = status

    @classmethod
    def bad_request(cls) -> ApiError:
        return cls(ErrorCode.VALIDATION, MSG_BAD_REQUEST, status=400)

    @classmethod
    def unauthorized(cls) -> ApiError:
        return cls(ErrorCode.UNAUTHORIZED, MSG_UNAUTHORIZED, status=401)

    @classmethod
    def not_found(cls) -> ApiError:
        return cls(ErrorCode.NOT_FOUND, MSG_NOT_FOUND, status=404)

    @classmethod
    def unsupported_media(cls) -> ApiError:
        return cls(ErrorCode.VALIDATION, MSG_UNSUPPORTED_MEDIA, status=415)

    @classmethod
    def internal(cls) -> ApiError:
        return cls(ErrorCode.INTERNAL, MSG_INTERNAL, status=500)


def error_response(status: int, code: ErrorCode, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=ErrorResponse(code=code, message=message).model_dump(mode="json"))


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status, exc.code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    status = exc.status_code
    if status in (404, 405):
        # The OPTIONS catch-all makes every path exist for some method, so an
        # unknown route surfaces as 405. Both mean "no such endpoint".
        return error_response(404, ErrorCode.UNDEFINED_ENDPOINT, MSG_NOT_FOUND)
    if status in (401, 403):
        return error_response(status, ErrorCode.UNAUTHORIZED, MSG_UNAUTHORIZED)
    if status == 415:
        return error_response(status, ErrorCode.VALIDATION, MSG_UNSUPPORTED_MEDIA)
    if status == 422:
        return error_response(status, ErrorCode.VALIDATION, MSG_UNPROCESSABLE)
    if status >= 500:
        return error_response(status, ErrorCode.INTERNAL, MSG_INTERNAL)
    return error_response(status, ErrorCode.VALIDATION, MSG_BAD_REQUEST)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.info(
        "request_validation_failed",
        extra={"path": request.url.path, "locations": [list(e.get("loc", ())) for e in errors]},
    )
    # A body that parsed but does not fit the schema is a semantic error;
    # bad query strings and undecodable bodies are malformed requests.
    semantic = any(e.get("loc", ("",))[0] == "body" and e.get("type") != "json_invalid" for e in errors)
    if semantic:
        return error_response(422, ErrorCode.VALIDATION, MSG_UNPROCESSABLE)
    return error_response(400, ErrorCode.VALIDATION, MSG_BAD_REQUEST)
