from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class ErrorCode(StrEnum):
    VALIDATION = "ValidationError"
    NOT_FOUND = "NotFoundError"
    UNDEFINED_ENDPOINT = "UndefinedEndpoint"
    INTERNAL = "InternalError"
    UNAUTHORIZED = "Unauthorized"


class ErrorResponse(BaseModel):
    code: ErrorCode
    message: str
