from api.schemas.common import ErrorCode, ErrorResponse
from api.schemas.feed import FeedSkeletonResponse, SkeletonFeedPost
from api.schemas.ingestion import CreateRequest, CursorResponse, DeleteRequest
from api.schemas.well_known import DidDocument, KnownService

__all__ = [
    "CreateRequest",
    "CursorResponse",
    "DeleteRequest",
    "DidDocument",
    "ErrorCode",
    "ErrorResponse",
    "FeedSkeletonResponse",
    "KnownService",
    "SkeletonFeedPost",
]
