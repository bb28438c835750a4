from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter, Depends, Query

from api.auth import OptionalSessionDep
from api.deps import get_config, get_feed_skeleton, get_read_conn, get_telemetry
from api.errors import ApiError
from api.schemas.feed import FeedSkeletonResponse, SkeletonFeedPost
from skyfeed.core.config import Config
from skyfeed.core.exceptions import InvalidCursor, SkyfeedError, UnknownAlgorithm
from skyfeed.feed import FeedQuery, FeedSkeleton, VisitorTelemetry
from skyfeed.security import RequestIdentity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/xrpc")


async def record_visit(
    identity: RequestIdentity = OptionalSessionDep,
    telemetry: VisitorTelemetry = Depends(get_telemetry),
    config: Config = Depends(get_config),
) -> RequestIdentity:
    # Fire and forget: scheduled before serving, never awaited by it.
    telemetry.schedule(identity, config.service.did)
    return identity


@router.get(
    "/app.bsky.feed.getFeedSkeleton",
    response_model=FeedSkeletonResponse,
    response_model_exclude_none=True,
)
def get_feed_skeleton_route(
    feed: str | None = Query(default=None, description="at:// uri of the feed generator record"),
    limit: int | None = Query(default=None),
    cursor: str | None = Query(default=None),
    identity: RequestIdentity = Depends(record_visit),
    skeleton: FeedSkeleton = Depends(get_feed_skeleton),
    conn: sqlite3.Connection = Depends(get_read_conn),
) -> FeedSkeletonResponse:
    try:
        page = skeleton.serve(conn, FeedQuery(feed=feed, limit=limit, cursor=cursor))
    except UnknownAlgorithm as e:
        logger.info("feed_unknown_algorithm", extra={"feed": feed, "reason": str(e)})
        raise ApiError.not_found() from None
    except InvalidCursor:
        logger.info("feed_invalid_cursor", extra={"feed": feed})
        raise ApiError.bad_request() from None
    except SkyfeedError:
        logger.exception("feed_skeleton_failed", extra={"feed": feed})
        raise ApiError.internal() from None

    return FeedSkeletonResponse(
        cursor=page.cursor,
        feed=[SkeletonFeedPost(post=uri) for uri in page.posts],
    )
