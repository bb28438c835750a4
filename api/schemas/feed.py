from __future__ import annotations

from pydantic import BaseModel


class SkeletonFeedPost(BaseModel):
    post: str


class FeedSkeletonResponse(BaseModel):
    cursor: str | None = None
    feed: list[SkeletonFeedPost]
