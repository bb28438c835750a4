"""skyfeed.feed.skeleton

Feed skeleton serving: a bounded, cursor-paginated list of post URIs for a
named algorithm.

Reads come from the read replica only. Ordering is `indexed_at DESC, uri DESC`;
the uri breaks ties, so pages never overlap and never skip.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any

from skyfeed.core.exceptions import ServingError
from skyfeed.feed.algorithms import AlgorithmRegistry
from skyfeed.feed.cursor import FeedCursor

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


def clamp_limit(limit: int | None) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return max(1, min(int(limit), MAX_LIMIT))


@dataclass(frozen=True)
class FeedQuery:
    feed: str | None
    limit: int | None = None
    cursor: str | None = None


@dataclass(frozen=True)
class SkeletonPage:
    posts: list[str] = field(default_factory=list)
    cursor: str | None = None

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {"feed": [{"post": uri} for uri in self.posts]}
        if self.cursor is not None:
            body["cursor"] = self.cursor
        return body


class FeedSkeleton:
    def __init__(self, registry: AlgorithmRegistry) -> None:
        self.registry = registry

    def serve(self, conn: sqlite3.Connection, query: FeedQuery) -> SkeletonPage:
        algo = self.registry.resolve(query.feed)
        limit = clamp_limit(query.limit)
        after = FeedCursor.decode(query.cursor) if query.cursor else None

        q = "SELECT uri, indexed_at FROM post WHERE 1=1"
        params: list[Any] = []
        if algo.where:
            q += f" AND ({algo.where})"
        if after is not None:
            q += " AND (indexed_at < ? OR (indexed_at = ? AND uri < ?))"
            params.extend([after.indexed_at, after.indexed_at, after.uri])
        q += " ORDER BY indexed_at DESC, uri DESC LIMIT ?"
        params.append(limit)

        try:
            rows = conn.execute(q, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise ServingError(f"skeleton query failed: {e}") from e

        posts = [str(r["uri"]) for r in rows]
        cursor = None
        if len(rows) == limit:
            last = rows[-1]
            cursor = FeedCursor(indexed_at=int(last["indexed_at"]), uri=str(last["uri"])).encode()
        return SkeletonPage(posts=posts, cursor=cursor)
