"""skyfeed.feed.cursor

Continuation tokens for feed skeletons.

A cursor names the last item of the previous page by its ordering key
`(indexed_at_ms, uri)`. It is not an offset: inserts and deletes between
pages do not shift it, and it still means the same thing on a lagging
replica.
"""

from __future__ import annotations

from dataclasses import dataclass

from skyfeed.core.exceptions import InvalidCursor

_SEP = "::"
INT64_MAX = 2**63 - 1


@dataclass(frozen=True, order=True)
class FeedCursor:
    indexed_at: int
    uri: str

    def encode(self) -> str:
        return f"{self.indexed_at}{_SEP}{self.uri}"

    @classmethod
    def decode(cls, raw: str) -> FeedCursor:
        ts, sep, uri = raw.partition(_SEP)
        if not sep or not (ts.isascii() and ts.isdigit()) or not uri.startswith("at://"):
            raise InvalidCursor("malformed cursor")
        try:
            indexed_at = int(ts)
        except ValueError as e:
            raise InvalidCursor("malformed cursor") from e
        # Ordering keys are sqlite INTEGERs.
        if indexed_at > INT64_MAX:
            raise InvalidCursor("cursor out of range")
        return cls(indexed_at=indexed_at, uri=uri)
