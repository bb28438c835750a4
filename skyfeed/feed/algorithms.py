"""skyfeed.feed.algorithms

The statically known set of feed algorithms.

Feed URIs look like `at://<publisher did>/app.bsky.feed.generator/<rkey>`.
Anything that does not resolve to a registered rkey under the configured
publisher is `UnknownAlgorithm`. Which posts belong in a feed is decided by
the ingestion side; an algorithm here is only a filter over the post table.
"""

from __future__ import annotations

from dataclasses import dataclass

from skyfeed.core.exceptions import UnknownAlgorithm

FEED_GENERATOR_COLLECTION = "app.bsky.feed.generator"


@dataclass(frozen=True)
class Algorithm:
    rkey: str
    description: str
    # SQL predicate over the `post` table, or None for every post
    where: str | None = None


ALGORITHMS: tuple[Algorithm, ...] = (
    Algorithm(rkey="blacksky", description="Every indexed post, newest first."),
    Algorithm(
        rkey="blacksky-op",
        description="Original posts only; replies are left out.",
        where="reply_parent IS NULL",
    ),
)


def feed_uri(publisher_did: str, rkey: str) -> str:
    return f"at://{publisher_did}/{FEED_GENERATOR_COLLECTION}/{rkey}"


class AlgorithmRegistry:
    def __init__(self, publisher_did: str, algorithms: tuple[Algorithm, ...] = ALGORITHMS) -> None:
        self.publisher_did = publisher_did
        self._by_rkey = {a.rkey: a for a in algorithms}

    def uris(self) -> list[str]:
        return [feed_uri(self.publisher_did, rkey) for rkey in self._by_rkey]

    def resolve(self, uri: str | None) -> Algorithm:
        if not uri or not uri.startswith("at://"):
            raise UnknownAlgorithm("feed is not an at:// uri")

        parts = uri[len("at://") :].split("/")
        if len(parts) != 3:
            raise UnknownAlgorithm("feed uri has the wrong shape")

        did, collection, rkey = parts
        if did != self.publisher_did or collection != FEED_GENERATOR_COLLECTION:
            raise UnknownAlgorithm("feed is not published here")

        algo = self._by_rkey.get(rkey)
        if algo is None:
            raise UnknownAlgorithm("no such algorithm")
        return algo
