"""skyfeed.feed

Feed skeleton serving and visitor telemetry.
"""

from skyfeed.feed.algorithms import ALGORITHMS, Algorithm, AlgorithmRegistry, feed_uri
from skyfeed.feed.cursor import FeedCursor
from skyfeed.feed.skeleton import DEFAULT_LIMIT, MAX_LIMIT, FeedQuery, FeedSkeleton, SkeletonPage, clamp_limit
from skyfeed.feed.telemetry import VisitorTelemetry, visit_for

__all__ = [
    "ALGORITHMS",
    "Algorithm",
    "AlgorithmRegistry",
    "DEFAULT_LIMIT",
    "FeedCursor",
    "FeedQuery",
    "FeedSkeleton",
    "MAX_LIMIT",
    "SkeletonPage",
    "VisitorTelemetry",
    "clamp_limit",
    "feed_uri",
    "visit_for",
]
