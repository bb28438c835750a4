"""skyfeed.core.time

Post ordering keys are integer milliseconds since the Unix epoch.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def to_ms(dt: datetime) -> int:
    """Epoch milliseconds for `dt`, truncated. Naive values are read as UTC."""

    aware = dt if dt.tzinfo is not None else dt.replace(tzinfo=UTC)
    return (aware - _EPOCH) // _ONE_MS


def from_ms(value: int) -> datetime:
    return _EPOCH + value * _ONE_MS
