"""skyfeed.core

Core primitives: configuration, errors, stores, time.

Everything else depends on this package; it depends on nothing else here.
"""

from .config import Config
from .database import Store
from .exceptions import SkyfeedError
from .time import from_ms, to_ms, utc_now

__all__ = [
    "Config",
    "SkyfeedError",
    "Store",
    "from_ms",
    "to_ms",
    "utc_now",
]
