"""skyfeed.core.logging

Process-wide logging setup.

Modules log snake_case event names and put context in `extra`. This module
decides how those records look on the way out: plain text for a terminal,
JSON lines (python-json-logger) for a collector.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from typing import Any

from pythonjsonlogger import jsonlogger

from skyfeed.core.config import LoggingConfig

JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
JSON_RENAMES = {"asctime": "ts", "levelname": "level", "name": "logger", "message": "event"}

# Attributes every LogRecord carries; anything else arrived through `extra`.
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED and not k.startswith("_")}


def json_formatter() -> logging.Formatter:
    return jsonlogger.JsonFormatter(JSON_FORMAT, rename_fields=JSON_RENAMES)


class TextFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extra = extra_fields(record)
        if extra:
            ctx = " ".join(f"{k}={v}" for k, v in sorted(extra.items()))
            line = f"{line} {ctx}"
        return line


def configure_logging(cfg: LoggingConfig, *, filters: Iterable[logging.Filter] = ()) -> None:
    """Install one stream handler on the root logger. Safe to call twice.

    `filters` are attached to the handler, so they see every record it emits.
    """

    root = logging.getLogger()
    root.setLevel(cfg.level.upper())

    for h in list(root.handlers):
        if getattr(h, "_skyfeed", False):
            root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(json_formatter() if cfg.json_output else TextFormatter())
    for f in filters:
        handler.addFilter(f)
    handler._skyfeed = True  # type: ignore[attr-defined]
    root.addHandler(handler)
