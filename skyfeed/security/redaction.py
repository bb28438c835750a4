"""skyfeed.security.redaction

Keep credentials out of logs and the audit table.

Two passes: mapping keys that name a credential are blanked outright, and
free text is scrubbed for bearer tokens, compact JWS strings, service-key
assignments and email tokens.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from skyfeed.core.logging import extra_fields

MASK = "[REDACTED]"

_SCRUBBERS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(?i)\b(service[_-]?key|x-rsky-key|secret|password)(\s*[:=]\s*)[^\s\"',]+"), rf"\1\2{MASK}"),
    (re.compile(r"(?i)\bbearer\s+\S+"), f"Bearer {MASK}"),
    (re.compile(r"\beyJ[\w-]*\.[\w-]+\.[\w-]+"), MASK),
    (re.compile(r"\b[A-Z2-7]{5}-[A-Z2-7]{5}\b"), MASK),
)

_CREDENTIAL_KEYS = frozenset(
    {
        "authorization",
        "password",
        "secret",
        "service_key",
        "signing_keys",
        "token",
        "x-rsky-key",
    }
)


def redact_secrets(text: str) -> str:
    for pattern, replacement in _SCRUBBERS:
        text = pattern.sub(replacement, text)
    return text


def _scrub(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: MASK if str(k).lower() in _CREDENTIAL_KEYS else _scrub(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_scrub(v) for v in value]
    if isinstance(value, str):
        return redact_secrets(value)
    return value


def sanitize_for_log(data: Mapping[str, Any]) -> dict[str, Any]:
    """Return a scrubbed copy of `data`; the input is left untouched."""
    return _scrub(data)


class RedactionFilter(logging.Filter):
    """Scrub the rendered message and every `extra` field before a handler formats it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = redact_secrets(record.getMessage())
        record.args = None
        for key, value in extra_fields(record).items():
            setattr(record, key, MASK if key.lower() in _CREDENTIAL_KEYS else _scrub(value))
        return True
