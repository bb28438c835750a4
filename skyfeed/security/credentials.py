"""skyfeed.security.credentials

Header parsing. Nothing here decides whether a credential is any good.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class Absent:
    header: str


@dataclass(frozen=True)
class ServiceKeyCandidate:
    value: str = field(repr=False)


@dataclass(frozen=True)
class BearerCandidate:
    token: str = field(repr=False)


@dataclass(frozen=True)
class MalformedBearer:
    """An Authorization header that does not use the bearer scheme."""

    scheme: str


def _get(headers: Mapping[str, str], name: str) -> str | None:
    # Starlette headers are case-insensitive already; plain dicts are not.
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for k, v in headers.items():
            if k.lower() == lowered:
                return v
    return value


@dataclass(frozen=True)
class CredentialExtractor:
    service_key_header: str = "X-RSKY-KEY"
    authorization_header: str = "Authorization"

    def service_key(self, headers: Mapping[str, str]) -> Absent | ServiceKeyCandidate:
        value = _get(headers, self.service_key_header)
        if value is None:
            return Absent(self.service_key_header)
        return ServiceKeyCandidate(value)

    def bearer(self, headers: Mapping[str, str]) -> Absent | BearerCandidate | MalformedBearer:
        value = _get(headers, self.authorization_header)
        if value is None:
            return Absent(self.authorization_header)

        parts = value.split(" ", 1)
        if len(parts) != 2 or parts[0].lower() != BEARER_SCHEME:
            return MalformedBearer(scheme=parts[0][:16])

        token = parts[1].strip()
        if not token:
            return MalformedBearer(scheme=parts[0])
        return BearerCandidate(token)
