"""skyfeed.security.service_key

Machine-to-machine guard: one operator-issued secret, compared in constant time.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass, field

from skyfeed.core.exceptions import ConfigurationError, InvalidCredential, MissingCredential
from skyfeed.security.credentials import Absent, ServiceKeyCandidate


@dataclass(frozen=True)
class ServiceKeyGrant:
    key: str = field(repr=False)


class ServiceKeyVerifier:
    """Checks a candidate against the process-wide shared secret.

    Never consults a store.
    """

    def __init__(self, secret: str) -> None:
        self._secret = secret

    @property
    def configured(self) -> bool:
        return bool(self._secret)

    def verify(self, candidate: Absent | ServiceKeyCandidate) -> ServiceKeyGrant:
        if not self._secret:
            raise ConfigurationError("service key is not configured")

        if isinstance(candidate, Absent):
            raise MissingCredential(f"missing {candidate.header} header")

        if not hmac.compare_digest(candidate.value.encode("utf-8"), self._secret.encode("utf-8")):
            raise InvalidCredential("service key mismatch")

        return ServiceKeyGrant(key=candidate.value)
