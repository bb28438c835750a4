"""skyfeed.security.session

User-to-machine guard: externally signed, time-bounded session tokens.

A verified token becomes `SessionClaims`. Claims are trusted only when their
audience is this service's own DID.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from skyfeed.core.exceptions import InvalidCredential

VerifyJwt = Callable[[str, str], dict[str, Any]]


@dataclass(frozen=True)
class SessionClaims:
    issuer: str
    audience: str
    raw: str = field(repr=False)


class SessionTokenVerifier:
    def __init__(self, service_did: str, verify_jwt: VerifyJwt) -> None:
        self.service_did = service_did
        self._verify_jwt = verify_jwt

    def verify(self, token: str) -> SessionClaims:
        if not self.service_did:
            # Without an audience to pin, no token can be trusted.
            raise InvalidCredential("service identity is not configured")

        payload = self._verify_jwt(token, self.service_did)

        iss = payload.get("iss")
        aud = payload.get("aud")
        if not isinstance(iss, str) or not iss:
            raise InvalidCredential("token has no issuer")
        if aud != self.service_did:
            raise InvalidCredential("audience mismatch")

        return SessionClaims(issuer=iss, audience=aud, raw=token)
