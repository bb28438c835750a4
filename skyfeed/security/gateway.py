"""skyfeed.security.gateway

Two orthogonal guards over one header parser.

- service key: upstream machines (ingestion, cursor tracking)
- session token: end users, optionally required

An endpoint declares which guard(s) it needs. The gateway only classifies and
verifies; turning a rejection into an HTTP response is the API layer's job.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from skyfeed.core.exceptions import AuthError, InvalidCredential, MissingCredential
from skyfeed.security.credentials import Absent, CredentialExtractor, MalformedBearer
from skyfeed.security.service_key import ServiceKeyGrant, ServiceKeyVerifier
from skyfeed.security.session import SessionClaims, SessionTokenVerifier

ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class Authenticated:
    claims: SessionClaims

    @property
    def did(self) -> str:
        return self.claims.issuer


@dataclass(frozen=True)
class Anonymous:
    reason: str | None = None


RequestIdentity = Authenticated | Anonymous


class AuthGateway:
    def __init__(
        self,
        *,
        extractor: CredentialExtractor,
        service_keys: ServiceKeyVerifier,
        sessions: SessionTokenVerifier,
    ) -> None:
        self.extractor = extractor
        self.service_keys = service_keys
        self.sessions = sessions

    @property
    def service_did(self) -> str:
        return self.sessions.service_did

    def require_service_key(self, headers: Mapping[str, str]) -> ServiceKeyGrant:
        return self.service_keys.verify(self.extractor.service_key(headers))

    def require_session(self, headers: Mapping[str, str]) -> Authenticated:
        candidate = self.extractor.bearer(headers)
        if isinstance(candidate, Absent):
            raise MissingCredential(f"missing {candidate.header} header")
        if isinstance(candidate, MalformedBearer):
            raise InvalidCredential("authorization scheme is not bearer")
        return Authenticated(self.sessions.verify(candidate.token))

    def optional_session(self, headers: Mapping[str, str]) -> RequestIdentity:
        try:
            return self.require_session(headers)
        except AuthError as e:
            return Anonymous(reason=type(e).__name__)
