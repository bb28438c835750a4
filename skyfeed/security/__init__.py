"""skyfeed.security

Credential parsing, verification, and the auth gateway.

Two trust domains, two guards:
- service key (machine to machine)
- session token (user to machine)
"""

from skyfeed.security.audit import AuditLogger
from skyfeed.security.credentials import CredentialExtractor
from skyfeed.security.gateway import ANONYMOUS, Anonymous, Authenticated, AuthGateway, RequestIdentity
from skyfeed.security.jwt import JwtVerifier, StaticKeyResolver
from skyfeed.security.redaction import RedactionFilter, redact_secrets, sanitize_for_log
from skyfeed.security.service_key import ServiceKeyGrant, ServiceKeyVerifier
from skyfeed.security.session import SessionClaims, SessionTokenVerifier

__all__ = [
    "ANONYMOUS",
    "Anonymous",
    "AuditLogger",
    "AuthGateway",
    "Authenticated",
    "CredentialExtractor",
    "JwtVerifier",
    "RedactionFilter",
    "RequestIdentity",
    "ServiceKeyGrant",
    "ServiceKeyVerifier",
    "SessionClaims",
    "SessionTokenVerifier",
    "StaticKeyResolver",
    "redact_secrets",
    "sanitize_for_log",
]
