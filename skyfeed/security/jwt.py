"""skyfeed.security.jwt

Session-token verification for inter-service calls, on top of PyJWT.

Supported algorithms: ES256 (P-256) and ES256K (secp256k1), the two curves
used for signing keys on the network.

Which public key may sign for which DID is decided by a `KeyResolver`. The
resolver is injected; this module only picks the key and lets PyJWT check
the signature and the registered claims.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from skyfeed.core.exceptions import InvalidCredential

_CURVES: dict[str, type[ec.EllipticCurve]] = {
    "ES256": ec.SECP256R1,
    "ES256K": ec.SECP256K1,
}


class KeyResolver(Protocol):
    def resolve(self, did: str) -> ec.EllipticCurvePublicKey | None: ...


class StaticKeyResolver:
    """Resolve issuer keys from a fixed DID -> PEM table."""

    def __init__(self, keys: Mapping[str, str]) -> None:
        self._keys: dict[str, ec.EllipticCurvePublicKey] = {}
        for did, pem in keys.items():
            key = serialization.load_pem_public_key(pem.encode("utf-8"))
            if not isinstance(key, ec.EllipticCurvePublicKey):
                raise ValueError(f"signing key for {did} is not an EC public key")
            self._keys[did] = key

    def resolve(self, did: str) -> ec.EllipticCurvePublicKey | None:
        return self._keys.get(did)


class JwtVerifier:
    """Callable `(token, audience) -> payload`.

    Raises `InvalidCredential` for: malformed encoding, unsupported algorithm,
    unknown issuer, bad signature, expired or not-yet-valid token, audience
    mismatch.
    """

    def __init__(self, resolver: KeyResolver, *, leeway_seconds: int = 0) -> None:
        self._resolver = resolver
        self._leeway = leeway_seconds

    def _signing_key(self, token: str) -> tuple[str, ec.EllipticCurvePublicKey]:
        alg = jwt.get_unverified_header(token).get("alg")
        curve = _CURVES.get(str(alg))
        if curve is None:
            raise InvalidCredential(f"unsupported alg: {alg}")

        # The issuer picks the key, so it has to be read before the signature is checked.
        iss = jwt.decode(token, options={"verify_signature": False}).get("iss")
        if not isinstance(iss, str) or not iss:
            raise InvalidCredential("token has no issuer")

        key = self._resolver.resolve(iss)
        if key is None:
            raise InvalidCredential("no signing key for issuer")
        if not isinstance(key.curve, curve):
            raise InvalidCredential("signing key does not match alg")
        return str(alg), key

    def __call__(self, token: str, audience: str) -> dict[str, Any]:
        try:
            alg, key = self._signing_key(token)
            return jwt.decode(
                token,
                key,
                algorithms=[alg],
                audience=audience,
                leeway=self._leeway,
                options={"require": ["exp", "iss"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidCredential(f"token rejected: {type(e).__name__}") from e
