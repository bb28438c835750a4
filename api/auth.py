from __future__ import annotations

import logging

from fastapi import Depends, Request

from api.deps import get_gateway
from api.errors import ApiError
from skyfeed.core.exceptions import AuthError, ConfigurationError
from skyfeed.security import Authenticated, AuthGateway, RequestIdentity, ServiceKeyGrant

logger = logging.getLogger(__name__)


def require_service_key(
    request: Request,
    gateway: AuthGateway = Depends(get_gateway),
) -> ServiceKeyGrant:
    """Require the shared service key header.

    A missing server-side secret is an operator problem; the caller only ever
    sees a generic bad request for it.
    """

    try:
        grant = gateway.require_service_key(request.headers)
    except ConfigurationError:
        logger.error("service_key_not_configured", extra={"path": request.url.path})
        raise ApiError.bad_request() from None
    except AuthError as e:
        logger.info("service_key_rejected", extra={"path": request.url.path, "reason": type(e).__name__})
        raise ApiError.unauthorized() from None

    logger.debug("service_key_accepted", extra={"path": request.url.path})
    return grant


def require_session(
    request: Request,
    gateway: AuthGateway = Depends(get_gateway),
) -> Authenticated:
    """Require a bearer session token whose audience is this service."""

    try:
        return gateway.require_session(request.headers)
    except AuthError as e:
        logger.info("session_rejected", extra={"path": request.url.path, "reason": type(e).__name__})
        raise ApiError.unauthorized() from None


def optional_session(
    request: Request,
    gateway: AuthGateway = Depends(get_gateway),
) -> RequestIdentity:
    """Resolve the session if there is a good one; otherwise anonymous."""

    identity = gateway.optional_session(request.headers)
    if not isinstance(identity, Authenticated) and identity.reason != "MissingCredential":
        logger.info("session_ignored", extra={"path": request.url.path, "reason": identity.reason})
    return identity


ServiceKeyDep = Depends(require_service_key)
SessionDep = Depends(require_session)
OptionalSessionDep = Depends(optional_session)
