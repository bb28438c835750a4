from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.cors import CorsHeadersMiddleware
from api.errors import ApiError, api_error_handler, http_exception_handler, validation_error_handler
from api.routes import get_api_router
from skyfeed import __version__
from skyfeed.accounts import AccountManager
from skyfeed.core.config import Config
from skyfeed.core.database import open_stores
from skyfeed.core.exceptions import ConfigError
from skyfeed.feed import AlgorithmRegistry, FeedSkeleton, VisitorTelemetry
from skyfeed.ingestion import CursorCheckpoint, IngestionQueue
from skyfeed.mail import Mailer, SmtpMailer
from skyfeed.security import (
    AuthGateway,
    CredentialExtractor,
    JwtVerifier,
    RedactionFilter,
    ServiceKeyVerifier,
    SessionTokenVerifier,
    StaticKeyResolver,
)
from skyfeed.security.session import VerifyJwt


def create_app(
    config: Config | None = None,
    *,
    verify_jwt: VerifyJwt | None = None,
    mailer: Mailer | None = None,
) -> FastAPI:
    start = time.monotonic()

    config = config or Config.from_repo_defaults()

    # Refuse to start without an identity or a service key (unless explicitly overridden).
    try:
        config.require_serving()
    except ConfigError as e:
        raise RuntimeError(f"SECURITY ERROR: {e}") from e

    write_store, read_store = open_stores(
        config.database.write_path,
        config.database.replica_path,
        timeout_seconds=config.database.timeout_seconds,
    )

    if verify_jwt is None:
        try:
            resolver = StaticKeyResolver(config.auth.signing_keys)
        except ValueError as e:
            raise RuntimeError(f"auth.signing_keys: {e}") from e
        verify_jwt = JwtVerifier(resolver, leeway_seconds=config.auth.leeway_seconds)

    gateway = AuthGateway(
        extractor=CredentialExtractor(service_key_header=config.api.service_key_header),
        service_keys=ServiceKeyVerifier(config.api.service_key),
        sessions=SessionTokenVerifier(config.service.did, verify_jwt),
    )
    telemetry = VisitorTelemetry(write_store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Let in-flight visitor records land before the stores go away.
        await app.state.telemetry.drain()

    openapi_tags = [
        {"name": "health", "description": "Liveness and version metadata."},
        {"name": "identity", "description": "DID document for this service."},
        {"name": "feed", "description": "Feed skeletons for the served algorithms."},
        {"name": "ingestion", "description": "Post queue and stream cursors (service key)."},
        {"name": "account", "description": "Account-action tokens delivered by email (session token)."},
    ]

    app = FastAPI(
        title="skyfeed",
        description="Feed generator and account-action gateway",
        version=__version__,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    app.state.started_at = start
    app.state.config = config
    app.state.write_store = write_store
    app.state.read_store = read_store
    app.state.gateway = gateway
    app.state.telemetry = telemetry
    app.state.skeleton = FeedSkeleton(AlgorithmRegistry(config.service.publisher_did))
    app.state.queue = IngestionQueue()
    app.state.checkpoint = CursorCheckpoint()
    app.state.accounts = AccountManager()
    app.state.mailer = mailer or SmtpMailer(config.mail)

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.add_middleware(CorsHeadersMiddleware)

    app.include_router(get_api_router())
    return app


def _app_from_repo_config() -> FastAPI:
    from skyfeed.core.logging import configure_logging

    config = Config.from_repo_defaults()
    app = create_app(config)
    configure_logging(config.logging, filters=[RedactionFilter()])
    return app


# Module-level app for uvicorn (e.g. `uvicorn api.main:app`).
# Guarded so test imports don't crash when the service identity isn't configured.
try:
    app = _app_from_repo_config()
except (RuntimeError, ConfigError):
    app = None
