from __future__ import annotations

import sqlite3
from collections.abc import Iterator

from fastapi import Request

from skyfeed.accounts import AccountActionTokenWorkflow, AccountManager
from skyfeed.core.config import Config
from skyfeed.core.database import Store
from skyfeed.feed import FeedSkeleton, VisitorTelemetry
from skyfeed.ingestion import CursorCheckpoint, IngestionQueue
from skyfeed.security import AuditLogger, AuthGateway


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_gateway(request: Request) -> AuthGateway:
    return request.app.state.gateway


def get_telemetry(request: Request) -> VisitorTelemetry:
    return request.app.state.telemetry


def get_feed_skeleton(request: Request) -> FeedSkeleton:
    return request.app.state.skeleton


def get_queue(request: Request) -> IngestionQueue:
    return request.app.state.queue


def get_checkpoint(request: Request) -> CursorCheckpoint:
    return request.app.state.checkpoint


def get_workflow(request: Request) -> AccountActionTokenWorkflow:
    # Built per request so tests (and operators) can swap app.state.mailer.
    state = request.app.state
    accounts = getattr(state, "accounts", None) or AccountManager()
    return AccountActionTokenWorkflow(
        accounts=accounts,
        mailer=state.mailer,
        audit=AuditLogger(component="accounts"),
    )


def _scoped(store: Store) -> Iterator[sqlite3.Connection]:
    with store.connection() as conn:
        yield conn


def get_write_conn(request: Request) -> Iterator[sqlite3.Connection]:
    """One write-store connection for the lifetime of one request."""

    yield from _scoped(request.app.state.write_store)


def get_read_conn(request: Request) -> Iterator[sqlite3.Connection]:
    """One read-replica connection for the lifetime of one request."""

    yield from _scoped(request.app.state.read_store)
