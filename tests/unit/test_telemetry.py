from __future__ import annotations

import logging
from pathlib import Path

import pytest

from skyfeed.core.database import Store
from skyfeed.core.exceptions import TelemetryError
from skyfeed.feed import VisitorTelemetry, visit_for
from skyfeed.security import ANONYMOUS, Anonymous, Authenticated, SessionClaims
from tests.unit._tokens import ISSUER_DID, SERVICE_DID


def _visitors(store: Store) -> list[tuple[str, str]]:
    with store.connection() as conn:
        return [(r["did"], r["web"]) for r in conn.execute("SELECT did, web FROM visitor ORDER BY id")]


def test_visit_for_anonymous_is_attributed_to_service() -> None:
    assert visit_for(Anonymous(), SERVICE_DID) == (ANONYMOUS, SERVICE_DID)
    assert visit_for(Anonymous(reason="InvalidCredential"), SERVICE_DID) == (ANONYMOUS, SERVICE_DID)


def test_visit_for_authenticated_uses_claims() -> None:
    identity = Authenticated(SessionClaims(issuer=ISSUER_DID, audience=SERVICE_DID, raw="t"))
    assert visit_for(identity, "did:web:ignored.example") == (ISSUER_DID, SERVICE_DID)


def test_record_inserts_one_row(temp_dir: Path) -> None:
    store = Store(temp_dir / "t.db")
    VisitorTelemetry(store).record(ISSUER_DID, SERVICE_DID)
    assert _visitors(store) == [(ISSUER_DID, SERVICE_DID)]


def test_record_failure_raises_telemetry_error(temp_dir: Path) -> None:
    store = Store(temp_dir / "t.db")
    with store.connection() as conn, conn:
        conn.execute("DROP TABLE visitor")
    with pytest.raises(TelemetryError):
        VisitorTelemetry(store).record(ISSUER_DID, SERVICE_DID)


@pytest.mark.anyio
async def test_schedule_records_in_background(temp_dir: Path) -> None:
    store = Store(temp_dir / "t.db")
    telemetry = VisitorTelemetry(store)

    telemetry.schedule(Anonymous(), SERVICE_DID)
    await telemetry.drain()

    assert telemetry.pending == 0
    assert _visitors(store) == [(ANONYMOUS, SERVICE_DID)]


@pytest.mark.anyio
async def test_schedule_failure_is_logged_not_raised(temp_dir: Path, caplog: pytest.LogCaptureFixture) -> None:
    store = Store(temp_dir / "t.db")
    with store.connection() as conn, conn:
        conn.execute("DROP TABLE visitor")
    telemetry = VisitorTelemetry(store)

    with caplog.at_level(logging.WARNING, logger="skyfeed.feed.telemetry"):
        telemetry.schedule(Anonymous(), SERVICE_DID)
        await telemetry.drain()

    assert any(r.getMessage() == "visitor_record_failed" for r in caplog.records)
