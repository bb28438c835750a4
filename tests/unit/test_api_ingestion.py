from __future__ import annotations

import pytest

from api.main import create_app
from tests.unit._api_test_client import SERVICE_KEY_HEADERS, make_client
from tests.unit._doubles import RecordingMailer

A = "at://did:plc:author/app.bsky.feed.post/a"
B = "at://did:plc:author/app.bsky.feed.post/b"


def _rows(app) -> list[dict]:
    with app.state.write_store.connection() as conn:
        return [dict(r) for r in conn.execute("SELECT * FROM post ORDER BY uri")]


@pytest.mark.anyio
async def test_queue_create_and_delete(test_config):
    app = create_app(test_config, mailer=RecordingMailer())

    async with make_client(app) as ac:
        r = await ac.put(
            "/queue/create",
            json=[
                {"uri": A, "cid": "c1", "author": "did:plc:author", "sequence": 10},
                {"uri": B, "cid": "c2", "replyParent": A, "replyRoot": A},
            ],
            headers=SERVICE_KEY_HEADERS,
        )
        assert r.status_code == 200
        assert r.content == b""

        rows = _rows(app)
        assert [row["uri"] for row in rows] == [A, B]
        assert rows[0]["sequence"] == 10
        assert rows[1]["reply_parent"] == A

        gone = "at://did:plc:x/app.bsky.feed.post/gone"
        r = await ac.put("/queue/delete", json=[{"uri": A}, {"uri": gone}], headers=SERVICE_KEY_HEADERS)
        assert r.status_code == 200
        assert [row["uri"] for row in _rows(app)] == [B]


@pytest.mark.anyio
async def test_queue_replay_is_idempotent(test_config):
    app = create_app(test_config, mailer=RecordingMailer())
    body = [{"uri": A, "cid": "c1"}]

    async with make_client(app) as ac:
        for _ in range(3):
            r = await ac.put("/queue/create", json=body, headers=SERVICE_KEY_HEADERS)
            assert r.status_code == 200

    assert len(_rows(app)) == 1


@pytest.mark.anyio
async def test_queue_requires_json(test_config):
    app = create_app(test_config, mailer=RecordingMailer())

    async with make_client(app) as ac:
        r = await ac.put(
            "/queue/create",
            content=b'[{"uri": "at://x", "cid": "c"}]',
            headers={**SERVICE_KEY_HEADERS, "Content-Type": "text/plain"},
        )
        assert r.status_code == 415
        assert r.json() == {"code": "ValidationError", "message": "The request media type is not supported."}

    assert _rows(app) == []


@pytest.mark.anyio
async def test_queue_schema_errors(test_config):
    app = create_app(test_config, mailer=RecordingMailer())

    async with make_client(app) as ac:
        bad = [{"uri": "https://not-at-uri", "cid": "c"}]
        r = await ac.put("/queue/create", json=bad, headers=SERVICE_KEY_HEADERS)
        assert r.status_code == 422
        assert r.json()["code"] == "ValidationError"

        r = await ac.put("/queue/create", json=[{"uri": A}], headers=SERVICE_KEY_HEADERS)
        assert r.status_code == 422

        r = await ac.put(
            "/queue/create",
            content=b"[{not json",
            headers={**SERVICE_KEY_HEADERS, "Content-Type": "application/json"},
        )
        assert r.status_code == 400
        assert r.json() == {"code": "ValidationError", "message": "The request was improperly formed."}

    assert _rows(app) == []


@pytest.mark.anyio
async def test_queue_batch_failure_is_internal_error(test_config):
    app = create_app(test_config, mailer=RecordingMailer())
    with app.state.write_store.connection() as conn, conn:
        conn.execute("DROP TABLE post")

    async with make_client(app) as ac:
        r = await ac.put("/queue/create", json=[{"uri": A, "cid": "c"}], headers=SERVICE_KEY_HEADERS)
        assert r.status_code == 500
        assert r.json() == {"code": "InternalError", "message": "Internal error."}


@pytest.mark.anyio
async def test_cursor_put_and_get(test_config):
    app = create_app(test_config, mailer=RecordingMailer())

    async with make_client(app) as ac:
        r = await ac.get("/cursor", params={"service": "bsky.network"}, headers=SERVICE_KEY_HEADERS)
        assert r.status_code == 404
        assert r.json() == {"code": "NotFoundError", "message": "Not Found"}

        r = await ac.put("/cursor", params={"service": "bsky.network", "sequence": 1234}, headers=SERVICE_KEY_HEADERS)
        assert r.status_code == 200
        assert r.content == b""

        r = await ac.get("/cursor", params={"service": "bsky.network"}, headers=SERVICE_KEY_HEADERS)
        assert r.status_code == 200
        assert r.json() == {"service": "bsky.network", "sequence": 1234}

        r = await ac.put("/cursor", params={"service": "bsky.network", "sequence": 99}, headers=SERVICE_KEY_HEADERS)
        r = await ac.get("/cursor", params={"service": "bsky.network"}, headers=SERVICE_KEY_HEADERS)
        assert r.json()["sequence"] == 99

        r = await ac.put("/cursor", params={"service": "bsky.network", "sequence": -7}, headers=SERVICE_KEY_HEADERS)
        assert r.status_code == 200
        r = await ac.get("/cursor", params={"service": "bsky.network"}, headers=SERVICE_KEY_HEADERS)
        assert r.json()["sequence"] == -7


@pytest.mark.anyio
@pytest.mark.parametrize(
    "params",
    [
        {"service": "bsky.network"},
        {"sequence": 1},
        {"service": "bsky.network", "sequence": 2**63},
        {"service": "bsky.network", "sequence": -(2**63) - 1},
        {"service": "bsky.network", "sequence": "abc"},
        {"service": "", "sequence": 1},
    ],
)
async def test_cursor_put_rejects_bad_params(test_config, params):
    app = create_app(test_config, mailer=RecordingMailer())

    async with make_client(app) as ac:
        r = await ac.put("/cursor", params=params, headers=SERVICE_KEY_HEADERS)
        assert r.status_code == 400
        assert r.json()["code"] == "ValidationError"
