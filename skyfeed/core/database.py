"""skyfeed.core.database

Two stores, one schema.

The write store is authoritative. The read store is a replica that may lag
it; serving reads only from the replica. Locally both can point at the same
sqlite file.

Connections are per request: `Store.connection()` opens one and always
closes it, whatever happens inside the block.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from skyfeed.core.exceptions import StoreError

SCHEMA = """
-- ============================================================
-- Posts (feed skeleton source)
-- ============================================================
CREATE TABLE IF NOT EXISTS post (
    uri TEXT PRIMARY KEY,
    cid TEXT NOT NULL,
    author TEXT,
    reply_parent TEXT,
    reply_root TEXT,
    sequence INTEGER,
    indexed_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_post_order ON post(indexed_at DESC, uri DESC);

-- ============================================================
-- Subscription cursors (one row per upstream service)
-- ============================================================
CREATE TABLE IF NOT EXISTS sub_state (
    service TEXT PRIMARY KEY,
    cursor INTEGER NOT NULL
);

-- ============================================================
-- Visitors (append-only)
-- ============================================================
CREATE TABLE IF NOT EXISTS visitor (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    did TEXT NOT NULL,
    web TEXT NOT NULL,
    visited_at TEXT DEFAULT (datetime('now'))
);

CREATE INDEX IF NOT EXISTS idx_visitor_did ON visitor(did);

-- ============================================================
-- Accounts
-- ============================================================
CREATE TABLE IF NOT EXISTS account (
    did TEXT PRIMARY KEY,
    email TEXT,
    deactivated_at TEXT,
    takedown_ref TEXT,
    created_at TEXT DEFAULT (datetime('now'))
);

-- ============================================================
-- Email tokens (one live token per purpose + did)
-- ============================================================
CREATE TABLE IF NOT EXISTS email_token (
    purpose TEXT NOT NULL,
    did TEXT NOT NULL REFERENCES account(did),
    token TEXT NOT NULL,
    requested_at TEXT NOT NULL,
    PRIMARY KEY (purpose, did)
);

-- ============================================================
-- Audit Log
-- ============================================================
CREATE TABLE IF NOT EXISTS audit_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    ts TEXT DEFAULT (datetime('now')),
    action TEXT NOT NULL,
    actor TEXT,
    component TEXT,
    details TEXT
);

CREATE INDEX IF NOT EXISTS idx_audit_ts ON audit_log(ts);
CREATE INDEX IF NOT EXISTS idx_audit_action ON audit_log(action);
"""


@dataclass
class Store:
    """A sqlite-backed store handing out request-scoped connections."""

    db_path: Path
    read_only: bool = False
    timeout_seconds: float = 30.0

    def __post_init__(self) -> None:
        self.db_path = Path(self.db_path)
        if not self.read_only:
            self.init_schema()

    def init_schema(self) -> None:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._open(read_only=False)
        try:
            with conn:
                conn.executescript(SCHEMA)
        finally:
            conn.close()

    def _open(self, *, read_only: bool) -> sqlite3.Connection:
        try:
            if read_only:
                conn = sqlite3.connect(
                    f"file:{self.db_path}?mode=ro",
                    uri=True,
                    timeout=self.timeout_seconds,
                    check_same_thread=False,
                )
            else:
                conn = sqlite3.connect(
                    self.db_path,
                    timeout=self.timeout_seconds,
                    check_same_thread=False,
                )
        except sqlite3.Error as e:
            raise StoreError(f"cannot open {self.db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._open(read_only=self.read_only)
        try:
            yield conn
        finally:
            conn.close()


def open_stores(write_path: Path, read_path: Path, *, timeout_seconds: float = 30.0) -> tuple[Store, Store]:
    """Return (write_store, read_store).

    The write store creates the schema. When the replica is a separate local
    file it gets the schema too, so a fresh checkout can serve.
    """

    write = Store(write_path, timeout_seconds=timeout_seconds)
    if Path(read_path) != Path(write_path):
        Store(read_path, timeout_seconds=timeout_seconds)
    read = Store(read_path, read_only=True, timeout_seconds=timeout_seconds)
    return write, read
