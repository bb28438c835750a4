"""skyfeed.security.audit

Audit trail for security-relevant actions, such as email-token issuance.

Rows record who did what and when, plus scrubbed details. Secrets never land
in the table.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from typing import Any

from skyfeed.security.redaction import sanitize_for_log

_COLUMNS = ("ts", "action", "actor", "component", "details")


@dataclass
class AuditLogger:
    """Writes to the `audit_log` table on the caller's connection."""

    component: str = "security"

    def log_action(
        self,
        conn: sqlite3.Connection,
        action: str,
        actor: str | None,
        details: dict[str, Any] | None = None,
    ) -> None:
        payload = json.dumps(sanitize_for_log(details or {}), sort_keys=True)
        with conn:
            conn.execute(
                "INSERT INTO audit_log (action, actor, component, details) VALUES (?, ?, ?, ?)",
                (action, actor, self.component, payload),
            )

    def query(
        self,
        conn: sqlite3.Connection,
        action_type: str | None = None,
        actor: str | None = None,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """Most recent entries first, optionally filtered by action and actor."""

        filters = {"action": action_type, "actor": actor}
        clauses = [f"{col} = ?" for col, val in filters.items() if val is not None]
        params: list[Any] = [val for val in filters.values() if val is not None]
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""

        sql = f"SELECT {', '.join(_COLUMNS)} FROM audit_log{where} ORDER BY id DESC LIMIT ?"
        entries: list[dict[str, Any]] = []
        for row in conn.execute(sql, (*params, limit)):
            entry = dict(zip(_COLUMNS, row))
            entry["details"] = json.loads(entry["details"]) if entry["details"] else {}
            entries.append(entry)
        return entries
