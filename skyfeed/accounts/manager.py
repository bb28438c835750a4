"""skyfeed.accounts.manager

Account records and email tokens.

This is the account-management collaborator: it owns the `account` and
`email_token` tables. Token issuance upserts on (purpose, did), so there is
at most one live token per purpose per account.
"""

from __future__ import annotations

import secrets
import sqlite3
from dataclasses import dataclass
from enum import StrEnum

from skyfeed.core.exceptions import StoreError
from skyfeed.core.time import utc_now

# base32, upper case: no 0/1/8/9 to confuse with O/I/B/g
TOKEN_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"


class TokenPurpose(StrEnum):
    CONFIRM_EMAIL = "confirm_email"
    UPDATE_EMAIL = "update_email"
    RESET_PASSWORD = "reset_password"
    DELETE_ACCOUNT = "delete_account"


@dataclass(frozen=True)
class Account:
    did: str
    email: str | None
    deactivated: bool = False
    taken_down: bool = False


def random_token() -> str:
    chars = "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(10))
    return f"{chars[:5]}-{chars[5:]}"


class AccountManager:
    def get_account(
        self,
        conn: sqlite3.Connection,
        did: str,
        *,
        include_deactivated: bool = False,
        include_taken_down: bool = False,
    ) -> Account | None:
        q = "SELECT did, email, deactivated_at, takedown_ref FROM account WHERE did = ?"
        if not include_deactivated:
            q += " AND deactivated_at IS NULL"
        if not include_taken_down:
            q += " AND takedown_ref IS NULL"

        row = conn.execute(q, (did,)).fetchone()
        if row is None:
            return None
        return Account(
            did=str(row["did"]),
            email=str(row["email"]) if row["email"] else None,
            deactivated=row["deactivated_at"] is not None,
            taken_down=row["takedown_ref"] is not None,
        )

    def create_account(self, conn: sqlite3.Connection, did: str, email: str | None) -> Account:
        try:
            with conn:
                conn.execute("INSERT INTO account (did, email) VALUES (?, ?)", (did, email))
        except sqlite3.IntegrityError as e:
            raise StoreError(f"account exists: {did}") from e
        return Account(did=did, email=email)

    def deactivate_account(self, conn: sqlite3.Connection, did: str) -> None:
        with conn:
            conn.execute("UPDATE account SET deactivated_at = ? WHERE did = ?", (utc_now().isoformat(), did))

    def takedown_account(self, conn: sqlite3.Connection, did: str, ref: str) -> None:
        with conn:
            conn.execute("UPDATE account SET takedown_ref = ? WHERE did = ?", (ref, did))

    def create_email_token(self, conn: sqlite3.Connection, did: str, purpose: TokenPurpose) -> str:
        token = random_token()
        try:
            with conn:
                conn.execute(
                    """
                    INSERT INTO email_token (purpose, did, token, requested_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(purpose, did) DO UPDATE SET
                        token = excluded.token,
                        requested_at = excluded.requested_at
                    """,
                    (str(purpose), did, token, utc_now().isoformat()),
                )
        except sqlite3.Error as e:
            raise StoreError(f"email token insert failed: {e}") from e
        return token

    def get_email_token(self, conn: sqlite3.Connection, did: str, purpose: TokenPurpose) -> str | None:
        row = conn.execute(
            "SELECT token FROM email_token WHERE purpose = ? AND did = ?",
            (str(purpose), did),
        ).fetchone()
        return None if row is None else str(row["token"])
