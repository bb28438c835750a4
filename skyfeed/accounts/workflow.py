"""skyfeed.accounts.workflow

Scoped account-action tokens: email confirmation, account deletion.

The caller is the account owner (session-token gated). The token is bound to
one (did, purpose) pair and travels only by mail, only to the address on
file. It is never part of a response.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable

from skyfeed.accounts.manager import AccountManager, TokenPurpose
from skyfeed.core.exceptions import AccountNotFound, DeliveryFailure, NoEmailOnFile
from skyfeed.mail.mailer import Mailer
from skyfeed.security.audit import AuditLogger

logger = logging.getLogger(__name__)

ISSUED_ACTION = "account.email_token.issued"


class AccountActionTokenWorkflow:
    def __init__(
        self,
        *,
        accounts: AccountManager,
        mailer: Mailer,
        audit: AuditLogger | None = None,
    ) -> None:
        self.accounts = accounts
        self.mailer = mailer
        self.audit = audit or AuditLogger(component="accounts")

    def _sender(self, purpose: TokenPurpose) -> Callable[[str, str], None]:
        if purpose is TokenPurpose.CONFIRM_EMAIL:
            return self.mailer.send_confirm_email
        if purpose is TokenPurpose.DELETE_ACCOUNT:
            return self.mailer.send_account_delete
        raise DeliveryFailure(f"no mail template for {purpose}")

    def issue(self, conn: sqlite3.Connection, did: str, purpose: TokenPurpose) -> None:
        # Deactivated and taken-down accounts must still be reachable by mail.
        account = self.accounts.get_account(
            conn,
            did,
            include_deactivated=True,
            include_taken_down=True,
        )
        if account is None:
            raise AccountNotFound("Account not found")
        if not account.email:
            raise NoEmailOnFile("Account does not have an email address")

        # An unsendable purpose must not leave a token behind.
        send = self._sender(purpose)
        token = self.accounts.create_email_token(conn, did, purpose)
        send(account.email, token)

        self.audit.log_action(conn, ISSUED_ACTION, did, {"purpose": str(purpose)})
        logger.info("email_token_issued", extra={"did": did, "purpose": str(purpose)})
