from __future__ import annotations

import re
from pathlib import Path

import pytest

from skyfeed.accounts import AccountActionTokenWorkflow, AccountManager, TokenPurpose
from skyfeed.accounts.manager import random_token
from skyfeed.accounts.workflow import ISSUED_ACTION
from skyfeed.core.database import Store
from skyfeed.core.exceptions import AccountNotFound, DeliveryFailure, NoEmailOnFile, StoreError
from skyfeed.security import AuditLogger
from tests.unit._doubles import RecordingMailer

ALICE = "did:plc:alice"
TOKEN_RE = re.compile(r"^[A-Z2-7]{5}-[A-Z2-7]{5}$")


@pytest.fixture()
def store(temp_dir: Path) -> Store:
    return Store(temp_dir / "accounts.db")


def _workflow(mailer: RecordingMailer) -> AccountActionTokenWorkflow:
    return AccountActionTokenWorkflow(accounts=AccountManager(), mailer=mailer, audit=AuditLogger(component="test"))


def test_random_token_shape() -> None:
    tokens = {random_token() for _ in range(50)}
    assert all(TOKEN_RE.match(t) for t in tokens)
    assert len(tokens) > 1


def test_get_account_filters(store: Store) -> None:
    m = AccountManager()
    with store.connection() as conn:
        m.create_account(conn, ALICE, "alice@example.com")
        m.deactivate_account(conn, ALICE)
        assert m.get_account(conn, ALICE) is None
        acct = m.get_account(conn, ALICE, include_deactivated=True)
        assert acct is not None and acct.deactivated

        m.takedown_account(conn, ALICE, "mod-123")
        assert m.get_account(conn, ALICE, include_deactivated=True) is None
        acct = m.get_account(conn, ALICE, include_deactivated=True, include_taken_down=True)
        assert acct is not None and acct.taken_down


def test_create_account_twice_fails(store: Store) -> None:
    m = AccountManager()
    with store.connection() as conn:
        m.create_account(conn, ALICE, None)
        with pytest.raises(StoreError):
            m.create_account(conn, ALICE, None)


def test_reissue_replaces_token(store: Store) -> None:
    m = AccountManager()
    with store.connection() as conn:
        m.create_account(conn, ALICE, "alice@example.com")
        first = m.create_email_token(conn, ALICE, TokenPurpose.DELETE_ACCOUNT)
        second = m.create_email_token(conn, ALICE, TokenPurpose.DELETE_ACCOUNT)
        other = m.create_email_token(conn, ALICE, TokenPurpose.CONFIRM_EMAIL)
        assert m.get_email_token(conn, ALICE, TokenPurpose.DELETE_ACCOUNT) == second
        assert m.get_email_token(conn, ALICE, TokenPurpose.CONFIRM_EMAIL) == other
        count = conn.execute("SELECT COUNT(*) FROM email_token WHERE did = ?", (ALICE,)).fetchone()[0]
    assert TOKEN_RE.match(first)
    assert count == 2


@pytest.mark.parametrize(
    ("purpose", "kind"),
    [(TokenPurpose.DELETE_ACCOUNT, "account_delete"), (TokenPurpose.CONFIRM_EMAIL, "confirm_email")],
)
def test_issue_mails_stored_token_to_address_on_file(store: Store, purpose: TokenPurpose, kind: str) -> None:
    mailer = RecordingMailer()
    with store.connection() as conn:
        AccountManager().create_account(conn, ALICE, "alice@example.com")
        _workflow(mailer).issue(conn, ALICE, purpose)
        stored = AccountManager().get_email_token(conn, ALICE, purpose)
        audit = AuditLogger().query(conn, action_type=ISSUED_ACTION)

    assert mailer.sent == [(kind, "alice@example.com", stored)]
    assert len(audit) == 1
    assert audit[0]["actor"] == ALICE
    assert audit[0]["details"] == {"purpose": str(purpose)}
    assert stored not in str(audit)


def test_issue_reaches_deactivated_and_taken_down_accounts(store: Store) -> None:
    mailer = RecordingMailer()
    m = AccountManager()
    with store.connection() as conn:
        m.create_account(conn, ALICE, "alice@example.com")
        m.deactivate_account(conn, ALICE)
        m.takedown_account(conn, ALICE, "mod-1")
        _workflow(mailer).issue(conn, ALICE, TokenPurpose.DELETE_ACCOUNT)
    assert len(mailer.sent) == 1


def test_issue_without_account(store: Store) -> None:
    mailer = RecordingMailer()
    with store.connection() as conn:
        with pytest.raises(AccountNotFound):
            _workflow(mailer).issue(conn, ALICE, TokenPurpose.DELETE_ACCOUNT)
    assert mailer.sent == []


def test_issue_without_email_mints_nothing(store: Store) -> None:
    mailer = RecordingMailer()
    with store.connection() as conn:
        AccountManager().create_account(conn, ALICE, None)
        with pytest.raises(NoEmailOnFile):
            _workflow(mailer).issue(conn, ALICE, TokenPurpose.CONFIRM_EMAIL)
        assert AccountManager().get_email_token(conn, ALICE, TokenPurpose.CONFIRM_EMAIL) is None
    assert mailer.sent == []


def test_delivery_failure_propagates_without_audit(store: Store) -> None:
    mailer = RecordingMailer(fail=True)
    with store.connection() as conn:
        AccountManager().create_account(conn, ALICE, "alice@example.com")
        with pytest.raises(DeliveryFailure):
            _workflow(mailer).issue(conn, ALICE, TokenPurpose.CONFIRM_EMAIL)
        assert AuditLogger().query(conn, action_type=ISSUED_ACTION) == []


def test_purpose_without_template_is_delivery_failure(store: Store) -> None:
    mailer = RecordingMailer()
    with store.connection() as conn:
        AccountManager().create_account(conn, ALICE, "alice@example.com")
        with pytest.raises(DeliveryFailure):
            _workflow(mailer).issue(conn, ALICE, TokenPurpose.RESET_PASSWORD)
        assert AccountManager().get_email_token(conn, ALICE, TokenPurpose.RESET_PASSWORD) is None
        assert AuditLogger().query(conn, action_type=ISSUED_ACTION) == []
    assert mailer.sent == []
