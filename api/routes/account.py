from __future__ import annotations

import logging
import sqlite3

from fastapi import APIRouter, Depends, Response

from api.auth import SessionDep
from api.deps import get_write_conn, get_workflow
from api.errors import ApiError
from skyfeed.accounts import AccountActionTokenWorkflow, TokenPurpose
from skyfeed.core.exceptions import SkyfeedError
from skyfeed.security import Authenticated

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/xrpc")


def _issue(
    workflow: AccountActionTokenWorkflow,
    conn: sqlite3.Connection,
    identity: Authenticated,
    purpose: TokenPurpose,
) -> Response:
    try:
        workflow.issue(conn, identity.did, purpose)
    except SkyfeedError as e:
        # One opaque answer for no account, no email, and failed delivery.
        logger.warning(
            "email_token_request_failed",
            extra={"did": identity.did, "purpose": str(purpose), "reason": type(e).__name__},
        )
        raise ApiError.internal() from None
    return Response(status_code=200)


@router.post("/com.atproto.server.requestAccountDelete")
def request_account_delete(
    identity: Authenticated = SessionDep,
    workflow: AccountActionTokenWorkflow = Depends(get_workflow),
    conn: sqlite3.Connection = Depends(get_write_conn),
) -> Response:
    return _issue(workflow, conn, identity, TokenPurpose.DELETE_ACCOUNT)


@router.post("/com.atproto.server.requestEmailConfirmation")
def request_email_confirmation(
    identity: Authenticated = SessionDep,
    workflow: AccountActionTokenWorkflow = Depends(get_workflow),
    conn: sqlite3.Connection = Depends(get_write_conn),
) -> Response:
    return _issue(workflow, conn, identity, TokenPurpose.CONFIRM_EMAIL)
