"""skyfeed.core.exceptions

Errors are part of the interface.

The HTTP layer maps these onto fixed envelopes; the text of an exception is
for logs, not for callers.
"""

from __future__ import annotations


class SkyfeedError(Exception):
    """Base exception for skyfeed."""


class ConfigError(SkyfeedError):
    """Configuration is missing, invalid, or inconsistent."""


class StoreError(SkyfeedError):
    """A store could not be opened or a statement failed."""


class NotFound(SkyfeedError):
    """The requested record does not exist."""


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class AuthError(SkyfeedError):
    """A guard refused the request."""


class MissingCredential(AuthError):
    """The credential header is absent."""


class InvalidCredential(AuthError):
    """The credential is present but not acceptable."""


class ConfigurationError(AuthError):
    """The guard has nothing to compare against. Operator error, not client error."""


# ---------------------------------------------------------------------------
# Serving
# ---------------------------------------------------------------------------


class ServingError(SkyfeedError):
    """Feed skeleton could not be produced."""


class UnknownAlgorithm(ServingError):
    """The feed URI does not name a served algorithm."""


class InvalidCursor(ServingError):
    """The continuation token was not produced by this service."""


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


class IngestionError(SkyfeedError):
    """An ingestion batch failed. Nothing from it was applied."""


# ---------------------------------------------------------------------------
# Account action tokens
# ---------------------------------------------------------------------------


class WorkflowError(SkyfeedError):
    """Account-action token issuance failed."""


class AccountNotFound(WorkflowError):
    """No account record for the identity."""


class NoEmailOnFile(WorkflowError):
    """The account has no email address to deliver to."""


class DeliveryFailure(WorkflowError):
    """The mail transport did not accept the message."""


class TelemetryError(SkyfeedError):
    """A visitor record could not be written."""
