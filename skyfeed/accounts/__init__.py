"""skyfeed.accounts

Account lookups and single-purpose, mail-delivered action tokens.
"""

from skyfeed.accounts.manager import Account, AccountManager, TokenPurpose, random_token
from skyfeed.accounts.workflow import AccountActionTokenWorkflow

__all__ = [
    "Account",
    "AccountActionTokenWorkflow",
    "AccountManager",
    "TokenPurpose",
    "random_token",
]
