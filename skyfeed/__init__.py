"""skyfeed

Feed-generator and account-action gateway for a federated social network.

Two trust domains meet here: end users with signed session tokens, and
upstream services holding the shared service key.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.3.0"
