"""
Signed-transaction protocol: signer and verifier.
"""

from .signer import Signer, sign_transaction, utc_now
from .verifier import DEFAULT_MAX_AGE, Verifier, coerce_max_age, verify_transaction

__all__ = [
    "DEFAULT_MAX_AGE",
    "Signer",
    "Verifier",
    "coerce_max_age",
    "sign_transaction",
    "utc_now",
    "verify_transaction",
]
