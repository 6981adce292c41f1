"""
Test fixtures package for QRPay protocol tests.

This package provides factory functions for creating test objects:
- keys.py: PEM key pairs (RSA, EC P-256, Ed25519), cached per label
- transactions.py: reference transaction fields and signed transactions

Usage:
    from fixtures import make_rsa_key_pair, make_signed_transaction

    def test_something():
        signed = make_signed_transaction(make_rsa_key_pair("k1"))
"""

from .keys import (
    PemKeyPair,
    make_ec_key_pair,
    make_ed25519_key_pair,
    make_rsa_key_pair,
)

from .transactions import (
    REFERENCE_CANONICAL,
    REFERENCE_CREATED_AT,
    make_signed_transaction,
    make_transaction_fields,
)

__all__ = [
    "PemKeyPair",
    "make_ec_key_pair",
    "make_ed25519_key_pair",
    "make_rsa_key_pair",
    "REFERENCE_CANONICAL",
    "REFERENCE_CREATED_AT",
    "make_signed_transaction",
    "make_transaction_fields",
]
