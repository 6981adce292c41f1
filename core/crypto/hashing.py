"""
Hashing Utilities
SHA-256 hashing and payload fingerprints.

This module provides:
- SHA-256 hashing for raw bytes
- Hex encoding with 0x prefix
- Transaction fingerprints for correlating log lines

Fingerprints identify a payload in trusted logs without writing the
payload itself (or any key material) to the log.
"""
from __future__ import annotations

import hashlib
from typing import Any

from core.schemas.canonical import canonicalize_transaction


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of raw bytes.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(data).digest()


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def fingerprint_bytes(canonical: bytes) -> str:
    """Fingerprint of already canonicalized bytes."""
    return to_hex(sha256(canonical))


def transaction_fingerprint(transaction: Any) -> str:
    """
    Fingerprint a transaction: 0x-hex SHA-256 of its canonical form.

    Args:
        transaction: Transaction model or mapping of the signable fields
            (``signature`` must be stripped).
    """
    return fingerprint_bytes(canonicalize_transaction(transaction))


__all__ = [
    "sha256",
    "to_hex",
    "fingerprint_bytes",
    "transaction_fingerprint",
]
