"""
Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Version constants
from .versioning import PROTOCOL_VERSION, ProtocolVersion

# Canonical serialization API
from .canonical import (
    CANONICAL_FIELD_ORDER,
    CANONICAL_JSON_SEPARATORS,
    MAX_AMOUNT_DIGITS,
    MAX_AMOUNT_EXPONENT,
    MIN_AMOUNT_EXPONENT,
    PAYLOAD_FIELD_ORDER,
    SIGNATURE_FIELD,
    canonical_field_texts,
    canonicalize_transaction,
    check_amount_bounds,
    dumps_payload,
    ensure_utc,
    format_amount_canonical,
    format_timestamp_canonical,
    loads_payload,
    parse_timestamp,
    to_decimal,
)

# Error models and exceptions
from .errors import (
    CanonicalizationException,
    ConfigException,
    ErrorCodes,
    InvalidKeyException,
    InvalidTransactionException,
    MalformedInputException,
    QRPayError,
    QRPayException,
    UnsupportedAlgorithmException,
)

# Transaction schemas
from .transaction import (
    CURRENCY_PATTERN,
    SignedTransaction,
    Transaction,
    truncate_to_millis,
)

# Verification schemas
from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationOutcome,
    VerificationReason,
)

__all__ = [
    # Versioning
    "PROTOCOL_VERSION",
    "ProtocolVersion",
    # Canonical
    "CANONICAL_FIELD_ORDER",
    "CANONICAL_JSON_SEPARATORS",
    "MAX_AMOUNT_DIGITS",
    "MAX_AMOUNT_EXPONENT",
    "MIN_AMOUNT_EXPONENT",
    "PAYLOAD_FIELD_ORDER",
    "SIGNATURE_FIELD",
    "canonical_field_texts",
    "canonicalize_transaction",
    "check_amount_bounds",
    "dumps_payload",
    "ensure_utc",
    "format_amount_canonical",
    "format_timestamp_canonical",
    "loads_payload",
    "parse_timestamp",
    "to_decimal",
    # Errors
    "CanonicalizationException",
    "ConfigException",
    "ErrorCodes",
    "InvalidKeyException",
    "InvalidTransactionException",
    "MalformedInputException",
    "QRPayError",
    "QRPayException",
    "UnsupportedAlgorithmException",
    # Transaction
    "CURRENCY_PATTERN",
    "SignedTransaction",
    "Transaction",
    "truncate_to_millis",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationOutcome",
    "VerificationReason",
]
