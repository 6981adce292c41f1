"""
Transaction Verifier

Checks a signed transaction offline:

1. parse the payload           -> malformed_input
2. verify the signature        -> signature_invalid
3. check the freshness window  -> expired

The current time is an argument, never read from the system clock here.
Failures are returned as a VerificationOutcome; only an unusable verifier
key raises.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any, Optional, Union

from pydantic import ValidationError

from core.crypto import signatures
from core.crypto.hashing import fingerprint_bytes
from core.crypto.signatures import (
    DEFAULT_ALGORITHM,
    KeyMaterial,
    PublicKey,
    SignatureAlgorithm,
    decode_signature,
    load_public_key,
    resolve_algorithm,
)
from core.schemas.canonical import SIGNATURE_FIELD, ensure_utc, loads_payload
from core.schemas.errors import CanonicalizationException, MalformedInputException
from core.schemas.transaction import SignedTransaction, Transaction
from core.schemas.verification import CheckResult, VerificationOutcome, VerificationReason


logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(minutes=5)

MaxAge = Union[timedelta, int, float]
SignedInput = Union[SignedTransaction, Mapping[str, Any], str, bytes]


def coerce_max_age(max_age: MaxAge) -> timedelta:
    """
    Accept a timedelta or a number of seconds.

    Raises:
        ValueError: If the window is not a finite, strictly positive duration.
    """
    if isinstance(max_age, bool):
        raise ValueError("max_age must be a timedelta or a number of seconds")
    if isinstance(max_age, timedelta):
        window = max_age
    else:
        try:
            if not math.isfinite(max_age):
                raise ValueError(f"max_age must be finite, got {max_age}")
            window = timedelta(seconds=max_age)
        except OverflowError as e:
            raise ValueError(f"max_age out of range: {max_age}") from e
    if window <= timedelta(0):
        raise ValueError(f"max_age must be positive, got {window}")
    return window


def _parse_signed(value: Any) -> tuple[SignedTransaction, bytes, bytes]:
    """
    Parse a signed transaction into (model, canonical bytes, raw signature).

    Raises:
        MalformedInputException: On any missing, extra or corrupt field.
    """
    if isinstance(value, SignedTransaction):
        signed = value
    else:
        if isinstance(value, Transaction):
            raise MalformedInputException("Transaction has no signature", field_path=SIGNATURE_FIELD)
        if isinstance(value, (str, bytes, bytearray)):
            data = loads_payload(bytes(value) if isinstance(value, bytearray) else value)
        elif isinstance(value, Mapping):
            data = dict(value)
        else:
            raise MalformedInputException(
                f"Cannot verify value of type {type(value).__name__}",
                details={"type": type(value).__name__},
            )

        if data.get(SIGNATURE_FIELD) in (None, ""):
            raise MalformedInputException("Signature is missing", field_path=SIGNATURE_FIELD)

        try:
            signed = SignedTransaction.model_validate(data)
        except ValidationError as e:
            first = e.errors()[0]
            field_path = ".".join(str(part) for part in first.get("loc", ())) or "transaction"
            raise MalformedInputException(
                f"Invalid field '{field_path}': {first['msg']}",
                field_path=field_path,
            ) from e

    raw_signature = decode_signature(signed.signature)
    try:
        canonical = signed.canonical_bytes()
    except CanonicalizationException as e:
        raise MalformedInputException(e.message, details=e.details) from e
    return signed, canonical, raw_signature


class Verifier:
    """
    Verifies signed transactions against one public key.

    Holds the parsed key, the fixed algorithm and the default freshness
    window. Instances are immutable and safe to share between threads.
    """

    def __init__(
        self,
        public_key: KeyMaterial | PublicKey,
        *,
        algorithm: SignatureAlgorithm | str = DEFAULT_ALGORITHM,
        max_age: MaxAge = DEFAULT_MAX_AGE,
    ) -> None:
        self.algorithm = resolve_algorithm(algorithm)
        self._key = load_public_key(public_key, self.algorithm)
        self.max_age = coerce_max_age(max_age)

    def verify(
        self,
        signed_transaction: SignedInput,
        now: datetime,
        *,
        max_age: Optional[MaxAge] = None,
    ) -> VerificationOutcome:
        """
        Verify one signed transaction at time ``now``.

        Args:
            signed_transaction: SignedTransaction, mapping, or wire JSON text.
            now: Current time (naive values are treated as UTC).
            max_age: Override of the freshness window for this call.

        Returns:
            VerificationOutcome; ``valid`` is True only if the signature
            checks out and ``now - created_at < max_age``.
        """
        window = coerce_max_age(max_age) if max_age is not None else self.max_age
        now = ensure_utc(now)
        checks: list[CheckResult] = []

        try:
            signed, canonical, raw_signature = _parse_signed(signed_transaction)
        except MalformedInputException as e:
            checks.append(CheckResult.failed("payload_parse", e.message, e.details))
            logger.warning(f"Rejected transaction: malformed input ({e.message})")
            return VerificationOutcome.rejected(
                VerificationReason.MALFORMED_INPUT,
                checks,
                error=e.to_error_model(),
            )
        checks.append(CheckResult.passed("payload_parse", "Payload is well-formed"))

        fingerprint = fingerprint_bytes(canonical)

        if not signatures.verify(canonical, raw_signature, self._key, self.algorithm):
            checks.append(CheckResult.failed(
                "signature",
                "Signature does not match payload",
                {"algorithm": self.algorithm.value},
            ))
            logger.warning(f"Rejected transaction {fingerprint}: signature invalid")
            return VerificationOutcome.rejected(
                VerificationReason.SIGNATURE_INVALID,
                checks,
                fingerprint=fingerprint,
                created_at=signed.created_at,
            )
        checks.append(CheckResult.passed(
            "signature", "Signature is valid", {"algorithm": self.algorithm.value}
        ))

        elapsed = now - signed.created_at
        freshness_details = {
            "elapsed_seconds": elapsed.total_seconds(),
            "max_age_seconds": window.total_seconds(),
        }
        if elapsed >= window:
            checks.append(CheckResult.failed(
                "freshness",
                f"Transaction is {elapsed.total_seconds():.3f}s old (limit {window.total_seconds():.0f}s)",
                freshness_details,
            ))
            logger.warning(f"Rejected transaction {fingerprint}: expired")
            return VerificationOutcome.rejected(
                VerificationReason.EXPIRED,
                checks,
                fingerprint=fingerprint,
                created_at=signed.created_at,
            )
        checks.append(CheckResult.passed("freshness", "Transaction is within the window", freshness_details))

        logger.info(f"Verified transaction {fingerprint}")
        return VerificationOutcome.accepted(
            checks,
            fingerprint=fingerprint,
            created_at=signed.created_at,
        )


def verify_transaction(
    signed_transaction: SignedInput,
    public_key: KeyMaterial | PublicKey,
    now: datetime,
    max_age: MaxAge = DEFAULT_MAX_AGE,
    *,
    algorithm: SignatureAlgorithm | str = DEFAULT_ALGORITHM,
) -> VerificationOutcome:
    """
    Verify a signed transaction with a PEM public key.

    Raises:
        InvalidKeyException: If the public key cannot be loaded for the algorithm.
        ValueError: If max_age is not positive.
    """
    verifier = Verifier(public_key, algorithm=algorithm, max_age=max_age)
    return verifier.verify(signed_transaction, now)
