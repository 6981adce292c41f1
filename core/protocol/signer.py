"""
Transaction Signer

Validates a transaction, stamps it with the signer's clock, signs its
canonical form and attaches the base64 signature.

The signer's clock is authoritative for created_at: a client-supplied
value is replaced unless the caller explicitly opts out.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pydantic import ValidationError

from core.crypto import signatures
from core.crypto.hashing import fingerprint_bytes
from core.crypto.signatures import (
    DEFAULT_ALGORITHM,
    KeyMaterial,
    PrivateKey,
    SignatureAlgorithm,
    encode_signature,
    load_private_key,
    resolve_algorithm,
)
from core.schemas.canonical import SIGNATURE_FIELD, ensure_utc
from core.schemas.errors import InvalidTransactionException
from core.schemas.transaction import SignedTransaction, Transaction, truncate_to_millis


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current UTC time (the default signer clock)."""
    return datetime.now(timezone.utc)


def _validation_field_path(error: ValidationError) -> str:
    first = error.errors()[0] if error.errors() else {}
    return ".".join(str(part) for part in first.get("loc", ())) or "transaction"


class Signer:
    """
    Signs transactions with one private key and a fixed algorithm.

    The key is parsed once at construction; instances hold no mutable
    state and can be shared between threads.
    """

    def __init__(
        self,
        private_key: KeyMaterial | PrivateKey,
        *,
        algorithm: SignatureAlgorithm | str = DEFAULT_ALGORITHM,
        allowed_currencies: Optional[Iterable[str]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.algorithm = resolve_algorithm(algorithm)
        self._key = load_private_key(private_key, self.algorithm)
        self.allowed_currencies = (
            frozenset(code.strip().upper() for code in allowed_currencies)
            if allowed_currencies
            else None
        )
        self.clock: Clock = clock or utc_now

    def prepare(
        self,
        transaction: Transaction | Mapping[str, Any],
        *,
        now: datetime,
        override_created_at: bool = True,
    ) -> Transaction:
        """
        Build the validated, timestamped Transaction that will be signed.

        Raises:
            InvalidTransactionException: If fields are missing or out of range.
        """
        if isinstance(transaction, Transaction):
            fields = transaction.signable_fields()
        elif isinstance(transaction, Mapping):
            fields = {k: v for k, v in transaction.items() if k != SIGNATURE_FIELD}
        else:
            raise InvalidTransactionException(
                f"Cannot sign value of type {type(transaction).__name__}",
            )

        if override_created_at or fields.get("created_at") is None:
            fields["created_at"] = truncate_to_millis(ensure_utc(now))

        try:
            prepared = Transaction.model_validate(fields)
        except ValidationError as e:
            field_path = _validation_field_path(e)
            raise InvalidTransactionException(
                f"Invalid transaction field '{field_path}': {e.errors()[0]['msg']}",
                field_path=field_path,
                details={"error_count": e.error_count()},
            ) from e

        if self.allowed_currencies is not None and prepared.currency not in self.allowed_currencies:
            raise InvalidTransactionException(
                f"Unsupported currency: {prepared.currency}",
                field_path="currency",
                details={"supported": sorted(self.allowed_currencies)},
            )
        return prepared

    def sign(
        self,
        transaction: Transaction | Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
        override_created_at: bool = True,
    ) -> SignedTransaction:
        """
        Sign a transaction.

        Args:
            transaction: Transaction model or mapping. Any ``signature`` key
                is ignored.
            now: Signing time; defaults to the signer's clock.
            override_created_at: Replace a supplied created_at with ``now``.

        Returns:
            SignedTransaction carrying a base64 signature over the canonical
            form of the other four fields.
        """
        prepared = self.prepare(
            transaction,
            now=now if now is not None else self.clock(),
            override_created_at=override_created_at,
        )
        canonical = prepared.canonical_bytes()
        raw_signature = signatures.sign(canonical, self._key, self.algorithm)

        logger.info(
            f"Signed transaction {fingerprint_bytes(canonical)} "
            f"(algorithm={self.algorithm.value}, created_at={prepared.created_at_text})"
        )
        return SignedTransaction.attach(prepared, encode_signature(raw_signature))


def sign_transaction(
    transaction: Transaction | Mapping[str, Any],
    private_key: KeyMaterial | PrivateKey,
    *,
    algorithm: SignatureAlgorithm | str = DEFAULT_ALGORITHM,
    now: Optional[datetime] = None,
    allowed_currencies: Optional[Iterable[str]] = None,
    override_created_at: bool = True,
) -> SignedTransaction:
    """
    Sign a single transaction with a PEM private key.

    Raises:
        InvalidKeyException: If the key is malformed or of the wrong type.
        InvalidTransactionException: If required fields are missing or out of range.
    """
    signer = Signer(
        private_key,
        algorithm=algorithm,
        allowed_currencies=allowed_currencies,
    )
    return signer.sign(transaction, now=now, override_created_at=override_created_at)
