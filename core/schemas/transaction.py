"""
Schemas & Canonicalization
File: transaction.py

Purpose: Transaction and SignedTransaction models.

Only currency, amount, remark and created_at participate in the signature.
The signature field is never part of the bytes it was computed over.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .canonical import (
    SIGNATURE_FIELD,
    canonicalize_transaction,
    check_amount_bounds,
    dumps_payload,
    ensure_utc,
    format_timestamp_canonical,
    loads_payload,
    to_decimal,
)

CURRENCY_PATTERN = r"^[A-Z]{3}$"


def truncate_to_millis(dt: datetime) -> datetime:
    """Drop sub-millisecond precision so the timestamp has a canonical text."""
    return dt.replace(microsecond=dt.microsecond - dt.microsecond % 1000)


class Transaction(BaseModel):
    """
    Unsigned transaction: the four signable fields.

    Example:
        >>> Transaction(currency="USD", amount="10.2", created_at="2024-11-18T07:13:42.582Z")
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    currency: str = Field(
        ...,
        description="ISO-4217 style three-letter currency code",
        pattern=CURRENCY_PATTERN,
        examples=["USD"],
    )
    amount: Decimal = Field(
        ...,
        description="Positive decimal amount, at most 36 significant digits, magnitude 1e-18..1e18",
        gt=0,
        allow_inf_nan=False,
    )
    remark: str = Field(
        default="",
        description="Free-text remark, may be empty",
    )
    created_at: datetime = Field(
        ...,
        description="Signing time (UTC, millisecond precision), set by the signer",
    )

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Any:
        try:
            return to_decimal(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @field_validator("amount")
    @classmethod
    def _bound_amount(cls, value: Decimal) -> Decimal:
        return check_amount_bounds(value)

    @field_validator("remark", mode="before")
    @classmethod
    def _default_remark(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, value: datetime) -> datetime:
        value = ensure_utc(value)
        if value.microsecond % 1000 != 0:
            raise ValueError("created_at must have at most millisecond precision")
        return value

    @classmethod
    def create(
        cls,
        currency: str,
        amount: Decimal | str | int | float,
        remark: str = "",
        *,
        now: datetime,
    ) -> "Transaction":
        """Build a transaction stamped with ``now`` truncated to milliseconds."""
        return cls(
            currency=currency,
            amount=amount,
            remark=remark,
            created_at=truncate_to_millis(ensure_utc(now)),
        )

    def canonical_bytes(self) -> bytes:
        """Canonical signature input for this transaction."""
        return canonicalize_transaction(self.signable_fields())

    def signable_fields(self) -> dict[str, Any]:
        """The four signable fields, in canonical order."""
        return {
            "currency": self.currency,
            "amount": self.amount,
            "remark": self.remark,
            "created_at": self.created_at,
        }

    @property
    def created_at_text(self) -> str:
        return format_timestamp_canonical(self.created_at)


class SignedTransaction(Transaction):
    """Transaction plus its base64 signature token."""

    signature: str = Field(
        ...,
        description="Base64 signature over the canonical form of the other fields",
        min_length=1,
    )

    @classmethod
    def attach(cls, transaction: Transaction, signature: str) -> "SignedTransaction":
        """Attach a signature to an unsigned transaction."""
        return cls(**transaction.signable_fields(), signature=signature)

    def unsigned(self) -> Transaction:
        """Strip the signature and return the signable transaction."""
        return Transaction(**self.signable_fields())

    def to_payload(self) -> str:
        """Serialize to the wire JSON text (e.g. for a QR code)."""
        return dumps_payload({**self.signable_fields(), SIGNATURE_FIELD: self.signature})

    @classmethod
    def from_payload(cls, text: str | bytes) -> "SignedTransaction":
        """Parse wire JSON text. Raises MalformedInputException or pydantic ValidationError."""
        return cls.model_validate(loads_payload(text))
