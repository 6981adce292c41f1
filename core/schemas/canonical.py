"""
Schemas & Canonicalization
File: canonical.py

Purpose: Deterministic serialization of the signable transaction fields.
The signer and the verifier MUST produce byte-identical output for
identical field values.

CRITICAL: Field order, number text and timestamp text are protocol
constants. Never derive them from the input's insertion order or from a
language's default number/date formatting.
"""

import json
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException, MalformedInputException

# Fixed field order of the canonical form (and of the wire payload).
CANONICAL_FIELD_ORDER: tuple[str, ...] = ("currency", "amount", "remark", "created_at")

SIGNATURE_FIELD: str = "signature"

PAYLOAD_FIELD_ORDER: tuple[str, ...] = CANONICAL_FIELD_ORDER + (SIGNATURE_FIELD,)

# Canonical JSON separators - no whitespace
CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")

# Amount magnitude limits: the most significant digit must sit between
# 10**MIN_AMOUNT_EXPONENT and 10**MAX_AMOUNT_EXPONENT.
MAX_AMOUNT_EXPONENT: int = 18
MIN_AMOUNT_EXPONENT: int = -18

# Significant digits (trailing zeros excluded)
MAX_AMOUNT_DIGITS: int = 36


def ensure_utc(dt: datetime) -> datetime:
    """
    Ensure a datetime is timezone-aware and in UTC.

    Rules:
        - If naive (no tzinfo): treat as UTC
        - If aware: convert to UTC
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp, accepting a trailing ``Z`` for UTC.

    Raises:
        ValueError: If the string is not a valid ISO-8601 timestamp.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def format_timestamp_canonical(dt: datetime) -> str:
    """
    Format a datetime as ISO-8601 UTC with exactly three fractional digits.

    Example:
        >>> format_timestamp_canonical(datetime(2024, 11, 18, 7, 13, 42, 582000))
        '2024-11-18T07:13:42.582Z'

    Raises:
        CanonicalizationException: If the datetime carries sub-millisecond
            precision (it would not survive the round trip).
    """
    utc_dt = ensure_utc(dt)
    if utc_dt.microsecond % 1000 != 0:
        raise CanonicalizationException(
            message="Timestamp has sub-millisecond precision",
            details={"value": utc_dt.isoformat()},
        )
    millis = utc_dt.microsecond // 1000
    return f"{utc_dt.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}Z"


def to_decimal(value: Any) -> Decimal:
    """
    Convert a JSON-ish number to Decimal without binary-float artifacts.

    Floats go through ``repr`` so ``10.2`` becomes ``Decimal("10.2")``.
    """
    if isinstance(value, bool):
        raise TypeError("boolean is not a valid amount")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    if isinstance(value, (int, str)):
        try:
            return Decimal(value)
        except InvalidOperation as e:
            raise ValueError(f"invalid decimal literal: {value!r}") from e
    raise TypeError(f"unsupported amount type: {type(value).__name__}")


def check_amount_bounds(value: Decimal) -> Decimal:
    """
    Reject amounts whose plain-text form would be unreasonably long.

    Checks only the exponent and digit tuple, so it is cheap even for
    values like ``1E+50000000``.

    Raises:
        ValueError: If the magnitude or precision is out of range.
    """
    if not value.is_finite():
        raise ValueError(f"amount must be finite, got {value}")
    if not value:
        return value
    adjusted = value.adjusted()
    if not MIN_AMOUNT_EXPONENT <= adjusted <= MAX_AMOUNT_EXPONENT:
        raise ValueError(
            f"amount magnitude out of range (exponent {adjusted}, "
            f"allowed {MIN_AMOUNT_EXPONENT}..{MAX_AMOUNT_EXPONENT})"
        )
    digits = value.as_tuple().digits
    significant = len(digits)
    while significant and digits[significant - 1] == 0:
        significant -= 1
    if significant > MAX_AMOUNT_DIGITS:
        raise ValueError(f"amount has more than {MAX_AMOUNT_DIGITS} significant digits")
    return value


def format_amount_canonical(value: Decimal) -> str:
    """
    Format a decimal as plain text: no exponent, no trailing fractional zeros.

    Example:
        >>> format_amount_canonical(Decimal("10.20"))
        '10.2'
        >>> format_amount_canonical(Decimal("1E+1"))
        '10'
    """
    if not value.is_finite():
        raise CanonicalizationException(
            message=f"Non-finite amount encountered: {value}",
            details={"value": str(value)},
        )
    if not value:
        return "0"
    try:
        check_amount_bounds(value)
    except ValueError as e:
        raise CanonicalizationException(
            message=f"Amount out of range: {e}",
            details={"path": "amount"},
        ) from e
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        text = "0"
    return text


def _string_field(fields: Mapping[str, Any], name: str) -> str:
    value = fields.get(name)
    if value is None and name == "remark":
        return ""
    if not isinstance(value, str):
        raise CanonicalizationException(
            message=f"Field '{name}' must be a string",
            details={"path": name, "type": type(value).__name__},
        )
    return value


def canonical_field_texts(fields: Mapping[str, Any]) -> dict[str, str]:
    """
    Render each signable field as its JSON fragment, keyed in canonical order.

    Args:
        fields: Mapping holding exactly the signable fields. ``signature``
            must already be stripped.

    Raises:
        CanonicalizationException: On a ``signature`` key, a missing or
            unknown field, or a value with no canonical text.
    """
    if SIGNATURE_FIELD in fields:
        raise CanonicalizationException(
            message="Signature must be stripped before canonicalization",
            details={"path": SIGNATURE_FIELD},
        )

    unknown = sorted(set(fields) - set(CANONICAL_FIELD_ORDER))
    if unknown:
        raise CanonicalizationException(
            message=f"Unknown transaction fields: {', '.join(unknown)}",
            details={"fields": unknown},
        )

    missing = [name for name in ("currency", "amount", "created_at") if fields.get(name) is None]
    if missing:
        raise CanonicalizationException(
            message=f"Missing transaction fields: {', '.join(missing)}",
            details={"fields": missing},
        )

    try:
        amount = to_decimal(fields["amount"])
    except (TypeError, ValueError) as e:
        raise CanonicalizationException(
            message=f"Cannot canonicalize amount: {e}",
            details={"path": "amount"},
        ) from e

    created_at = fields["created_at"]
    if isinstance(created_at, str):
        try:
            created_at = parse_timestamp(created_at)
        except ValueError as e:
            raise CanonicalizationException(
                message=f"Cannot canonicalize created_at: {e}",
                details={"path": "created_at"},
            ) from e
    if not isinstance(created_at, datetime):
        raise CanonicalizationException(
            message="Field 'created_at' must be a datetime or ISO-8601 string",
            details={"path": "created_at", "type": type(created_at).__name__},
        )

    return {
        "currency": json.dumps(_string_field(fields, "currency"), ensure_ascii=False),
        "amount": format_amount_canonical(amount),
        "remark": json.dumps(_string_field(fields, "remark"), ensure_ascii=False),
        "created_at": json.dumps(format_timestamp_canonical(created_at)),
    }


def _join_object(texts: Mapping[str, str], order: tuple[str, ...]) -> str:
    key_sep, item_sep = CANONICAL_JSON_SEPARATORS[1], CANONICAL_JSON_SEPARATORS[0]
    members = (f"{json.dumps(name)}{key_sep}{texts[name]}" for name in order)
    return "{" + item_sep.join(members) + "}"


def _as_mapping(transaction: Any) -> Mapping[str, Any]:
    if isinstance(transaction, BaseModel):
        return transaction.model_dump()
    if isinstance(transaction, Mapping):
        return transaction
    raise CanonicalizationException(
        message=f"Cannot canonicalize value of type {type(transaction).__name__}",
        details={"type": type(transaction).__name__},
    )


def canonicalize_transaction(transaction: Any) -> bytes:
    """
    Serialize the signable fields of a transaction to canonical bytes.

    This is the exact input of both signing and verification.

    Args:
        transaction: A Transaction model or a mapping of the four fields.

    Returns:
        UTF-8 bytes of compact JSON with the fields in
        CANONICAL_FIELD_ORDER, e.g.
        ``{"currency":"USD","amount":10.2,"remark":"","created_at":"2024-11-18T07:13:42.582Z"}``

    Raises:
        CanonicalizationException: If the input cannot be canonicalized.
    """
    texts = canonical_field_texts(_as_mapping(transaction))
    return _join_object(texts, CANONICAL_FIELD_ORDER).encode("utf-8")


def dumps_payload(fields: Mapping[str, Any]) -> str:
    """
    Serialize a signed transaction to its wire JSON text.

    The layout is the canonical form with ``signature`` appended last.
    """
    unsigned = {k: v for k, v in fields.items() if k != SIGNATURE_FIELD}
    texts = canonical_field_texts(unsigned)
    texts[SIGNATURE_FIELD] = json.dumps(_string_field(fields, SIGNATURE_FIELD))
    return _join_object(texts, PAYLOAD_FIELD_ORDER)


def loads_payload(text: str | bytes) -> dict[str, Any]:
    """
    Parse wire JSON text into a dict, keeping numbers exact as Decimal.

    Raises:
        MalformedInputException: If the text is not a JSON object.
    """
    try:
        if isinstance(text, bytes):
            text = text.decode("utf-8")
        data = json.loads(text, parse_float=Decimal)
    except ValueError as e:
        raise MalformedInputException(
            message=f"Payload is not valid JSON: {e}",
        ) from e
    if not isinstance(data, dict):
        raise MalformedInputException(
            message="Payload must be a JSON object",
            details={"type": type(data).__name__},
        )
    return data
