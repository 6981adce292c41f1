"""
Canonicalization Unit Tests
File: tests/unit/test_canonical_json.py

Purpose: The canonical form must be byte-identical for identical field
values, regardless of insertion order or input representation.
"""

import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.schemas import (
    CANONICAL_FIELD_ORDER,
    MAX_AMOUNT_DIGITS,
    MAX_AMOUNT_EXPONENT,
    MIN_AMOUNT_EXPONENT,
    CanonicalizationException,
    MalformedInputException,
    Transaction,
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

from fixtures import REFERENCE_CANONICAL, REFERENCE_CREATED_AT, make_transaction_fields


# =============================================================================
# Timestamps
# =============================================================================


class TestTimestamps:
    """Tests for timestamp normalization and formatting."""

    def test_naive_datetime_treated_as_utc(self):
        result = ensure_utc(datetime(2026, 1, 27, 21, 35, 0))
        assert result.tzinfo == timezone.utc
        assert result.hour == 21

    def test_offset_datetime_converted_to_utc(self):
        est = timezone(timedelta(hours=-5))
        result = ensure_utc(datetime(2026, 1, 27, 16, 35, 0, tzinfo=est))
        assert result == datetime(2026, 1, 27, 21, 35, 0, tzinfo=timezone.utc)

    def test_format_always_has_three_fraction_digits(self):
        assert format_timestamp_canonical(datetime(2024, 11, 18, 7, 13, 42)) == "2024-11-18T07:13:42.000Z"
        assert format_timestamp_canonical(REFERENCE_CREATED_AT) == "2024-11-18T07:13:42.582Z"
        assert format_timestamp_canonical(datetime(2024, 1, 1, 0, 0, 0, 5000)) == "2024-01-01T00:00:00.005Z"

    def test_format_rejects_sub_millisecond_precision(self):
        with pytest.raises(CanonicalizationException):
            format_timestamp_canonical(datetime(2024, 1, 1, 0, 0, 0, 123456))

    def test_parse_accepts_z_suffix(self):
        assert parse_timestamp("2024-11-18T07:13:42.582Z") == REFERENCE_CREATED_AT

    def test_parse_accepts_offset(self):
        assert parse_timestamp("2024-11-18T08:13:42.582+01:00") == REFERENCE_CREATED_AT

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")


# =============================================================================
# Amounts
# =============================================================================


class TestAmounts:
    """Tests for canonical decimal text."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (Decimal("10.2"), "10.2"),
            (Decimal("10.20"), "10.2"),
            (Decimal("10.00"), "10"),
            (Decimal("1E+1"), "10"),
            (Decimal("1E+3"), "1000"),
            (Decimal("0.001"), "0.001"),
            (Decimal("1E-7"), "0.0000001"),
            (Decimal("1234567890123456.123456789"), "1234567890123456.123456789"),
        ],
    )
    def test_format_amount(self, value, expected):
        assert format_amount_canonical(value) == expected

    def test_format_rejects_non_finite(self):
        with pytest.raises(CanonicalizationException):
            format_amount_canonical(Decimal("NaN"))
        with pytest.raises(CanonicalizationException):
            format_amount_canonical(Decimal("Infinity"))

    @pytest.mark.parametrize("value", [Decimal("1E+50000000"), Decimal("1E-50000000"), Decimal("1E+19")])
    def test_format_rejects_out_of_range(self, value):
        with pytest.raises(CanonicalizationException) as exc_info:
            format_amount_canonical(value)
        assert exc_info.value.details["path"] == "amount"

    def test_zero_formats_regardless_of_exponent(self):
        assert format_amount_canonical(Decimal("0E+50000000")) == "0"

    def test_bounds_count_significant_digits_only(self):
        assert check_amount_bounds(Decimal("1.500000000000000000000000000000000000000000")) == Decimal("1.5")
        with pytest.raises(ValueError):
            check_amount_bounds(Decimal("1." + "1" * MAX_AMOUNT_DIGITS))

    def test_bounds_on_magnitude(self):
        assert check_amount_bounds(Decimal(f"9E+{MAX_AMOUNT_EXPONENT}"))
        assert check_amount_bounds(Decimal(f"1E{MIN_AMOUNT_EXPONENT}"))
        with pytest.raises(ValueError):
            check_amount_bounds(Decimal(f"1E+{MAX_AMOUNT_EXPONENT + 1}"))
        with pytest.raises(ValueError):
            check_amount_bounds(Decimal(f"9E{MIN_AMOUNT_EXPONENT - 1}"))

    def test_float_converted_without_binary_artifacts(self):
        assert to_decimal(10.2) == Decimal("10.2")
        assert to_decimal(0.1) == Decimal("0.1")

    def test_int_and_str_converted(self):
        assert to_decimal(10) == Decimal(10)
        assert to_decimal("10.2") == Decimal("10.2")

    def test_bool_rejected(self):
        with pytest.raises(TypeError):
            to_decimal(True)

    def test_invalid_literal_rejected(self):
        with pytest.raises(ValueError):
            to_decimal("ten")


# =============================================================================
# canonicalize_transaction
# =============================================================================


class TestCanonicalizeTransaction:
    """Tests for the canonical transaction form."""

    def test_reference_transaction_bytes(self):
        assert canonicalize_transaction(make_transaction_fields()) == REFERENCE_CANONICAL

    def test_model_and_mapping_produce_same_bytes(self):
        fields = make_transaction_fields()
        model = Transaction.model_validate(fields)
        assert canonicalize_transaction(model) == canonicalize_transaction(fields)

    def test_insertion_order_does_not_matter(self):
        fields = make_transaction_fields()
        reversed_fields = dict(reversed(list(fields.items())))
        assert list(reversed_fields) != list(fields)
        assert canonicalize_transaction(reversed_fields) == canonicalize_transaction(fields)

    def test_deterministic(self):
        fields = make_transaction_fields()
        assert canonicalize_transaction(fields) == canonicalize_transaction(fields)

    def test_fields_emitted_in_fixed_order(self):
        text = canonicalize_transaction(make_transaction_fields()).decode("utf-8")
        positions = [text.index(f'"{name}"') for name in CANONICAL_FIELD_ORDER]
        assert positions == sorted(positions)

    def test_equivalent_representations_agree(self):
        as_float = make_transaction_fields(amount=10.2, created_at="2024-11-18T07:13:42.582Z")
        as_decimal = make_transaction_fields(amount=Decimal("10.20"), created_at=REFERENCE_CREATED_AT)
        as_offset = make_transaction_fields(amount="10.2", created_at="2024-11-18T08:13:42.582+01:00")
        assert (
            canonicalize_transaction(as_float)
            == canonicalize_transaction(as_decimal)
            == canonicalize_transaction(as_offset)
        )

    def test_missing_remark_serializes_as_empty_string(self):
        fields = make_transaction_fields()
        del fields["remark"]
        assert b'"remark":""' in canonicalize_transaction(fields)

    def test_non_ascii_kept_literal(self):
        result = canonicalize_transaction(make_transaction_fields(remark="Café ☕"))
        assert '"remark":"Café ☕"'.encode("utf-8") in result

    def test_quotes_are_escaped(self):
        result = canonicalize_transaction(make_transaction_fields(remark='say "hi"'))
        assert b'"remark":"say \\"hi\\""' in result

    def test_signature_must_be_stripped(self):
        with pytest.raises(CanonicalizationException):
            canonicalize_transaction(make_transaction_fields(signature="abc"))

    def test_unknown_field_rejected(self):
        with pytest.raises(CanonicalizationException):
            canonicalize_transaction(make_transaction_fields(merchant="acme"))

    def test_missing_field_rejected(self):
        fields = make_transaction_fields()
        del fields["currency"]
        with pytest.raises(CanonicalizationException):
            canonicalize_transaction(fields)

    def test_non_string_currency_rejected(self):
        with pytest.raises(CanonicalizationException):
            canonicalize_transaction(make_transaction_fields(currency=840))

    def test_bad_timestamp_rejected(self):
        with pytest.raises(CanonicalizationException):
            canonicalize_transaction(make_transaction_fields(created_at="not a date"))

    def test_unsupported_input_type_rejected(self):
        with pytest.raises(CanonicalizationException):
            canonicalize_transaction(["USD", 10.2])


# =============================================================================
# Wire payload
# =============================================================================


class TestPayload:
    """Tests for dumps_payload / loads_payload."""

    def test_dumps_appends_signature_last(self):
        text = dumps_payload({**make_transaction_fields(), "signature": "c2ln"})
        assert text == REFERENCE_CANONICAL.decode("utf-8")[:-1] + ',"signature":"c2ln"}'

    def test_loads_keeps_amount_exact(self):
        data = loads_payload('{"amount": 12345678901234567.89}')
        assert data["amount"] == Decimal("12345678901234567.89")

    def test_loads_accepts_bytes(self):
        assert loads_payload(b'{"currency": "USD"}') == {"currency": "USD"}

    def test_loads_rejects_invalid_json(self):
        with pytest.raises(MalformedInputException):
            loads_payload("{not json")

    def test_loads_rejects_non_object(self):
        with pytest.raises(MalformedInputException):
            loads_payload("[1, 2, 3]")

    def test_loads_rejects_invalid_utf8(self):
        with pytest.raises(MalformedInputException):
            loads_payload(b"\xff\xfe")

    @pytest.mark.skipif(not hasattr(sys, "get_int_max_str_digits"), reason="no int digit limit")
    def test_loads_rejects_oversized_integer_literal(self):
        with pytest.raises(MalformedInputException):
            loads_payload('{"amount": ' + "9" * 5000 + "}")
