"""
API Request Models

Pydantic models for API request validation.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


class SignRequest(BaseModel):
    """Request body for POST /sign endpoint."""

    currency: str = Field(
        ...,
        description="Three-letter currency code",
        examples=["USD"],
    )
    amount: Decimal = Field(
        ...,
        description="Positive decimal amount",
        examples=["10.2"],
    )
    remark: str = Field(
        default="",
        max_length=1000,
        description="Free-text remark",
    )


class VerifyRequest(BaseModel):
    """Request body for POST /verify endpoint."""

    payload: dict[str, Any] | str = Field(
        ...,
        description="Signed transaction: the JSON object or its text as scanned from the QR code",
    )
    max_age_seconds: float | None = Field(
        default=None,
        gt=0,
        allow_inf_nan=False,
        description="Narrower freshness window in seconds; values above the server window are capped to it",
    )
