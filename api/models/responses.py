"""
API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field

from core.schemas.versioning import PROTOCOL_VERSION


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "qrpay-api"
    version: str = PROTOCOL_VERSION


class SignResponse(BaseModel):
    """Response for POST /sign endpoint."""

    ok: bool = Field(..., description="Whether signing succeeded")
    payload: str = Field(..., description="Signed transaction JSON text, ready for a QR code")
    transaction: dict[str, Any] = Field(..., description="Signed transaction as an object")
    fingerprint: str = Field(..., description="SHA-256 of the canonical form")
    algorithm: str = Field(..., description="Signature algorithm used")


class VerifyResponse(BaseModel):
    """
    Response for POST /verify endpoint.

    ``reason`` never distinguishes malformed payloads from bad signatures.
    """

    ok: bool = Field(..., description="Whether the request was processed")
    valid: bool = Field(..., description="Whether the transaction is authentic and fresh")
    reason: str | None = Field(
        default=None,
        description="Rejection reason: signature_invalid or expired",
    )
    created_at: str | None = Field(default=None, description="Signing time of a well-formed payload")
    fingerprint: str | None = Field(default=None, description="SHA-256 of the canonical form")


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
