"""
Schemas & Canonicalization
File: verification.py

Purpose: Result format for signed-transaction verification.
The verifier reports outcomes through these models instead of raising.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import QRPayError


# Severity levels for checks
CheckSeverity = Literal["info", "warn", "error"]


class VerificationReason(str, Enum):
    """Why a signed transaction was rejected."""

    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"
    MALFORMED_INPUT = "malformed_input"


class CheckResult(BaseModel):
    """
    Result of a single verification check.

    Checks are atomic verification steps that can pass or fail.
    """

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(
        ...,
        description="Unique identifier for this check",
        min_length=1,
    )
    ok: bool = Field(
        ...,
        description="Whether the check passed",
    )
    severity: CheckSeverity = Field(
        ...,
        description="Severity level of this check",
    )
    message: str = Field(
        ...,
        description="Human-readable message describing the result",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional details about the check",
    )

    @property
    def is_error(self) -> bool:
        """Check if this is an error-level failure."""
        return not self.ok and self.severity == "error"

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a passed check result."""
        return cls(
            check_id=check_id,
            ok=True,
            severity="info",
            message=message,
            details=details or {},
        )

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        """Create a failed check result."""
        return cls(
            check_id=check_id,
            ok=False,
            severity="error",
            message=message,
            details=details or {},
        )


class VerificationOutcome(BaseModel):
    """
    Complete result of verifying one signed transaction.

    ``reason`` is the trusted, internal reason. Anything shown to an
    untrusted party should use ``public_reason``, which does not reveal
    whether a payload was malformed or carried a bad signature.
    """

    model_config = ConfigDict(extra="forbid")

    valid: bool = Field(
        ...,
        description="Whether the transaction is authentic and fresh",
    )
    reason: VerificationReason | None = Field(
        default=None,
        description="Rejection reason; None when valid",
    )
    checks: list[CheckResult] = Field(
        default_factory=list,
        description="Individual check results, in evaluation order",
    )
    fingerprint: str | None = Field(
        default=None,
        description="0x-hex SHA-256 of the canonical form, when it could be computed",
    )
    created_at: datetime | None = Field(
        default=None,
        description="Signing time carried by the payload, when it could be parsed",
    )
    error: QRPayError | None = Field(
        default=None,
        description="Structured error for malformed input",
    )

    def __bool__(self) -> bool:
        return self.valid

    @property
    def public_reason(self) -> VerificationReason | None:
        """Reason safe to expose to untrusted callers."""
        if self.reason is VerificationReason.MALFORMED_INPUT:
            return VerificationReason.SIGNATURE_INVALID
        return self.reason

    def get_failed_checks(self) -> list[CheckResult]:
        """Get all failed checks."""
        return [check for check in self.checks if not check.ok]

    def get_error_messages(self) -> list[str]:
        """Get all error messages."""
        return [check.message for check in self.checks if check.is_error]

    @classmethod
    def accepted(
        cls,
        checks: list[CheckResult],
        fingerprint: str | None = None,
        created_at: datetime | None = None,
    ) -> "VerificationOutcome":
        """Create a valid outcome."""
        return cls(valid=True, checks=checks, fingerprint=fingerprint, created_at=created_at)

    @classmethod
    def rejected(
        cls,
        reason: VerificationReason,
        checks: list[CheckResult],
        fingerprint: str | None = None,
        created_at: datetime | None = None,
        error: QRPayError | None = None,
    ) -> "VerificationOutcome":
        """Create a rejected outcome."""
        return cls(
            valid=False,
            reason=reason,
            checks=checks,
            fingerprint=fingerprint,
            created_at=created_at,
            error=error,
        )
