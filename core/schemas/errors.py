"""
Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the signed-transaction protocol.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the protocol."""

    # Signing-time errors
    INVALID_KEY = "INVALID_KEY"
    INVALID_TRANSACTION = "INVALID_TRANSACTION"
    UNSUPPORTED_ALGORITHM = "UNSUPPORTED_ALGORITHM"

    # Verification-time errors
    MALFORMED_INPUT = "MALFORMED_INPUT"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    EXPIRED = "EXPIRED"

    # Serialization
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Runtime configuration
    CONFIG_ERROR = "CONFIG_ERROR"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class QRPayError(BaseModel):
    """
    Base error model for structured error communication.

    Used for passing errors inside results (and API bodies) without raising.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.MALFORMED_INPUT],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )

    def to_exception(self) -> "QRPayException":
        """Convert this error model to a raised exception."""
        return QRPayException(
            code=self.code,
            message=self.message,
            details=self.details,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class QRPayException(Exception):
    """
    Base exception for all protocol errors.

    Carries structured error information and can be converted to/from
    QRPayError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "QRPAY_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_error_model(self) -> QRPayError:
        """Convert this exception to a QRPayError model."""
        return QRPayError(
            code=self.code,
            message=self.message,
            details=self.details,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(QRPayException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
        )


class InvalidKeyException(QRPayException):
    """Raised when a PEM key is malformed or does not fit the algorithm."""

    def __init__(
        self,
        message: str,
        algorithm: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if algorithm:
            full_details["algorithm"] = algorithm
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_KEY,
            details=full_details,
        )


class InvalidTransactionException(QRPayException):
    """Raised at signing time when transaction fields are missing or out of range."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_TRANSACTION,
            details=full_details,
        )


class MalformedInputException(QRPayException):
    """Raised while parsing a signed payload that is missing or corrupt."""

    def __init__(
        self,
        message: str,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=ErrorCodes.MALFORMED_INPUT,
            details=full_details,
        )


class UnsupportedAlgorithmException(QRPayException):
    """Raised when a signature algorithm name is not recognised."""

    def __init__(self, algorithm: str, supported: list[str] | None = None) -> None:
        super().__init__(
            message=f"Unsupported signature algorithm: '{algorithm}'",
            code=ErrorCodes.UNSUPPORTED_ALGORITHM,
            details={"algorithm": algorithm, "supported": supported or []},
        )


class ConfigException(QRPayException):
    """Raised when runtime configuration is invalid."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if setting:
            full_details["setting"] = setting
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIG_ERROR,
            details=full_details,
        )
