"""API request and response models."""

from api.models.requests import SignRequest, VerifyRequest
from api.models.responses import (
    HealthResponse,
    SignResponse,
    VerifyResponse,
    ErrorDetail,
    ErrorResponse,
)

__all__ = [
    "SignRequest",
    "VerifyRequest",
    "HealthResponse",
    "SignResponse",
    "VerifyResponse",
    "ErrorDetail",
    "ErrorResponse",
]
