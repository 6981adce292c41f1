"""
Verify Route

Verify a signed transaction scanned from a QR code.

The response only ever reports signature_invalid or expired; malformed
payloads are folded into signature_invalid so the endpoint cannot be used
to learn which field was tampered with. The server log keeps the real
reason.

A request may narrow the freshness window but never widen it past the
server's configured window.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends

from api.deps import current_time, get_verifier
from api.errors import InvalidRequestError
from api.models.requests import VerifyRequest
from api.models.responses import VerifyResponse
from core.protocol import Verifier, coerce_max_age
from core.schemas.canonical import format_timestamp_canonical


logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])


def _request_window(verifier: Verifier, max_age_seconds: float | None) -> timedelta:
    if max_age_seconds is None:
        return verifier.max_age
    try:
        requested = coerce_max_age(max_age_seconds)
    except ValueError as e:
        raise InvalidRequestError(str(e), details={"field": "max_age_seconds"}) from e
    return min(requested, verifier.max_age)


@router.post("/verify", response_model=VerifyResponse)
def verify_transaction(
    request: VerifyRequest,
    verifier: Verifier = Depends(get_verifier),
    now: datetime = Depends(current_time),
) -> VerifyResponse:
    """
    Verify a signed transaction against the server clock.
    """
    window = _request_window(verifier, request.max_age_seconds)
    outcome = verifier.verify(request.payload, now, max_age=window)

    if not outcome.valid:
        logger.info(f"Verification rejected: {outcome.reason.value}")
        public_reason = outcome.public_reason
        return VerifyResponse(
            ok=True,
            valid=False,
            reason=public_reason.value if public_reason else None,
        )

    return VerifyResponse(
        ok=True,
        valid=True,
        created_at=format_timestamp_canonical(outcome.created_at),
        fingerprint=outcome.fingerprint,
    )
