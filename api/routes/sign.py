"""
Sign Route

Sign a transaction with the server's private key.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from api.deps import current_time, get_signer
from api.errors import APIError
from api.models.requests import SignRequest
from api.models.responses import SignResponse
from core.crypto.hashing import transaction_fingerprint
from core.protocol import Signer
from core.schemas.errors import InvalidTransactionException


logger = logging.getLogger(__name__)

router = APIRouter(tags=["signing"])


@router.post("/sign", response_model=SignResponse)
def sign_transaction(
    request: SignRequest,
    signer: Signer = Depends(get_signer),
    now: datetime = Depends(current_time),
) -> SignResponse:
    """
    Sign a transaction.

    created_at is always taken from the server clock.
    """
    try:
        signed = signer.sign(request.model_dump(), now=now)
    except InvalidTransactionException as e:
        raise APIError.from_exception(e, status_code=400)

    return SignResponse(
        ok=True,
        payload=signed.to_payload(),
        transaction=signed.model_dump(mode="json"),
        fingerprint=transaction_fingerprint(signed.unsigned()),
        algorithm=signer.algorithm.value,
    )
