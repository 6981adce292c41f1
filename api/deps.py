"""
API Dependencies

Dependency injection for the API.
Provides factories for configuration, signer, verifier and clock.
"""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import Depends

from api.errors import KeyUnavailableError
from core.config import RuntimeConfig, load_config
from core.protocol import Signer, Verifier, utc_now
from core.schemas.errors import ConfigException, InvalidKeyException

logger = logging.getLogger(__name__)


def get_runtime_config() -> RuntimeConfig:
    """Load RuntimeConfig from config file, then overlay environment variables.

    Search order for config file:
      1. ./qrpay.json
      2. ./.qrpay.json
      3. ~/.config/qrpay/config.json

    Environment variables ALWAYS override config file values.
    The .env file is loaded automatically by core.config.runtime on import.
    """
    return load_config()


def get_clock():
    """Clock used for signing and freshness checks."""
    return utc_now


def get_signer(config: RuntimeConfig = Depends(get_runtime_config)) -> Signer:
    """Build a Signer from the configured private key."""
    try:
        return Signer(
            config.keys.read_private_key(),
            algorithm=config.protocol.algorithm,
            allowed_currencies=config.protocol.allowed_currencies,
        )
    except (ConfigException, InvalidKeyException, OSError) as e:
        logger.error(f"Signing key unavailable: {e}")
        raise KeyUnavailableError() from e


def get_verifier(config: RuntimeConfig = Depends(get_runtime_config)) -> Verifier:
    """Build a Verifier from the configured public key."""
    try:
        return Verifier(
            config.keys.read_public_key(),
            algorithm=config.protocol.algorithm,
            max_age=config.protocol.max_age,
        )
    except (ConfigException, InvalidKeyException, OSError) as e:
        logger.error(f"Verification key unavailable: {e}")
        raise KeyUnavailableError("Verification key is not available") from e


def current_time(clock=Depends(get_clock)) -> datetime:
    """The request's notion of 'now', read once at the route boundary."""
    return clock()
