"""
FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api.routes import health, sign, verify
from api.errors import (
    APIError,
    api_error_handler,
    generic_error_handler,
    validation_error_handler,
)
from core.config import load_config
from core.schemas.errors import ConfigException


# Log level from QRPAY_LOG_LEVEL or the config file
def _resolve_log_level() -> int:
    """Resolve log level from env var or config file, defaulting to INFO."""
    try:
        raw = load_config().logging.level
    except (ConfigException, OSError, ValueError):
        raw = None
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="QRPay Verification API",
        description="""
HTTP API for signing and verifying QR transaction payloads.

## Endpoints

- **POST /sign** - Sign a transaction with the server key
- **POST /verify** - Verify a scanned payload (signature + 5 minute window by default)
- **GET /health** - Health check

Verification failures are reported as `signature_invalid` or `expired`.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(sign.router)
    app.include_router(verify.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
