"""API route handlers."""

from api.routes import health, sign, verify

__all__ = ["health", "sign", "verify"]
