"""
Minimal API (FastAPI)

HTTP API for the QR transaction protocol:
- POST /sign - Sign a transaction
- POST /verify - Verify a signed payload
- GET /health - Health check

Usage:
    uvicorn api.app:app --reload
"""

__version__ = "0.1.0"
