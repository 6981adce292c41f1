"""
QRPay CLI

Command-line interface for signing and verifying QR transaction payloads.

Usage:
    python -m qrpay_cli sign --currency USD --amount 10.2 --remark "Payment for service"
    python -m qrpay_cli verify payload.json
    python -m qrpay_cli config --init
"""

__version__ = "0.1.0"
