"""
CLI command modules.
"""

from qrpay_cli.commands import sign, verify

__all__ = ["sign", "verify"]
