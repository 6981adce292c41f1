"""
CLI Sign Command

Sign a transaction with the configured private key and print the
payload that goes into the QR code.

Usage:
    qrpay sign --currency USD --amount 10.2 [--remark TEXT] [--private-key PATH] [--out PATH] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from core.config import RuntimeConfig
from core.crypto.hashing import transaction_fingerprint
from core.protocol import sign_transaction
from core.schemas.errors import ConfigException, QRPayException


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


@dataclass
class SignSummary:
    """Summary of a signing run for CLI output."""
    payload: str = ""
    fingerprint: str = ""
    algorithm: str = ""
    created_at: str = ""
    output_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if d["output_path"] is None:
            del d["output_path"]
        return d


def read_private_key(args: Namespace, config: RuntimeConfig) -> bytes:
    """Read the PEM private key from --private-key or the configured path."""
    if args.private_key:
        path = Path(args.private_key).expanduser()
        if not path.exists():
            raise ConfigException(f"Key file not found: {path}", setting="private_key_path")
        return path.read_bytes()
    return config.keys.read_private_key()


def sign_cmd(args: Namespace) -> int:
    """
    Execute the sign command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config: RuntimeConfig = args.cli_config

    try:
        private_key = read_private_key(args, config)
    except (ConfigException, OSError) as e:
        print(f"Error reading private key: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        signed = sign_transaction(
            {"currency": args.currency, "amount": args.amount, "remark": args.remark},
            private_key,
            algorithm=config.protocol.algorithm,
            allowed_currencies=config.protocol.allowed_currencies,
        )
    except QRPayException as e:
        print(f"Error signing transaction: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    summary = SignSummary(
        payload=signed.to_payload(),
        fingerprint=transaction_fingerprint(signed.unsigned()),
        algorithm=config.protocol.algorithm.value,
        created_at=signed.created_at_text,
    )

    if args.out:
        out_path = Path(args.out)
        try:
            out_path.write_text(summary.payload + "\n", encoding="utf-8")
        except OSError as e:
            print(f"Error writing payload: {e}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR
        summary.output_path = str(out_path)
        logger.info(f"Wrote signed payload to {out_path}")

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    elif summary.output_path:
        print(f"payload written: {summary.output_path}")
        print(f"fingerprint: {summary.fingerprint}")
    else:
        print(summary.payload)

    return EXIT_SUCCESS
