"""
CLI Verify Command

Verify a signed transaction payload offline, against the current time.
This is the trusted operator view: the full rejection reason is shown.

Usage:
    qrpay verify payload.json [--public-key PATH] [--max-age SECONDS] [--json] [--debug]
    cat payload.json | qrpay verify -
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from core.config import RuntimeConfig
from core.protocol import Verifier, utc_now
from core.schemas.canonical import format_timestamp_canonical
from core.schemas.errors import ConfigException, QRPayException
from core.schemas.verification import VerificationOutcome


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of payload verification for CLI output."""
    payload_path: str = ""
    valid: bool = False
    reason: str | None = None
    fingerprint: str | None = None
    created_at: str | None = None
    checks: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        for key in ("reason", "fingerprint", "created_at"):
            if d[key] is None:
                del d[key]
        if not d["checks"]:
            del d["checks"]
        return d


def read_payload(payload_path: str) -> bytes:
    """Read the payload from a file, or from stdin when the path is '-'."""
    if payload_path == "-":
        return sys.stdin.buffer.read()
    return Path(payload_path).read_bytes()


def read_public_key(args: Namespace, config: RuntimeConfig) -> bytes:
    """Read the PEM public key from --public-key or the configured path."""
    if args.public_key:
        path = Path(args.public_key).expanduser()
        if not path.exists():
            raise ConfigException(f"Key file not found: {path}", setting="public_key_path")
        return path.read_bytes()
    return config.keys.read_public_key()


def build_summary(payload_path: str, outcome: VerificationOutcome, debug: bool = False) -> VerifySummary:
    """Build a VerifySummary from a verification outcome."""
    summary = VerifySummary(
        payload_path=payload_path,
        valid=outcome.valid,
        reason=outcome.reason.value if outcome.reason else None,
        fingerprint=outcome.fingerprint,
        created_at=format_timestamp_canonical(outcome.created_at) if outcome.created_at else None,
    )
    if debug:
        summary.checks = [
            {"check_id": c.check_id, "ok": c.ok, "message": c.message}
            for c in outcome.checks
        ]
    return summary


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"payload: {summary.payload_path}")
    print(f"valid: {str(summary.valid).lower()}")
    if summary.reason:
        print(f"reason: {summary.reason}")
    if summary.created_at:
        print(f"created_at: {summary.created_at}")
    if summary.fingerprint:
        print(f"fingerprint: {summary.fingerprint}")

    if summary.checks:
        passed = sum(1 for c in summary.checks if c["ok"])
        failed = len(summary.checks) - passed
        print(f"\nchecks: {passed} passed, {failed} failed")
        for check in summary.checks:
            status = "✓" if check["ok"] else "✗"
            print(f"  {status} {check['check_id']}: {check['message']}")


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config: RuntimeConfig = args.cli_config

    try:
        payload = read_payload(args.payload_path)
    except OSError as e:
        print(f"Error reading payload: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        public_key = read_public_key(args, config)
    except (ConfigException, OSError) as e:
        print(f"Error reading public key: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    max_age = args.max_age if args.max_age is not None else config.protocol.max_age
    try:
        verifier = Verifier(public_key, algorithm=config.protocol.algorithm, max_age=max_age)
    except (QRPayException, ValueError) as e:
        print(f"Error configuring verifier: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    outcome = verifier.verify(payload, now=utc_now())
    summary = build_summary(args.payload_path, outcome, debug=args.debug)

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    if outcome.valid:
        logger.info("Verification passed")
        return EXIT_SUCCESS

    logger.warning(f"Verification failed: {summary.reason}")
    return EXIT_VERIFICATION_FAILED
