"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m qrpay_cli sign --currency USD --amount 10.2 [--remark TEXT] [--out PATH] [--json]
    python -m qrpay_cli verify <payload_path|-> [--max-age SECONDS] [--json] [--debug]
    python -m qrpay_cli config --init|--show

Environment Variables:
    QRPAY_ALGORITHM             Signature algorithm (default: rsa-pkcs1v15-sha256)
    QRPAY_MAX_AGE_SECONDS       Freshness window in seconds (default: 300)
    QRPAY_ALLOWED_CURRENCIES    Comma separated currency codes accepted by the signer
    QRPAY_PRIVATE_KEY_PATH      PEM private key (default: private.pem)
    QRPAY_PUBLIC_KEY_PATH       PEM public key (default: public.pem)
    QRPAY_LOG_LEVEL             Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from core.config import get_default_config_template, load_config
from core.schemas.errors import ConfigException
from qrpay_cli import __version__
from qrpay_cli.commands import sign, verify


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="qrpay",
        description="QRPay CLI - Sign transactions for QR codes and verify them offline.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./qrpay.json or ~/.config/qrpay/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- sign command ---
    sign_parser = subparsers.add_parser(
        "sign",
        help="Sign a transaction",
        description="Sign a transaction with the configured private key, stamped with the current time.",
    )
    sign_parser.add_argument(
        "--currency",
        type=str,
        required=True,
        help="Three-letter currency code, e.g. USD",
    )
    sign_parser.add_argument(
        "--amount",
        type=str,
        required=True,
        help="Positive decimal amount, e.g. 10.2",
    )
    sign_parser.add_argument(
        "--remark",
        type=str,
        default="",
        help="Free-text remark",
    )
    sign_parser.add_argument(
        "--private-key",
        type=str,
        default=None,
        help="PEM private key path (overrides config)",
    )
    sign_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the payload JSON to this file",
    )
    sign_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    sign_parser.set_defaults(func=sign.sign_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify a signed payload offline",
        description="Check the signature and freshness window of a signed transaction payload.",
    )
    verify_parser.add_argument(
        "payload_path",
        type=str,
        help="Path to the payload JSON file, or '-' for stdin",
    )
    verify_parser.add_argument(
        "--public-key",
        type=str,
        default=None,
        help="PEM public key path (overrides config)",
    )
    verify_parser.add_argument(
        "--max-age",
        type=float,
        default=None,
        help="Freshness window in seconds (overrides config)",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Include detailed checks",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="qrpay.json",
        help="Path for config file (default: qrpay.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("\nEdit this file to configure your settings.")
        print("You can also use environment variables (QRPAY_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    # Default: show help
    print("Usage: qrpay config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    # Load configuration
    try:
        config = load_config(args.config)
    except (ConfigException, FileNotFoundError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Setup logging
    log_level = args.log_level or config.logging.level
    setup_logging(level=log_level, log_file=config.logging.file)

    # Attach config to args for commands to use
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if getattr(args, "debug", False):
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
