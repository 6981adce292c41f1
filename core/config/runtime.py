"""
Runtime Configuration

Central configuration for signing/verification deployments: the fixed
signature algorithm, the freshness window, key file locations and logging.
"""

from __future__ import annotations

import copy
import json
import math
import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from core.crypto.signatures import DEFAULT_ALGORITHM, SignatureAlgorithm, resolve_algorithm
from core.schemas.errors import ConfigException, UnsupportedAlgorithmException

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "QRPAY_"

# Config file search order when no explicit path is given
DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("qrpay.json"),
    Path(".qrpay.json"),
    Path("~/.config/qrpay/config.json"),
)


@dataclass
class ProtocolConfig:
    """Protocol parameters shared by signer and verifier."""
    algorithm: SignatureAlgorithm = DEFAULT_ALGORITHM
    max_age_seconds: float = 300.0
    allowed_currencies: list[str] = field(default_factory=list)

    def __post_init__(self):
        try:
            self.algorithm = resolve_algorithm(self.algorithm)
        except UnsupportedAlgorithmException as e:
            raise ConfigException(e.message, setting="algorithm", details=e.details) from e
        try:
            self.max_age_seconds = float(self.max_age_seconds)
        except (TypeError, ValueError, OverflowError) as e:
            raise ConfigException(
                f"max_age_seconds must be a number, got {self.max_age_seconds!r}",
                setting="max_age_seconds",
            ) from e
        if not math.isfinite(self.max_age_seconds) or self.max_age_seconds <= 0:
            raise ConfigException(
                f"max_age_seconds must be a positive finite number, got {self.max_age_seconds}",
                setting="max_age_seconds",
            )
        try:
            timedelta(seconds=self.max_age_seconds)
        except OverflowError as e:
            raise ConfigException(
                f"max_age_seconds out of range: {self.max_age_seconds}",
                setting="max_age_seconds",
            ) from e
        if isinstance(self.allowed_currencies, str):
            self.allowed_currencies = self.allowed_currencies.split(",")
        self.allowed_currencies = [
            code.strip().upper() for code in self.allowed_currencies if code.strip()
        ]

    @property
    def max_age(self) -> timedelta:
        return timedelta(seconds=self.max_age_seconds)


@dataclass
class KeysConfig:
    """Locations of the PEM key files (read by the CLI and API only)."""
    private_key_path: Optional[str] = "private.pem"
    public_key_path: Optional[str] = "public.pem"

    def read_private_key(self) -> bytes:
        return _read_key_file(self.private_key_path, "private_key_path")

    def read_public_key(self) -> bytes:
        return _read_key_file(self.public_key_path, "public_key_path")


def _read_key_file(path: Optional[str], setting: str) -> bytes:
    if not path:
        raise ConfigException(f"No key file configured ({setting})", setting=setting)
    key_path = Path(path).expanduser()
    if not key_path.exists():
        raise ConfigException(f"Key file not found: {key_path}", setting=setting)
    return key_path.read_bytes()


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables
    - JSON or YAML file
    - Programmatic construction
    """
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)
    keys: KeysConfig = field(default_factory=KeysConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        This is the SINGLE source of truth for all env var reading.

        Supported variables:
        - QRPAY_ALGORITHM: Signature algorithm name
        - QRPAY_MAX_AGE_SECONDS: Freshness window in seconds
        - QRPAY_ALLOWED_CURRENCIES: Comma separated currency codes
        - QRPAY_PRIVATE_KEY_PATH / QRPAY_PUBLIC_KEY_PATH: PEM file paths
        - QRPAY_LOG_LEVEL / QRPAY_LOG_FILE: Logging
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}ALGORITHM"):
            overrides.setdefault("protocol", {})["algorithm"] = os.getenv(f"{ENV_PREFIX}ALGORITHM")
        if os.getenv(f"{ENV_PREFIX}MAX_AGE_SECONDS"):
            overrides.setdefault("protocol", {})["max_age_seconds"] = os.getenv(
                f"{ENV_PREFIX}MAX_AGE_SECONDS"
            )
        if os.getenv(f"{ENV_PREFIX}ALLOWED_CURRENCIES"):
            overrides.setdefault("protocol", {})["allowed_currencies"] = os.getenv(
                f"{ENV_PREFIX}ALLOWED_CURRENCIES"
            )

        if os.getenv(f"{ENV_PREFIX}PRIVATE_KEY_PATH"):
            overrides.setdefault("keys", {})["private_key_path"] = os.getenv(
                f"{ENV_PREFIX}PRIVATE_KEY_PATH"
            )
        if os.getenv(f"{ENV_PREFIX}PUBLIC_KEY_PATH"):
            overrides.setdefault("keys", {})["public_key_path"] = os.getenv(
                f"{ENV_PREFIX}PUBLIC_KEY_PATH"
            )

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """
        Load configuration purely from environment variables.

        Uses defaults for any values not specified in env vars.
        """
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_json(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load a JSON or YAML file, chosen by extension."""
        path = Path(path)
        if path.suffix.lower() in (".yaml", ".yml"):
            return cls.from_yaml(path)
        return cls.from_json(path)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        if not isinstance(data, dict):
            raise ConfigException(f"Config must be a mapping, got {type(data).__name__}")

        protocol_data = data.get("protocol", {}) or {}
        keys_data = data.get("keys", {}) or {}
        logging_data = data.get("logging", {}) or {}

        try:
            protocol = ProtocolConfig(**protocol_data)
            keys = KeysConfig(**keys_data)
            logging_config = LoggingConfig(**logging_data)
        except TypeError as e:
            raise ConfigException(f"Unknown configuration setting: {e}") from e

        return cls(
            protocol=protocol,
            keys=keys,
            logging=logging_config,
            extra=data.get("extra", {}),
        )

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        merged = self.to_dict()
        for section, values in overrides.items():
            merged.setdefault(section, {}).update(values)
        return RuntimeConfig.from_dict(merged)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "protocol": {
                "algorithm": self.protocol.algorithm.value,
                "max_age_seconds": self.protocol.max_age_seconds,
                "allowed_currencies": list(self.protocol.allowed_currencies),
            },
            "keys": {
                "private_key_path": self.keys.private_key_path,
                "public_key_path": self.keys.public_key_path,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "extra": copy.deepcopy(self.extra),
        }


def find_config_file(config_path: Path | None = None) -> Path | None:
    """Return the explicit path, or the first existing default location."""
    if config_path is not None:
        return config_path
    for candidate in DEFAULT_CONFIG_PATHS:
        resolved = candidate.expanduser()
        if resolved.exists():
            return resolved
    return None


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings.

    Raises:
        FileNotFoundError: If an explicit config_path does not exist.
        ConfigException: If a setting is invalid.
    """
    path = find_config_file(config_path)
    config = RuntimeConfig.from_file(path) if path is not None else RuntimeConfig()
    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return json.dumps(RuntimeConfig().to_dict(), indent=2) + "\n"
