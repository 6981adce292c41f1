"""
Runtime Configuration Module

Provides configuration loading and management for signing/verification.
"""

from .runtime import (
    ENV_PREFIX,
    KeysConfig,
    LoggingConfig,
    ProtocolConfig,
    RuntimeConfig,
    find_config_file,
    get_default_config_template,
    load_config,
)

__all__ = [
    "ENV_PREFIX",
    "KeysConfig",
    "LoggingConfig",
    "ProtocolConfig",
    "RuntimeConfig",
    "find_config_file",
    "get_default_config_template",
    "load_config",
]
