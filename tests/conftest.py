"""
Pytest configuration and shared fixtures for QRPay protocol tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

from fixtures import (  # noqa: E402
    make_rsa_key_pair,
    make_signed_transaction,
    make_transaction_fields,
)


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def k1():
    """Signing key pair K1 (RSA)."""
    return make_rsa_key_pair("k1")


@pytest.fixture
def k2():
    """A second, unrelated RSA key pair."""
    return make_rsa_key_pair("k2")


@pytest.fixture
def reference_fields():
    """Unsigned reference transaction fields."""
    return make_transaction_fields()


@pytest.fixture
def signed_reference(k1):
    """Reference transaction signed with K1 at its created_at."""
    return make_signed_transaction(k1)


@pytest.fixture(autouse=True)
def _isolate_qrpay_env(monkeypatch):
    """Keep QRPAY_* variables from the developer's shell out of the tests."""
    import os
    for name in list(os.environ):
        if name.startswith("QRPAY_"):
            monkeypatch.delenv(name, raising=False)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_check_passed():
    """Helper to assert a specific check passed in a VerificationOutcome."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert checks[0].ok, f"Check '{check_id}' failed: {checks[0].message}"
    return _assert


@pytest.fixture
def assert_check_failed():
    """Helper to assert a specific check failed in a VerificationOutcome."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert not checks[0].ok, f"Check '{check_id}' unexpectedly passed"
    return _assert
