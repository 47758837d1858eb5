"""Pytest configuration for objpool tests."""

import pytest

POOL_ENV_VARS = ("POOL_MINIMUM", "POOL_MAXIMUM", "POOL_BOUND", "POOL_CONFIG", "LOG_LEVEL")


@pytest.fixture(autouse=True)
def clean_pool_env(monkeypatch):
    """Start every test without POOL_* variables (a developer .env may set them)."""
    for name in POOL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
