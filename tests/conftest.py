"""Pytest configuration and shared fixtures for the cmark_batch test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

import os
from typing import Generator

import pytest
from utils import FakeEngine

from cmark_batch.config import BatchConfig, reset_default_config
from cmark_batch.constants import ENV_PREFIX
from cmark_batch.engine import set_default_engine

# Configure Hypothesis for property-based testing
try:
    from hypothesis import Verbosity, settings

    settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
    settings.register_profile("dev", max_examples=20)
    settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))
except ImportError:
    # Hypothesis not installed, property tests will be skipped
    pass


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")


@pytest.fixture(autouse=True)
def isolated_defaults(monkeypatch) -> Generator[None, None, None]:
    """Keep process-wide defaults and CMARK_BATCH_* variables out of every test."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key)
    reset_default_config()
    set_default_engine(None)
    try:
        yield
    finally:
        reset_default_config()
        set_default_engine(None)


@pytest.fixture
def fake_engine() -> FakeEngine:
    """Provide a recording engine with deterministic output.

    Returns
    -------
    FakeEngine
        Engine rendering ``source`` as ``"{format_code}|{option_bits}|{source}"``.

    """
    return FakeEngine()


@pytest.fixture
def batch_config() -> BatchConfig:
    """Provide a dispatcher config that ignores files and the environment."""
    return BatchConfig(max_workers=4)
