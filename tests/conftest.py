"""Shared fixtures for podcatalog tests."""

from typing import Any

import pytest

from podcatalog.config.schema import FetchConfig
from podcatalog.utils.retry import TEST_RETRY_CONFIG


@pytest.fixture(autouse=True)
def fast_retry_config(monkeypatch):
    """Use fast retry configuration for all tests to avoid long delays."""
    monkeypatch.setattr("podcatalog.utils.retry.DEFAULT_RETRY_CONFIG", TEST_RETRY_CONFIG)
    monkeypatch.setattr("podcatalog.episodes.fetcher.DEFAULT_RETRY_CONFIG", TEST_RETRY_CONFIG)


@pytest.fixture
def fast_fetch_config() -> FetchConfig:
    """Fetch config without inter-batch delay or retries."""
    return FetchConfig(batch_delay_ms=0, max_attempts=1)


@pytest.fixture
def sample_config_dict() -> dict[str, Any]:
    """Sample configuration dictionary."""
    return {
        "version": "1",
        "log_level": "INFO",
        "default_show_id": "show123",
        "spotify": {"client_id": "abc", "market": "GB"},
        "fetch": {"page_size": 50, "batch_size": 5, "batch_delay_ms": 100},
        "browse": {"default_page_size": 20},
    }
