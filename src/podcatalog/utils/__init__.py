"""Utility functions and helpers for podcatalog."""

from podcatalog.utils.errors import (
    ConfigError,
    EncryptionError,
    FatalFetchError,
    FetchError,
    InvalidConfigError,
    InvalidFilterError,
    InvalidPageSizeError,
    OutOfRangeError,
    PodcatalogError,
    SourceError,
    ValidationError,
)
from podcatalog.utils.paths import get_config_dir

__all__ = [
    # Errors
    "PodcatalogError",
    "ConfigError",
    "InvalidConfigError",
    "EncryptionError",
    "SourceError",
    "FetchError",
    "FatalFetchError",
    "ValidationError",
    "OutOfRangeError",
    "InvalidFilterError",
    "InvalidPageSizeError",
    # Paths
    "get_config_dir",
]
