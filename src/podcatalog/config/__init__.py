"""Configuration loading, storage and logging setup."""

from podcatalog.config.manager import ConfigManager
from podcatalog.config.schema import BrowseConfig, FetchConfig, GlobalConfig, SpotifyConfig

__all__ = ["ConfigManager", "GlobalConfig", "SpotifyConfig", "FetchConfig", "BrowseConfig"]
