"""Configuration manager for loading and saving podcatalog config."""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from podcatalog.config.crypto import SecretBox
from podcatalog.config.defaults import DEFAULT_GLOBAL_CONFIG, get_default_config_content
from podcatalog.config.precedence import resolve_config_value
from podcatalog.config.schema import GlobalConfig
from podcatalog.utils.errors import ConfigError, InvalidConfigError
from podcatalog.utils.paths import get_config_dir

logger = logging.getLogger(__name__)

CLIENT_ID_ENV = "SPOTIFY_CLIENT_ID"
CLIENT_SECRET_ENV = "SPOTIFY_CLIENT_SECRET"


class ConfigManager:
    """Manages the podcatalog configuration file."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the config manager.

        Args:
            config_dir: Optional custom config directory. Defaults to XDG config dir.
        """
        self.config_dir = config_dir if config_dir is not None else get_config_dir()
        self.config_file = self.config_dir / "config.yaml"
        self.key_file = self.config_dir / ".keyfile"
        self.secrets = SecretBox(self.key_file)

    def load_config(self) -> GlobalConfig:
        """Load and validate configuration, decrypting stored secrets.

        Creates a commented default file on first use.

        Returns:
            Validated GlobalConfig instance

        Raises:
            InvalidConfigError: If the file is not valid YAML or fails validation
        """
        if not self.config_file.exists():
            self._create_default_config()
            return DEFAULT_GLOBAL_CONFIG.model_copy(deep=True)

        try:
            with open(self.config_file) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise InvalidConfigError(f"Invalid YAML in {self.config_file}: {e}") from e

        if not isinstance(data, dict):
            raise InvalidConfigError(f"Invalid configuration in {self.config_file}: expected a mapping")

        spotify = data.get("spotify") or {}
        if not isinstance(spotify, dict):
            raise InvalidConfigError(
                f"Invalid configuration in {self.config_file}: 'spotify' must be a mapping"
            )
        if isinstance(spotify.get("client_secret"), str) and spotify["client_secret"]:
            spotify["client_secret"] = self.secrets.decrypt(spotify["client_secret"])

        try:
            return GlobalConfig(**data)
        except PydanticValidationError as e:
            raise InvalidConfigError(f"Invalid configuration in {self.config_file}: {e}") from e

    def save_config(self, config: GlobalConfig) -> None:
        """Save configuration with the client secret encrypted.

        Args:
            config: GlobalConfig instance to save
        """
        data = config.model_dump(mode="json")
        data["spotify"]["client_secret"] = self.secrets.encrypt(data["spotify"]["client_secret"])

        self.config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.config_file, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    def set_credentials(self, client_id: str, client_secret: str) -> None:
        """Store API client credentials (secret encrypted at rest)."""
        config = self.load_config()
        config.spotify.client_id = client_id
        config.spotify.client_secret = client_secret
        self.save_config(config)
        logger.info(f"Stored API credentials in {self.config_file}")

    def resolve_credentials(self, config: GlobalConfig | None = None) -> tuple[str, str]:
        """Return (client_id, client_secret), environment first.

        Raises:
            ConfigError: If either value is missing everywhere
        """
        config = config or self.load_config()
        client_id = resolve_config_value(os.environ.get(CLIENT_ID_ENV), config.spotify.client_id)
        client_secret = resolve_config_value(
            os.environ.get(CLIENT_SECRET_ENV), config.spotify.client_secret
        )

        if not client_id or not client_secret:
            raise ConfigError(
                "Missing API credentials. Run `podcatalog config credentials` "
                f"or set {CLIENT_ID_ENV} and {CLIENT_SECRET_ENV}."
            )
        return client_id, client_secret

    def _create_default_config(self) -> None:
        """Create default config.yaml file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(get_default_config_content())
