"""Default configuration values and file contents."""

from podcatalog.config.schema import GlobalConfig

DEFAULT_GLOBAL_CONFIG = GlobalConfig()

DEFAULT_CONFIG_CONTENT = """\
# podcatalog configuration
version: "1"
log_level: WARNING  # DEBUG, INFO, WARNING or ERROR; --verbose forces DEBUG

# Show browsed when no show id is given on the command line
default_show_id: null

spotify:
  # Prefer `podcatalog config credentials`, which encrypts the secret.
  # SPOTIFY_CLIENT_ID / SPOTIFY_CLIENT_SECRET override these values.
  client_id: null
  client_secret: null
  market: US
  timeout_seconds: 30

fetch:
  page_size: 50
  batch_size: 5
  batch_delay_ms: 100
  max_attempts: 3

browse:
  default_page_size: 10
  description_max_length: 300
  api_search: false
"""


def get_default_config_content() -> str:
    """Get the commented default config.yaml content."""
    return DEFAULT_CONFIG_CONTENT
