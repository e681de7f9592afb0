"""XDG-compliant locations for podcatalog files."""

from pathlib import Path

import platformdirs

APP_NAME = "podcatalog"


def get_config_dir() -> Path:
    """Get the configuration directory (e.g. ~/.config/podcatalog)."""
    return Path(platformdirs.user_config_dir(APP_NAME))
