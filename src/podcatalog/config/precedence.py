"""Resolution of configuration values from several sources."""

from typing import TypeVar

T = TypeVar("T")


def resolve_config_value(*candidates: T | None) -> T | None:
    """Return the first candidate that is not None.

    Callers list sources from highest to lowest precedence, typically
    explicit argument, environment, config file, built-in default.

    Example:
        >>> resolve_config_value(None, "from-env", "from-file")
        'from-env'
    """
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None
