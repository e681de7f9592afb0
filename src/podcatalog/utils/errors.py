"""Custom exceptions for podcatalog."""


class PodcatalogError(Exception):
    """Base exception for all podcatalog errors."""

    pass


class ConfigError(PodcatalogError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class EncryptionError(ConfigError):
    """Encryption/decryption errors."""

    pass


class SourceError(PodcatalogError):
    """Episode source returned data we cannot use."""

    pass


class FetchError(PodcatalogError):
    """Episode catalog fetch errors."""

    pass


class FatalFetchError(FetchError):
    """The first page of a catalog could not be fetched.

    Without page 1 there is no total and no partial catalog, so the whole
    operation is aborted.
    """

    def __init__(self, show_id: str, message: str) -> None:
        self.show_id = show_id
        super().__init__(f"Unable to retrieve episodes for show {show_id}: {message}")


class ValidationError(PodcatalogError):
    """User input that cannot be acted on.

    Attributes:
        suggestion: Optional hint shown below the error message.
    """

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.suggestion = suggestion


class OutOfRangeError(ValidationError):
    """Episode number outside the catalog."""

    def __init__(self, episode_number: int, total: int) -> None:
        self.episode_number = episode_number
        self.total = total
        super().__init__(
            f"Episode #{episode_number} not found. "
            f"This show has {total} episodes (valid range: 1-{total})",
            suggestion=f"Pick a number between 1 and {total}" if total else None,
        )


class InvalidFilterError(ValidationError):
    """Unsupported or incomplete date filter."""

    pass


class InvalidPageSizeError(ValidationError):
    """Page size is neither a positive integer nor 'unlimited'."""

    pass
