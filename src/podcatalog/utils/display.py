"""Formatting helpers for terminal output."""

UNKNOWN_DURATION = "Unknown"


def truncate_text(text: str | None, max_length: int, suffix: str = "...") -> str:
    """Truncate text so the result, suffix included, fits in max_length.

    Args:
        text: Text to truncate (None becomes "")
        max_length: Maximum length of the returned string
        suffix: Marker appended when text was cut

    Returns:
        The original text or a shortened copy ending in suffix

    Example:
        >>> truncate_text("A very long episode title", 10)
        'A very ...'
    """
    if not text:
        return ""
    if len(text) <= max_length:
        return text
    if max_length <= len(suffix):
        return text[:max_length]
    return text[: max_length - len(suffix)] + suffix


def format_duration(duration_ms: int | None) -> str:
    """Format a duration in milliseconds as M:SS.

    Hours are folded into minutes (a 75 minute episode is "75:00").
    Missing durations render as "Unknown".
    """
    if duration_ms is None:
        return UNKNOWN_DURATION
    total_seconds = duration_ms // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"
