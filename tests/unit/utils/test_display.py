"""Tests for terminal formatting helpers."""

import pytest

from podcatalog.utils.display import format_duration, truncate_text


class TestTruncateText:
    """Test text truncation."""

    def test_short_text_unchanged(self):
        assert truncate_text("Short title", 20) == "Short title"

    def test_exact_length_unchanged(self):
        assert truncate_text("x" * 10, 10) == "x" * 10

    def test_long_text_truncated(self):
        result = truncate_text("A very long episode title", 10)

        assert result == "A very ..."
        assert len(result) == 10

    def test_none_and_empty(self):
        assert truncate_text(None, 10) == ""
        assert truncate_text("", 10) == ""

    def test_limit_shorter_than_suffix(self):
        assert truncate_text("abcdef", 2) == "ab"


class TestFormatDuration:
    """Test duration formatting."""

    @pytest.mark.parametrize(
        "duration_ms,expected",
        [(0, "0:00"), (59_999, "0:59"), (60_000, "1:00"), (1_805_000, "30:05"), (4_500_000, "75:00")],
    )
    def test_format(self, duration_ms, expected):
        assert format_duration(duration_ms) == expected

    def test_unknown(self):
        assert format_duration(None) == "Unknown"
