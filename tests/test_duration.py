"""Tests for duration parsing."""

import pytest

from fxload import DISABLED, FOREVER, parse_duration, parse_ttl


class TestParseDuration:
    """Tests for parse_duration function."""

    def test_milliseconds(self) -> None:
        """Test parsing milliseconds."""
        assert parse_duration("100ms") == 100
        assert parse_duration("1ms") == 1
        assert parse_duration("0ms") == 0

    def test_seconds(self) -> None:
        """Test parsing seconds."""
        assert parse_duration("1s") == 1000
        assert parse_duration("30s") == 30000
        assert parse_duration("0s") == 0

    def test_minutes(self) -> None:
        """Test parsing minutes."""
        assert parse_duration("1m") == 60_000
        assert parse_duration("5m") == 300_000
        assert parse_duration("0m") == 0

    def test_hours(self) -> None:
        """Test parsing hours."""
        assert parse_duration("1h") == 3_600_000
        assert parse_duration("2h") == 7_200_000
        assert parse_duration("0h") == 0

    def test_days(self) -> None:
        """Test parsing days."""
        assert parse_duration("1d") == 86_400_000
        assert parse_duration("7d") == 604_800_000
        assert parse_duration("0d") == 0

    def test_integer_passthrough(self) -> None:
        """Test that integers pass through unchanged."""
        assert parse_duration(1000) == 1000
        assert parse_duration(0) == 0
        assert parse_duration(999999) == 999999

    def test_invalid_format(self) -> None:
        """Test that invalid formats raise ValueError."""
        with pytest.raises(ValueError, match="Invalid duration"):
            parse_duration("invalid")

        with pytest.raises(ValueError, match="Invalid duration"):
            parse_duration("10x")

        with pytest.raises(ValueError, match="Invalid duration"):
            parse_duration("s10")

        with pytest.raises(ValueError, match="Invalid duration"):
            parse_duration("")

        with pytest.raises(ValueError, match="Invalid duration"):
            parse_duration("10")


class TestParseTtl:
    """Tests for parse_ttl function."""

    def test_forever_words(self) -> None:
        """'forever' and 'once' mean a non-expiring entry."""
        assert parse_ttl("forever") == FOREVER
        assert parse_ttl("once") == FOREVER
        assert parse_ttl(" Forever ") == FOREVER
        assert parse_ttl(0) == FOREVER

    def test_disabled_words(self) -> None:
        """None and the 'off' words disable caching."""
        assert parse_ttl(None) is DISABLED
        assert parse_ttl("off") is DISABLED
        assert parse_ttl("none") is DISABLED
        assert parse_ttl("disabled") is DISABLED

    def test_durations(self) -> None:
        """Duration strings and integers are milliseconds."""
        assert parse_ttl("30s") == 30_000
        assert parse_ttl(250) == 250

    def test_rejects_negative(self) -> None:
        """Negative TTLs are a ValueError."""
        with pytest.raises(ValueError, match="negative"):
            parse_ttl(-1)

    def test_rejects_bool(self) -> None:
        """Booleans are not a TTL even though they are ints."""
        with pytest.raises(ValueError, match="Invalid cache TTL"):
            parse_ttl(True)

    def test_rejects_garbage(self) -> None:
        """Unknown words fall through to duration parsing and fail there."""
        with pytest.raises(ValueError, match="Invalid duration"):
            parse_ttl("sometimes")
