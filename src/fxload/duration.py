"""Duration and cache TTL parsing utilities."""

import re

from fxload.types import DISABLED, FOREVER, Ttl

_DURATION_PATTERN = re.compile(r"^(\d+)(ms|s|m|h|d)$")
_UNITS: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "m": 60_000,
    "h": 3_600_000,
    "d": 86_400_000,
}
_FOREVER_WORDS = frozenset({"forever", "once"})
_DISABLED_WORDS = frozenset({"off", "none", "disabled"})


def parse_duration(duration: str | int) -> int:
    """Parse duration string to milliseconds. Passthrough if already int."""
    if isinstance(duration, int):
        return duration

    match = _DURATION_PATTERN.match(duration)
    if not match:
        raise ValueError(f"Invalid duration: {duration!r}")

    value, unit = match.groups()
    return int(value) * _UNITS[unit]


def parse_ttl(ttl: Ttl) -> int | None:
    """Normalize a cache TTL.

    Returns ``FOREVER`` (0) for non-expiring entries, a positive number of
    milliseconds for expiring ones, and ``DISABLED`` (None) when the result
    must never be cached.
    """
    if ttl is None:
        return DISABLED
    if isinstance(ttl, bool):
        raise ValueError(f"Invalid cache TTL: {ttl!r}")
    if isinstance(ttl, str):
        word = ttl.strip().lower()
        if word in _FOREVER_WORDS:
            return FOREVER
        if word in _DISABLED_WORDS:
            return DISABLED
        ttl = parse_duration(word)
    if ttl < 0:
        raise ValueError(f"Cache TTL must not be negative: {ttl!r}")
    return ttl
