"""Core types for the fxload resource framework."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from fxload.errors import InvalidManifestEntry

T = TypeVar("T")

# Lane identifier: operations sharing a key run one at a time, in order
SequenceKey = str | int

# "30s", "5m", "forever", "off", milliseconds, or None
Ttl = str | int | None

# Cache the result with no expiry
FOREVER = 0
# Never store or look up the result
DISABLED = None

Operation = Callable[[], Awaitable[T] | T]


@dataclass(frozen=True, slots=True)
class CacheEntry(Generic[T]):
    """A memoized operation result."""

    key: str
    value: T
    created_at: int  # Unix timestamp ms


@dataclass(frozen=True, slots=True)
class OperationConfig:
    """Per-call execution settings for ExecutionContext.run_async."""

    sequence_key: SequenceKey = 0
    cache_ttl: Ttl = DISABLED
    retry_count: int = 0
    on_complete: Callable[[Any], None] | None = None
    chain_to: SequenceKey | None = None
    cache_key: str | None = None

    def __post_init__(self) -> None:
        if self.retry_count < 0:
            raise ValueError("retry_count must be a non-negative integer")

    def identity(self) -> dict[str, Any]:
        """Fields that take part in the cache fingerprint."""
        return {
            "sequence_key": self.sequence_key,
            "cache_ttl": self.cache_ttl,
            "retry_count": self.retry_count,
            "chain_to": self.chain_to,
        }


# camelCase keys accepted from manifests written for the browser client
_ALIASES = {
    "baseUrl": "base_url",
    "mainExport": "main_export",
}

_FIELDS = (
    "path",
    "base_url",
    "file",
    "dir",
    "methods",
    "headers",
    "main_export",
    "handler",
    "middleware",
    "scope",
    "media",
    "minify",
    "transformations",
)


@dataclass(frozen=True, slots=True)
class ResourceConfig:
    """Declarative description of one manifest leaf."""

    type: str
    path: str | None = None
    base_url: str | None = None
    file: str | None = None
    dir: str | None = None
    methods: tuple[str, ...] | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    main_export: str | None = None
    handler: Any = None
    middleware: tuple[str, ...] = ()
    scope: str | None = None
    media: str | None = None
    minify: bool = False
    transformations: tuple[Callable[[str], Any], ...] = ()
    options: Mapping[str, Any] = field(default_factory=dict)

    @property
    def source(self) -> str | None:
        """Location the resource reads from, whichever key declared it."""
        return self.path or self.file

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], path: str = "") -> ResourceConfig:
        """Build a config from a manifest mapping, keeping unknown keys in options."""
        if not isinstance(raw, Mapping):
            raise InvalidManifestEntry(path, f"expected a mapping, got {type(raw).__name__}")
        type_name = raw.get("type")
        if not type_name or not isinstance(type_name, str):
            raise InvalidManifestEntry(path, "missing 'type'")

        values: dict[str, Any] = {}
        options: dict[str, Any] = {}
        for key, value in raw.items():
            if key == "type":
                continue
            name = _ALIASES.get(key, key)
            if name in _FIELDS:
                values[name] = value
            else:
                options[key] = value

        for name in ("methods", "middleware", "transformations"):
            if values.get(name) is not None:
                values[name] = _as_tuple(values[name], name, path)
        for name in ("methods", "middleware"):
            if any(not isinstance(item, str) for item in values.get(name) or ()):
                raise InvalidManifestEntry(path, f"{name!r} entries must be strings")
        if any(not callable(item) for item in values.get("transformations") or ()):
            raise InvalidManifestEntry(path, "'transformations' entries must be callable")
        if "headers" in values:
            headers = values["headers"] or {}
            if not isinstance(headers, Mapping):
                raise InvalidManifestEntry(
                    path, f"'headers' must be a mapping, got {type(headers).__name__}"
                )
            values["headers"] = dict(headers)

        return cls(type=type_name, options=options, **values)


def _as_tuple(value: Any, name: str, path: str) -> tuple[Any, ...]:
    # A lone string or callable is one item, not a sequence of items
    if isinstance(value, str) or callable(value):
        return (value,)
    if not isinstance(value, Iterable):
        raise InvalidManifestEntry(
            path, f"{name!r} must be a list, got {type(value).__name__}"
        )
    return tuple(value)
