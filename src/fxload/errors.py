"""Error taxonomy for fxload."""

from __future__ import annotations


class FxError(Exception):
    """Base class for all fxload errors."""


class UnknownResourceType(FxError):
    """A manifest leaf names a resource type nobody registered."""

    def __init__(self, type_name: str, path: str = "") -> None:
        self.type_name = type_name
        self.path = path
        where = f" at {path!r}" if path else ""
        super().__init__(f"Unknown resource type {type_name!r}{where}")


class UnsupportedDataType(FxError):
    """A data resource returned a content type it cannot parse."""

    def __init__(self, content_type: str | None, path: str = "") -> None:
        self.content_type = content_type
        self.path = path
        super().__init__(f"Unsupported data type: {content_type!r} ({path})")


class MaxAttemptsExceeded(FxError):
    """A bounded wait gave up before the awaited work settled."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"Maximum wait attempts exceeded ({attempts})")


class RetryExhausted(FxError):
    """An operation failed on every configured attempt."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Operation failed after {attempts} attempts: {last_error!r}")


class Timeout(FxError, TimeoutError):
    """wait_for_all deadline passed while lanes still had work."""

    def __init__(self, timeout_ms: float, pending: int) -> None:
        self.timeout_ms = timeout_ms
        self.pending = pending
        super().__init__(
            f"{pending} operation(s) still in flight after {timeout_ms}ms"
        )


class InvalidManifestEntry(FxError):
    """A manifest leaf is malformed or misses a required field."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid manifest entry {path!r}: {reason}")


class ResourceNotFound(FxError, LookupError):
    """No manifest entry or dynamic value exists at a path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Nothing is registered at {path!r}")
