"""fxload - lazy, cached and sequenced resource loading for Python."""

from contextlib import suppress

# Adapters (async only)
from fxload.adapters import (
    AsyncMemoryAdapter,
    AsyncStorageAdapter,
)
from fxload.cache import ResultCache
from fxload.config import FxSettings
from fxload.context import ExecutionContext

# Duration parsing
from fxload.duration import parse_duration, parse_ttl

# Errors
from fxload.errors import (
    FxError,
    InvalidManifestEntry,
    MaxAttemptsExceeded,
    ResourceNotFound,
    RetryExhausted,
    Timeout,
    UnknownResourceType,
    UnsupportedDataType,
)

# Facade
from fxload.fx import FX, Accessor
from fxload.http import Request, Response
from fxload.logs import configure_logging
from fxload.manifest import ManifestResolver
from fxload.registry import ResourceRegistry
from fxload.resources import RESOURCE_TYPES, Resource, ResourceHost
from fxload.retry import RetryRunner
from fxload.sequence import SequenceQueue

# Core types
from fxload.types import (
    DISABLED,
    FOREVER,
    CacheEntry,
    OperationConfig,
    ResourceConfig,
    SequenceKey,
)

# Optional adapter imports - only available when dependencies are installed
with suppress(ImportError):
    from fxload.adapters import AsyncRedisAdapter

__version__ = "0.1.0"

__all__ = [
    "DISABLED",
    "FOREVER",
    "FX",
    "RESOURCE_TYPES",
    "Accessor",
    "AsyncMemoryAdapter",
    "AsyncRedisAdapter",
    "AsyncStorageAdapter",
    "CacheEntry",
    "ExecutionContext",
    "FxError",
    "FxSettings",
    "InvalidManifestEntry",
    "ManifestResolver",
    "MaxAttemptsExceeded",
    "OperationConfig",
    "Request",
    "Resource",
    "ResourceConfig",
    "ResourceHost",
    "ResourceNotFound",
    "ResourceRegistry",
    "Response",
    "ResultCache",
    "RetryExhausted",
    "RetryRunner",
    "SequenceKey",
    "SequenceQueue",
    "Timeout",
    "UnknownResourceType",
    "UnsupportedDataType",
    "configure_logging",
    "parse_duration",
    "parse_ttl",
]
