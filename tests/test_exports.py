"""Tests for package exports."""


def test_core_exports_available() -> None:
    """Test that the execution core is importable from the package root."""
    from fxload import (
        DISABLED,
        FOREVER,
        CacheEntry,
        ExecutionContext,
        OperationConfig,
        ResultCache,
        RetryRunner,
        SequenceQueue,
    )

    # Just verify they're importable
    assert SequenceQueue is not None
    assert ResultCache is not None
    assert RetryRunner is not None
    assert ExecutionContext is not None
    assert OperationConfig is not None
    assert CacheEntry is not None
    assert FOREVER == 0
    assert DISABLED is None


def test_resource_exports_available() -> None:
    """Test that the resource layer and facade are importable."""
    from fxload import (
        FX,
        RESOURCE_TYPES,
        Accessor,
        ManifestResolver,
        Resource,
        ResourceConfig,
        ResourceRegistry,
    )

    assert FX is not None
    assert Accessor is not None
    assert ManifestResolver is not None
    assert ResourceRegistry is not None
    assert Resource is not None
    assert ResourceConfig is not None
    assert {"api", "css", "html", "module", "json", "raw", "route"} <= set(RESOURCE_TYPES)


def test_errors_share_base() -> None:
    """Every framework error derives from FxError."""
    from fxload import (
        FxError,
        InvalidManifestEntry,
        MaxAttemptsExceeded,
        ResourceNotFound,
        RetryExhausted,
        Timeout,
        UnknownResourceType,
        UnsupportedDataType,
    )

    for error in (
        InvalidManifestEntry,
        MaxAttemptsExceeded,
        ResourceNotFound,
        RetryExhausted,
        Timeout,
        UnknownResourceType,
        UnsupportedDataType,
    ):
        assert issubclass(error, FxError)
    assert issubclass(Timeout, TimeoutError)
    assert issubclass(ResourceNotFound, LookupError)
