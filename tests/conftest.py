"""Shared pytest fixtures."""

from pathlib import Path

import pytest

from fxload import (
    FX,
    AsyncMemoryAdapter,
    ExecutionContext,
    FxSettings,
    ResourceHost,
    ResultCache,
)
from fxload.loader import SourceLoader


@pytest.fixture
def async_adapter() -> AsyncMemoryAdapter:
    """Create a fresh AsyncMemoryAdapter for each test."""
    return AsyncMemoryAdapter()


@pytest.fixture
def context(async_adapter: AsyncMemoryAdapter) -> ExecutionContext:
    """Create an ExecutionContext over an in-memory cache."""
    return ExecutionContext(cache=ResultCache(async_adapter))


@pytest.fixture
def settings(tmp_path: Path) -> FxSettings:
    """Settings rooted at a temporary directory, ignoring any real .env."""
    return FxSettings(
        _env_file=None,
        base_dir=tmp_path,
        env_file=tmp_path / ".env",
    )


@pytest.fixture
async def fx(settings: FxSettings):
    """Create an FX instance and close it after the test."""
    instance = FX(settings=settings)
    yield instance
    await instance.aclose()


@pytest.fixture
def host(settings: FxSettings) -> ResourceHost:
    """Resource host reading from the settings' base directory."""
    return ResourceHost(loader=SourceLoader(base_dir=settings.base_dir), settings=settings)
