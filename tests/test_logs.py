"""Tests for logging setup."""

import pytest
import structlog

from fxload import FxSettings, configure_logging
from fxload.logs import get_logger


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.mark.parametrize("log_format", ["console", "json"])
def test_configure_logging(log_format: str) -> None:
    """Both renderers configure structlog over stdlib logging."""
    configure_logging(FxSettings(_env_file=None, log_format=log_format, log_level="debug"))

    assert structlog.is_configured()
    assert structlog.get_config()["logger_factory"].__class__ is structlog.stdlib.LoggerFactory


def test_get_logger_binds_context() -> None:
    """Loggers accept key/value context."""
    logger = get_logger("fxload.tests").bind(lane="a")
    assert logger is not None
