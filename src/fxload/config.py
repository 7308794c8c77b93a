"""Configuration management using pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class FxSettings(BaseSettings):
    """Framework settings loaded from ``FX_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="FX_",
        env_file=".env",
        extra="ignore",
    )

    # Manifest resolution
    max_depth: int = 10

    # Facade defaults for OperationConfig
    default_sequence: int | str = 0
    default_retry: int = 0
    default_cache_ttl: int | str | None = "forever"

    # Bounded waits: wait() gives up after max_wait_attempts * wait_interval_ms
    wait_interval_ms: int = 1
    max_wait_attempts: int = 1000

    # Source loading
    http_timeout: float = 30.0
    base_dir: Path = Path(".")

    # Route resources resolve "module.method" handlers inside these packages
    handlers_package: str = "handlers"
    middleware_package: str = "middleware"

    # Values exposed through FX.env()
    env_file: Path = Path(".env")

    # Result cache storage
    redis_url: str | None = None
    cache_prefix: str = "fx"
    cache_max_items: int | None = None

    stream_interval_ms: int = 1000

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"
