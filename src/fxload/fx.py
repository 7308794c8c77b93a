"""The FX facade: path-based access to lazily loaded, sequenced resources."""

from __future__ import annotations

import asyncio
import inspect
import json
import os
from collections.abc import Callable, Mapping
from dataclasses import replace
from typing import Any

import structlog
from dotenv import dotenv_values

from fxload.adapters import AsyncMemoryAdapter, AsyncStorageAdapter
from fxload.cache import ResultCache
from fxload.config import FxSettings
from fxload.context import ExecutionContext
from fxload.errors import ResourceNotFound
from fxload.loader import SourceLoader
from fxload.manifest import ManifestResolver, import_manifest, join_path
from fxload.registry import ResourceRegistry
from fxload.resources import Resource, ResourceHost
from fxload.retry import invoke
from fxload.types import OperationConfig, ResourceConfig, SequenceKey, Ttl

logger = structlog.get_logger(__name__)

_UNSET: Any = object()


def _settled(value: Any) -> asyncio.Future[Any]:
    future = asyncio.get_running_loop().create_future()
    future.set_result(value)
    return future


def _argument_marker(value: Any) -> str:
    # Objects without a JSON form are identified by type and identity
    kind = type(value)
    return f"<{kind.__module__}.{kind.__qualname__} at {id(value):#x}>"


def _call_key(path: str, args: tuple[Any, ...], kwargs: Mapping[str, Any]) -> str:
    arguments = json.dumps(
        [list(args), dict(kwargs)], sort_keys=True, default=_argument_marker
    )
    return f"call:{path}:{arguments}"


class Accessor:
    """Attribute sugar over FX paths.

    ``fx.api.users`` is an Accessor for ``"api.users"``; calling
    ``fx.api.users.get("/1")`` runs the ``get`` member through the execution
    context, and ``await fx.data.users`` loads the resource at that path.
    Keys that are not identifiers can be reached with ``accessor["/rss"]``.
    """

    __slots__ = ("_fx", "_options", "_path")

    def __init__(self, fx: FX, path: str, options: OperationConfig) -> None:
        self._fx = fx
        self._path = path
        self._options = options

    def __getattr__(self, name: str) -> Accessor:
        if name.startswith("_"):
            raise AttributeError(name)
        return Accessor(self._fx, join_path(self._path, name), self._options)

    def __getitem__(self, name: str) -> Accessor:
        return Accessor(self._fx, join_path(self._path, name), self._options)

    def __call__(self, *args: Any, **kwargs: Any) -> asyncio.Future[Any]:
        return self._fx._invoke(self._path, args, kwargs, self._options)

    def __await__(self) -> Any:
        return self._fx._load_path(self._path, self._options).__await__()

    def __repr__(self) -> str:
        return f"<Accessor {self._path or '<root>'}>"


class FX:
    """Entry point tying the manifest, the registry and the execution context together.

    Construct one per process (or per test) and pass it to whoever needs it::

        async with FX(manifest) as fx:
            users = await fx.api.users.get("/users")
            config = await fx.load("data.config")

    Every resource load and member call goes through
    ``ExecutionContext.run_async`` with the default OperationConfig built
    from settings, or the one given to ``using()``.
    """

    def __init__(
        self,
        manifest: Any = None,
        *,
        settings: FxSettings | None = None,
        adapter: AsyncStorageAdapter | None = None,
        loader: SourceLoader | None = None,
    ) -> None:
        self.settings = settings or FxSettings()
        self.context = ExecutionContext(
            cache=ResultCache(
                adapter or self._default_adapter(),
                prefix=self.settings.cache_prefix,
            ),
            wait_interval_ms=self.settings.wait_interval_ms,
            max_wait_attempts=self.settings.max_wait_attempts,
        )
        self.loader = loader or SourceLoader(
            base_dir=self.settings.base_dir,
            timeout=self.settings.http_timeout,
        )
        self.host = ResourceHost(loader=self.loader, settings=self.settings)
        self.registry = ResourceRegistry(self.host)
        self.resolver = ManifestResolver(self.registry, max_depth=self.settings.max_depth)
        self.defaults = OperationConfig(
            sequence_key=self.settings.default_sequence,
            cache_ttl=self.settings.default_cache_ttl,
            retry_count=self.settings.default_retry,
        )
        self._initial_manifest = manifest
        self._values: dict[str, Any] = {}
        self._env: dict[str, str | None] | None = None

    def _default_adapter(self) -> AsyncStorageAdapter:
        if self.settings.redis_url:
            from fxload.adapters.redis import AsyncRedisAdapter

            return AsyncRedisAdapter.from_url(
                self.settings.redis_url, prefix=self.settings.cache_prefix
            )
        return AsyncMemoryAdapter(max_items=self.settings.cache_max_items)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FX:
        if self._initial_manifest is not None:
            await self.initialize(self._initial_manifest)
            self._initial_manifest = None
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def initialize(self, manifest: Any) -> None:
        """Load a manifest mapping, or a ``factory(fx)`` returning one."""
        if callable(manifest) and not isinstance(manifest, Mapping):
            manifest = manifest(self)
            if inspect.isawaitable(manifest):
                manifest = await manifest
        await self.load_manifest(manifest)

    async def load_manifest(self, manifest: Any, prefix: str = "") -> None:
        await self.resolver.load(manifest, prefix)

    def manifest(
        self,
        path: str,
        config: Mapping[str, Any] | ResourceConfig,
        *,
        defer: bool = True,
    ) -> None:
        """Add or replace one manifest leaf; ``defer=False`` builds it now."""
        self.resolver.insert(path, config, build=not defer)

    async def wait_for_all(self, timeout_ms: float | None = None) -> None:
        await self.context.wait_for_all(timeout_ms)

    async def aclose(self) -> None:
        await self.loader.aclose()
        await self.context.cache.disconnect()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, path: str) -> Resource | None:
        return self.registry.resolve(path)

    def using(
        self,
        sequence_key: SequenceKey = _UNSET,
        *,
        cache_ttl: Ttl = _UNSET,
        retry_count: int = _UNSET,
        on_complete: Callable[[Any], None] | None = _UNSET,
        chain_to: SequenceKey | None = _UNSET,
    ) -> Accessor:
        """Accessor whose calls run with these OperationConfig overrides."""
        overrides = {
            name: value
            for name, value in (
                ("sequence_key", sequence_key),
                ("cache_ttl", cache_ttl),
                ("retry_count", retry_count),
                ("on_complete", on_complete),
                ("chain_to", chain_to),
            )
            if value is not _UNSET
        }
        return Accessor(self, "", replace(self.defaults, **overrides))

    def __getattr__(self, name: str) -> Accessor:
        if name.startswith("_") or not self._knows(name):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return Accessor(self, name, self.defaults)

    def __getitem__(self, path: str) -> Accessor:
        return Accessor(self, path, self.defaults)

    def _knows(self, name: str) -> bool:
        if name in self._values or name in self.resolver.tree:
            return True
        return any(key.startswith(f"{name}.") for key in self._values)

    async def load(
        self,
        target: str | Mapping[str, Any] | ResourceConfig,
        *,
        options: OperationConfig | None = None,
    ) -> Any:
        """Load the resource at a path, or an ad-hoc resource config.

        An ``object`` config with a ``path`` returns the imported
        sub-manifest, which makes ``lambda: fx.load({...})`` a lazy manifest
        producer.
        """
        if isinstance(target, str):
            return await self._load_path(target, options or self.defaults)

        config = target if isinstance(target, ResourceConfig) else ResourceConfig.from_mapping(target)
        if config.type == "object":
            manifest = import_manifest(config.path or "", self.loader.base_dir)
            if inspect.isawaitable(manifest):
                manifest = await manifest
            return manifest
        resource = self.registry.create(config)
        return await resource.load()

    async def call(self, path: str, /, *args: Any, **kwargs: Any) -> Any:
        """Invoke the member at ``path`` with the default OperationConfig."""
        return await self._invoke(path, args, kwargs, self.defaults)

    def _load_path(self, path: str, options: OperationConfig) -> asyncio.Future[Any]:
        if path in self._values:
            return _settled(self._values[path])
        resource = self.resolve(path)
        if resource is None:
            raise ResourceNotFound(path)
        config = replace(options, cache_key=f"load:{path}")
        return self.context.run_async(resource.load, config)

    def _invoke(
        self,
        path: str,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
        options: OperationConfig,
    ) -> asyncio.Future[Any]:
        operation = self._operation(path, args, kwargs)
        config = replace(options, cache_key=_call_key(path, args, kwargs))
        return self.context.run_async(operation, config)

    def _operation(
        self,
        path: str,
        args: tuple[Any, ...],
        kwargs: Mapping[str, Any],
    ) -> Callable[[], Any]:
        if callable(self._values.get(path)):
            fn = self._values[path]
            return lambda: fn(*args, **kwargs)

        resource = self.resolve(path)
        if resource is not None:
            # The path itself is callable once loaded (function/class modules)
            async def call_loaded() -> Any:
                value = await resource.load()
                return await invoke(lambda: value(*args, **kwargs))

            return call_loaded

        owner_path, _, name = path.rpartition(".")
        owner = self.resolve(owner_path) if owner_path else None
        if owner is None:
            raise ResourceNotFound(path)

        verbs = getattr(owner, "verbs", {})
        if name in verbs:
            verb = verbs[name]
            return lambda: verb(*args, **kwargs)
        if name == "load":
            return owner.load

        async def call_member() -> Any:
            value = await owner.load()
            member = value[name] if isinstance(value, Mapping) else getattr(value, name)
            return await invoke(lambda: member(*args, **kwargs))

        return call_member

    # ------------------------------------------------------------------
    # Dynamic values and environment
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any) -> FX:
        self._values[key] = value
        return self

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def data(self, key: str, value: Any = _UNSET) -> Any:
        """Read ``key`` or, given a value, store it and return the FX."""
        if value is _UNSET:
            return self.get(key)
        return self.set(key, value)

    def env(self, key: str, default: str | None = None) -> str | None:
        """Value from the dotenv file, then from the process environment."""
        if self._env is None:
            env_file = self.settings.env_file
            self._env = dotenv_values(env_file) if env_file.is_file() else {}
            if not self._env:
                logger.debug("fx.env_file_missing", path=str(env_file))
        value = self._env.get(key)
        if value is not None:
            return value
        return os.environ.get(key, default)

    @property
    def stylesheets(self) -> dict[str, Any]:
        """Stylesheets currently attached by css resources."""
        return self.host.stylesheets
