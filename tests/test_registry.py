"""Tests for the resource registry."""

import pytest

from fxload import (
    InvalidManifestEntry,
    Resource,
    ResourceConfig,
    ResourceHost,
    ResourceRegistry,
    UnknownResourceType,
)
from fxload.resources.data import RawResource


class EchoResource(Resource):
    async def _do_load(self) -> str:
        return f"echo:{self.path}"


@pytest.fixture
def registry(host: ResourceHost) -> ResourceRegistry:
    return ResourceRegistry(host)


class TestResolve:
    """Tests for ResourceRegistry.resolve."""

    def test_unregistered_path_is_none(self, registry: ResourceRegistry) -> None:
        """Nothing registered means nothing resolved."""
        assert registry.resolve("missing") is None

    def test_memoizes_instances(self, registry: ResourceRegistry) -> None:
        """The same path resolves to the same resource instance."""
        registry.register("notes", {"type": "raw", "path": "notes.txt"})

        first = registry.resolve("notes")

        assert isinstance(first, RawResource)
        assert registry.resolve("notes") is first
        assert registry.is_resolved("notes")

    def test_reregister_discards_built_resource(self, registry: ResourceRegistry) -> None:
        """A new config for a path replaces the resource built from the old one."""
        registry.register("notes", {"type": "raw", "path": "a.txt"})
        old = registry.resolve("notes")

        registry.register("notes", {"type": "raw", "path": "b.txt"})
        new = registry.resolve("notes")

        assert new is not old
        assert new is not None
        assert new.config.path == "b.txt"

    def test_unknown_type_not_memoized(self, registry: ResourceRegistry) -> None:
        """A failed construction is reported and retried on the next resolve."""
        registry.register("thing", {"type": "bogus"})

        with pytest.raises(UnknownResourceType) as exc_info:
            registry.resolve("thing")
        assert exc_info.value.type_name == "bogus"
        assert exc_info.value.path == "thing"
        assert not registry.is_resolved("thing")

        registry.register("thing", {"type": "raw", "path": "thing.txt"})
        assert isinstance(registry.resolve("thing"), RawResource)

    def test_missing_required_field(self, registry: ResourceRegistry) -> None:
        """Resources validate their required fields on construction."""
        registry.register("page", {"type": "html"})
        with pytest.raises(InvalidManifestEntry, match="requires"):
            registry.resolve("page")

    def test_config_without_type_rejected(self, registry: ResourceRegistry) -> None:
        """A mapping without a type is not a resource config."""
        with pytest.raises(InvalidManifestEntry, match="missing 'type'"):
            registry.register("broken", {"path": "x"})


class TestTypes:
    """Tests for custom resource types."""

    async def test_register_type(self, registry: ResourceRegistry) -> None:
        """Registered types are built for matching configs."""
        registry.register_type("echo", EchoResource)
        registry.register("greeting", ResourceConfig(type="echo"))

        resource = registry.resolve("greeting")

        assert resource is not None
        assert await resource.load() == "echo:greeting"
        assert "echo" in registry.types()

    def test_create_does_not_memoize(self, registry: ResourceRegistry) -> None:
        """Ad-hoc creation leaves the registry untouched."""
        resource = registry.create(ResourceConfig(type="raw", path="x.txt"))
        assert isinstance(resource, RawResource)
        assert len(registry) == 0

    def test_host_points_back(self, registry: ResourceRegistry) -> None:
        """The registry installs itself on the host for nested resources."""
        assert registry.host.registry is registry

    def test_camel_case_aliases(self, registry: ResourceRegistry) -> None:
        """Manifest keys written in camelCase map to config fields."""
        registry.register(
            "api",
            {"type": "api", "baseUrl": "https://example.test", "timeoutMs": 5},
        )
        config = registry.config("api")
        assert config is not None
        assert config.base_url == "https://example.test"
        assert config.options == {"timeoutMs": 5}
        assert "api" in registry
        assert registry.paths() == ["api"]


class TestConfigFields:
    """Tests for field coercion of manifest mappings."""

    def test_single_method_string(self, registry: ResourceRegistry) -> None:
        """A lone method string is one method, not one per letter."""
        registry.register("api", {"type": "api", "base_url": "https://api.test", "methods": "GET"})

        resource = registry.resolve("api")

        assert resource is not None
        assert list(resource.verbs) == ["get"]

    def test_single_middleware_string(self, registry: ResourceRegistry) -> None:
        """A lone middleware name is kept whole."""
        registry.register("route", {"type": "route", "handler": "feeds.rss", "middleware": "auth"})
        config = registry.config("route")
        assert config is not None
        assert config.middleware == ("auth",)

    @pytest.mark.parametrize(
        "fields",
        [
            {"headers": ["oops"]},
            {"headers": "X-Key: 1"},
            {"methods": 5},
            {"methods": ["GET", 1]},
            {"middleware": [None]},
            {"transformations": ["upper"]},
        ],
    )
    def test_malformed_fields(self, registry: ResourceRegistry, fields: dict) -> None:
        """Malformed fields are InvalidManifestEntry, raised again on resolve."""
        raw = {"type": "api", "base_url": "https://api.test", **fields}

        with pytest.raises(InvalidManifestEntry):
            registry.register("api", raw)
        with pytest.raises(InvalidManifestEntry):
            registry.resolve("api")
        assert "api" not in registry

    def test_malformed_entry_can_be_corrected(self, registry: ResourceRegistry) -> None:
        """Registering a valid config clears the earlier error."""
        with pytest.raises(InvalidManifestEntry):
            registry.register("api", {"type": "api", "base_url": "https://api.test", "headers": 3})

        registry.register("api", {"type": "api", "base_url": "https://api.test"})

        assert registry.resolve("api") is not None
