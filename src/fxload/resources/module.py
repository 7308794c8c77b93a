"""Python module resources: module, class, function and instance."""

from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Any

from fxload.errors import InvalidManifestEntry
from fxload.resources.base import Resource, ResourceHost
from fxload.types import ResourceConfig


def import_source(path: str, base_dir: Path | None = None) -> ModuleType:
    """Import a dotted module name, or a ``.py`` file relative to ``base_dir``."""
    if not path.endswith(".py"):
        return importlib.import_module(path)

    file_path = Path(path)
    if not file_path.is_absolute() and base_dir is not None:
        file_path = base_dir / file_path
    name = f"fxload_dynamic_{file_path.stem}_{abs(hash(str(file_path.resolve())))}"
    if name in sys.modules:
        return sys.modules[name]
    spec = importlib.util.spec_from_file_location(name, file_path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import {file_path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        del sys.modules[name]
        raise
    return module


class ModuleResource(Resource):
    """Imports a module and exposes it or one of its exports.

    ``class`` and ``function`` return the export itself, ``instance``
    constructs a fresh object from it, ``module`` returns the export when
    ``main_export`` is set and the module otherwise.
    """

    required = ("path",)

    def __init__(self, config: ResourceConfig, host: ResourceHost, path: str = "") -> None:
        super().__init__(config, host, path)
        if config.type == "instance" and not config.main_export:
            raise InvalidManifestEntry(path, "'instance' resource requires 'main_export'")

    async def _do_load(self) -> Any:
        module = import_source(self.config.path or "", self.loader.base_dir)
        if not self.config.main_export:
            return module
        exported = getattr(module, self.config.main_export)
        if self.config.type == "instance":
            return exported()
        return exported
