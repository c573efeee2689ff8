"""Plugin manager responsible for discovery and start-up."""

from __future__ import annotations

import importlib.util
import logging
import sys
import types
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable

from .base import Plugin
from .config import PluginManifest

if TYPE_CHECKING:  # pragma: no cover - type-checker hint without runtime import
    from ..runtime import Runtime


logger = logging.getLogger(__name__)

__all__ = ["PluginManager", "RegisteredPlugin"]


@dataclass(frozen=True)
class RegisteredPlugin:
    """Metadata describing a discovered plugin class."""

    cls: type[Plugin]
    module_name: str
    name: str


class PluginManager:
    """Discover plugin classes and instantiate them into a runtime.

    Plugins must all be created before the host starts dispatching commands;
    :meth:`setup` does so following the order of the manifest.
    """

    def __init__(self, runtime: "Runtime") -> None:
        self.runtime = runtime
        self.plugin_registry: Dict[str, RegisteredPlugin] = {}

    @property
    def plugins(self) -> Dict[str, Plugin]:
        return dict(self.runtime.plugins.items())

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------
    def discover_plugins(self, plugin_dir: str | Path) -> Dict[str, RegisteredPlugin]:
        """Discover plugins located in ``plugin_dir``.

        Parameters
        ----------
        plugin_dir:
            Directory containing plugin modules or packages.

        Returns
        -------
        Dict[str, RegisteredPlugin]
            Mapping of plugin names to registration metadata.
        """

        path = Path(plugin_dir)
        discovered: Dict[str, RegisteredPlugin] = {}

        if not path.exists():
            logger.warning("Plugin directory '%s' does not exist", path)
            return discovered

        for module_path in self._iter_plugin_module_paths(path):
            module = self._import_module(module_path)
            if module is None:
                continue
            discovered.update(self._register_module_plugins(module))

        return discovered

    def _iter_plugin_module_paths(self, root: Path) -> Iterable[Path]:
        """Yield importable module paths contained in ``root``."""

        for entry in sorted(root.iterdir()):
            if entry.name.startswith("__"):
                continue

            if entry.is_file() and entry.suffix == ".py":
                yield entry
            elif entry.is_dir():
                init_file = entry / "__init__.py"
                if init_file.exists():
                    yield init_file

    def _unique_module_name(self, module_path: Path) -> str:
        """Return a deterministic but unique module name for ``module_path``."""

        token = uuid.uuid5(uuid.NAMESPACE_URL, str(module_path.resolve()))
        return f"noteplug.plugins.dynamic_{token.hex}"

    def _import_module(self, module_path: Path) -> types.ModuleType | None:
        module_name = self._unique_module_name(module_path)
        existing = sys.modules.get(module_name)
        if existing is not None:
            return existing

        spec = importlib.util.spec_from_file_location(module_name, module_path)
        if spec is None or spec.loader is None:
            logger.warning("Unable to create import spec for plugin at '%s'", module_path)
            return None

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)  # type: ignore[union-attr]
        except Exception:
            logger.exception("Failed to import plugin module '%s'", module_path)
            sys.modules.pop(module_name, None)
            return None
        return module

    def _register_module_plugins(self, module: types.ModuleType) -> Dict[str, RegisteredPlugin]:
        """Register plugin classes defined in ``module``."""

        registered: Dict[str, RegisteredPlugin] = {}

        for attribute_name in dir(module):
            attribute = getattr(module, attribute_name)
            if (
                isinstance(attribute, type)
                and issubclass(attribute, Plugin)
                and attribute is not Plugin
                and attribute.__module__ == module.__name__
            ):
                try:
                    name = attribute.declared_name()
                except Exception:
                    logger.exception(
                        "Skipping plugin class '%s' without a usable name",
                        attribute.__qualname__,
                    )
                    continue

                registration = RegisteredPlugin(
                    cls=attribute,
                    module_name=module.__name__,
                    name=name,
                )
                self.plugin_registry[name] = registration
                registered[name] = registration
                logger.info("Registered plugin '%s' from module '%s'", name, module.__name__)

        return registered

    # ------------------------------------------------------------------
    # Start-up
    # ------------------------------------------------------------------
    def load_plugin(self, plugin_name: str) -> Plugin:
        """Instantiate the discovered plugin ``plugin_name`` into the runtime."""

        existing = self.runtime.plugins.get(plugin_name)
        if existing is not None:
            return existing

        registration = self.plugin_registry.get(plugin_name)
        if registration is None:
            raise LookupError(f"Plugin '{plugin_name}' is not registered")

        instance = registration.cls(self.runtime)
        logger.info("Loaded plugin '%s'", plugin_name)
        return instance

    def setup(self, manifest: PluginManifest, plugin_dir: str | Path) -> tuple[Plugin, ...]:
        """Load every enabled manifest entry from ``plugin_dir`` in order.

        Each entry ``name`` is looked up as ``<plugin_dir>/<name>.py`` (or a
        ``<name>`` package).  Missing or broken modules are logged and
        skipped; plugin construction errors propagate, including a name
        already taken by a previously loaded plugin.
        """

        root = Path(plugin_dir)
        loaded: list[Plugin] = []

        for entry_name in manifest.enabled_plugins():
            module_path = self._module_path_for(root, entry_name)
            if module_path is None:
                logger.error("Plugin module for '%s' not found in '%s'", entry_name, root)
                continue

            module = self._import_module(module_path)
            if module is None:
                continue

            for name, registration in self._register_module_plugins(module).items():
                loaded.append(registration.cls(self.runtime))
                logger.info("Loaded plugin '%s'", name)

        return tuple(loaded)

    def _module_path_for(self, root: Path, entry_name: str) -> Path | None:
        candidates = (root / f"{entry_name}.py", root / entry_name / "__init__.py")
        for candidate in candidates:
            if candidate.is_file():
                return candidate
        return None

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    def get_plugin_health(self) -> Dict[str, Dict[str, Any]]:
        """Return status information for discovered and loaded plugins."""

        health: Dict[str, Dict[str, Any]] = {}

        for plugin_name, registration in self.plugin_registry.items():
            health[plugin_name] = {
                "module": registration.module_name,
                "loaded": plugin_name in self.runtime.plugins,
            }

        aliases = self.runtime.aliases
        for plugin_name, instance in self.runtime.plugins.items():
            info = health.setdefault(plugin_name, {"module": type(instance).__module__})
            info["loaded"] = True
            info.update(instance.describe())
            info["aliases"] = tuple(
                alias for alias in aliases if aliases.get(alias) is instance
            )

        return health
