"""Plugin-driven courier framework: builds the registry, router and runtime."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import pluggy
from loguru import logger

from courier.bus import BusProtocol
from courier.config import Settings, get_settings
from courier.descriptors import Message
from courier.effects import Effect
from courier.hookspecs import COURIER_HOOK_NAMESPACE, CourierHookSpecs
from courier.registry import Registry
from courier.router import Router
from courier.runtime import Post, Runtime

ENTRY_POINT_GROUP = "courier"


@dataclass(frozen=True)
class LoadedPlugin:
    """Registration result for one plugin."""

    name: str
    units: tuple[str, ...]


class CourierFramework:
    """Collects units from plugins and wires them into one router."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._plugin_manager = pluggy.PluginManager(COURIER_HOOK_NAMESPACE)
        self._plugin_manager.add_hookspecs(CourierHookSpecs)
        self._failed_plugins: dict[str, str] = {}

    @property
    def failed_plugins(self) -> dict[str, str]:
        return dict(self._failed_plugins)

    def register_plugin(self, plugin: Any, *, name: str | None = None) -> None:
        self._plugin_manager.register(plugin, name=name)

    def load_plugins(self, plugins: Iterable[Any] = (), *, entry_points: bool = True) -> None:
        """Register explicit plugins, then any installed ``courier`` entry points."""
        for plugin in plugins:
            self.register_plugin(plugin)
        if not entry_points:
            return
        try:
            count = self._plugin_manager.load_setuptools_entrypoints(ENTRY_POINT_GROUP)
        except Exception as exc:  # pragma: no cover - depends on installed distributions
            self._failed_plugins[ENTRY_POINT_GROUP] = str(exc)
            logger.opt(exception=True).warning("plugin.load_failed group={}", ENTRY_POINT_GROUP)
            return
        logger.debug("plugin.entry_points loaded={}", count)

    def plugins(self) -> list[LoadedPlugin]:
        loaded: list[LoadedPlugin] = []
        for name, plugin in self._plugin_manager.list_name_plugin():
            provide = getattr(plugin, "provide_units", None)
            units = tuple(descriptor.tag for descriptor in provide() or []) if callable(provide) else ()
            loaded.append(LoadedPlugin(name=name, units=units))
        return loaded

    def build_registry(self) -> Registry:
        """Build the dispatch table from every plugin's ``provide_units``.

        Raises:
            DuplicateUnitError: If two plugins contribute the same tag.
        """
        registry = Registry()
        # pluggy calls the most recently registered plugin first
        for batch in reversed(self._plugin_manager.hook.provide_units()):
            for descriptor in batch or []:
                registry.register(descriptor)
        logger.info("registry.ready units={} services={}", len(registry), len(registry.services()))
        return registry

    def create_router(self, registry: Registry | None = None) -> Router:
        return Router.from_registry(
            self.build_registry() if registry is None else registry,
            max_steps=self.settings.max_steps,
            trace=self.settings.trace,
        )

    def create_runtime(self, router: Router | None = None, *, bus: BusProtocol | None = None) -> Runtime:
        return Runtime(
            self.create_router() if router is None else router,
            executor=self.execute_effect,
            bus=bus,
            on_error=self.notify_error,
        )

    def execute_effect(self, effect: Effect, post: Post) -> bool:
        return bool(self._plugin_manager.hook.execute_effect(effect=effect, post=post))

    def register_cli_commands(self, app: Any) -> None:
        self._plugin_manager.hook.register_cli_commands(app=app)

    def notify_error(self, stage: str, error: Exception, message: Message | None) -> None:
        """Call on_error hooks, swallowing observer failures."""
        arguments = {"stage": stage, "error": error, "message": message}
        for impl in reversed(self._plugin_manager.hook.on_error.get_hookimpls()):
            call_kwargs = {name: arguments[name] for name in impl.argnames if name in arguments}
            try:
                impl.function(**call_kwargs)
            except Exception:
                logger.opt(exception=True).warning(
                    "hook.on_error_failed stage={} plugin={}",
                    stage,
                    impl.plugin_name or "<unknown>",
                )
