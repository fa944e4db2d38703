from __future__ import annotations

from typing import Any

import pytest

from courier.builtin import demo
from courier.config import Settings
from courier.descriptors import Descriptor, Message, component
from courier.effects import external
from courier.errors import CascadeLimitError, DuplicateUnitError
from courier.framework import CourierFramework
from courier.hookspecs import hookimpl
from courier.pending import Resolve, pending, service_descriptor


class EchoPlugin:
    def __init__(self) -> None:
        self.executed: list[Any] = []
        self.errors: list[str] = []

    @hookimpl
    def provide_units(self) -> list[Descriptor]:
        return [component("echo", update=lambda msg, state: (state, external(("echo", msg))), init=lambda: None)]

    @hookimpl
    def execute_effect(self, effect: Any) -> bool | None:
        if isinstance(effect, tuple) and effect[0] == "echo":
            self.executed.append(effect[1])
            return True
        return None

    @hookimpl
    def on_error(self, stage: str) -> None:
        self.errors.append(stage)


class PromptPlugin:
    @hookimpl
    def provide_units(self) -> list[Descriptor]:
        return [service_descriptor("prompt")]


class BrokenObserver:
    @hookimpl
    def on_error(self, stage: str, error: Exception) -> None:
        raise RuntimeError("observer failed")


def _framework(*plugins: Any, **settings: Any) -> CourierFramework:
    framework = CourierFramework(Settings(**settings))
    framework.load_plugins(plugins, entry_points=False)
    return framework


def test_build_registry_collects_units_in_registration_order() -> None:
    framework = _framework(EchoPlugin(), PromptPlugin())

    registry = framework.build_registry()

    assert registry.tags() == ["echo", "prompt"]
    assert [item.tag for item in registry.services()] == ["prompt"]


def test_duplicate_units_across_plugins_fail_at_startup() -> None:
    framework = _framework(PromptPlugin(), PromptPlugin())

    with pytest.raises(DuplicateUnitError):
        framework.build_registry()


def test_plugins_report_contributed_units() -> None:
    framework = _framework(demo)

    (loaded,) = framework.plugins()

    assert set(loaded.units) == {demo.COUNTER, demo.PROMPT, demo.AUDIT}


def test_execute_effect_uses_first_handling_plugin() -> None:
    plugin = EchoPlugin()
    framework = _framework(plugin)

    assert framework.execute_effect(("echo", 1), lambda _message: None) is True
    assert framework.execute_effect("unknown", lambda _message: None) is False
    assert plugin.executed == [1]


def test_notify_error_isolates_observer_failures() -> None:
    plugin = EchoPlugin()
    framework = _framework(plugin, BrokenObserver())

    framework.notify_error("execute_effect", RuntimeError("x"), None)

    assert plugin.errors == ["execute_effect"]


def test_create_router_applies_settings() -> None:
    framework = _framework(demo, max_steps=3)
    router = framework.create_router()
    # asking fits in three steps, the resolve cascade does not
    router.dispatch(demo.ask("first"))

    with pytest.raises(CascadeLimitError):
        router.dispatch(Message(demo.PROMPT, Resolve(0, 1)))


@pytest.mark.asyncio
async def test_runtime_routes_opaque_effects_through_plugins() -> None:
    plugin = EchoPlugin()
    framework = _framework(plugin)
    runtime = framework.create_runtime()
    runtime.post(Message("echo", "hello"))

    await runtime.run_until_idle()

    assert plugin.executed == ["hello"]


def test_demo_cascade_through_framework() -> None:
    framework = _framework(demo)
    router = framework.create_router()

    router.dispatch(demo.ask("first"))
    router.dispatch(demo.ask("second"))
    effects = router.dispatch(Message(demo.PROMPT, Resolve(1, 7)))

    assert effects == [demo.Notice("audit entry #0"), demo.Notice("total is now 7")]
    assert pending(router.read(demo.PROMPT)) == [(0, "first")]
    assert router.read(demo.COUNTER) == demo.CounterState(total=7, received=(7,), audited=1)
    assert router.read(demo.AUDIT).entries == ("received 7",)
    assert all(framework.execute_effect(effect, lambda _message: None) for effect in effects)


def test_demo_audit_can_be_cleared() -> None:
    router = _framework(demo).create_router()
    router.dispatch(demo.ask("first"))
    router.dispatch(Message(demo.PROMPT, Resolve(0, 2)))
    assert router.view(demo.AUDIT) == ["received 2"]

    assert router.dispatch(Message(demo.AUDIT, demo.Clear())) == []
    assert router.view(demo.AUDIT) == []
