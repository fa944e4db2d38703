"""Pluggy hook namespace and framework hook specifications."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pluggy

from courier.descriptors import Descriptor, Message
from courier.effects import Effect

COURIER_HOOK_NAMESPACE = "courier"
hookspec = pluggy.HookspecMarker(COURIER_HOOK_NAMESPACE)
hookimpl = pluggy.HookimplMarker(COURIER_HOOK_NAMESPACE)


class CourierHookSpecs:
    """Hook contract for courier extensions."""

    @hookspec
    def provide_units(self) -> list[Descriptor] | None:
        """Contribute unit descriptors to the registry built at startup."""

    @hookspec(firstresult=True)
    def execute_effect(self, effect: Effect, post: Callable[[Message], None]) -> bool | None:
        """Execute one opaque effect; return True once handled."""

    @hookspec
    def register_cli_commands(self, app: Any) -> None:
        """Register CLI commands onto the root Typer application."""

    @hookspec
    def on_error(self, stage: str, error: Exception, message: Message | None) -> None:
        """Observe host runtime errors from any stage."""
