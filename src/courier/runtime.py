"""Host loop: feeds inbound messages to the router and executes its effects.

The router never runs effects. This loop takes one message off the bus,
dispatches it, and hands every returned effect to an executor. Effects that
report back do so by posting a new message on the bus, so re-entry always goes
through ``Router.dispatch`` again.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Protocol

from loguru import logger

from courier.bus import BusProtocol, MessageBus
from courier.descriptors import Message
from courier.effects import Effect, Task
from courier.router import Router

type Post = Callable[[Message], None]


class EffectExecutor(Protocol):
    def __call__(self, effect: Effect, post: Post) -> bool | Awaitable[bool] | None: ...


type ErrorObserver = Callable[[str, Exception, Message | None], None]


async def run_task(task: Task, post: Post) -> None:
    """Run a :class:`Task` and post its mapped result."""
    result = task.run()
    if inspect.isawaitable(result):
        result = await result
    post(task.then(result))


class Runtime:
    """Single-consumer loop around one router."""

    def __init__(
        self,
        router: Router,
        *,
        executor: EffectExecutor | None = None,
        bus: BusProtocol | None = None,
        on_error: ErrorObserver | None = None,
    ) -> None:
        self.router = router
        self.bus: BusProtocol = bus or MessageBus()
        self._executor = executor
        self._on_error = on_error

    def post(self, message: Message) -> None:
        self.bus.post_inbound(message)

    async def handle_once(self, *, timeout_seconds: float | None = None) -> list[Effect] | None:
        """Dispatch one inbound message and execute its effects.

        Returns the effect batch, or None when no message arrived in time.
        """
        message = await self.bus.next_inbound(timeout_seconds=timeout_seconds)
        if message is None:
            return None
        effects = self.router.dispatch(message)
        for effect in effects:
            await self._execute(effect, message)
        return effects

    async def run_until_idle(self, *, max_messages: int | None = None) -> int:
        """Handle queued messages until the bus is empty; return how many ran."""
        handled = 0
        while self.bus.pending_count() > 0:
            if max_messages is not None and handled >= max_messages:
                break
            await self.handle_once()
            handled += 1
        return handled

    async def _execute(self, effect: Effect, message: Message) -> None:
        try:
            if isinstance(effect, Task):
                await run_task(effect, self.post)
                return
            handled = self._executor(effect, self.post) if self._executor is not None else None
            if inspect.isawaitable(handled):
                handled = await handled
        except Exception as error:
            logger.opt(exception=True).warning("runtime.effect_failed tag={} effect={!r}", message.tag, effect)
            if self._on_error is not None:
                self._on_error("execute_effect", error, message)
            return
        if not handled:
            logger.warning("runtime.effect_unhandled tag={} effect={!r}", message.tag, effect)
