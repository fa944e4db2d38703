"""Router: owns the aggregate state and resolves effect trees."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from loguru import logger

from courier.descriptors import Message, ServiceDescriptor, State
from courier.effects import Batch, Effect, EffectTree, Empty, External, Request, describe, empty, map_effects
from courier.errors import CascadeLimitError
from courier.registry import Registry

type WorkItem = EffectTree | Message
type Resolution = tuple[State, list[Effect]]

_unit_context: ContextVar[str] = ContextVar("courier_unit")


def current_unit() -> str:
    """Tag of the unit whose transition is currently running, or ``-``."""
    return _unit_context.get("-")


@contextmanager
def _acting(tag: str) -> Iterator[None]:
    token = _unit_context.set(tag)
    try:
        yield
    finally:
        _unit_context.reset(token)


def _checked(tag: str, responses: Iterable[Any]) -> list[Message]:
    """Responses must already be aggregate messages.

    A raw local message here means a continuation was never lifted, usually a
    request payload that is not a ``Liftable``.
    """
    checked = list(responses)
    for response in checked:
        if not isinstance(response, Message):
            raise TypeError(f"unit '{tag}' returned a response that is not a Message: {response!r}")
    return checked


class Engine:
    """Pure resolution functions over an aggregate state.

    Every method takes a state and returns a new one together with the ordered
    batch of opaque effects for the host. The whole cascade triggered by one
    message, including nested service requests and replayed responses, is
    resolved before a method returns.
    """

    def __init__(self, registry: Registry, *, max_steps: int | None = None, trace: bool = False) -> None:
        self.registry = registry
        self._max_steps = max_steps
        self._log_level = "INFO" if trace else "DEBUG"

    def dispatch(self, message: Message, state: State) -> Resolution:
        """Run ``message`` through its unit and resolve everything it causes."""
        with _acting(message.tag):
            new_state, effects = self._drain(state, [message], origin=message.tag)
        logger.log(self._log_level, "router.dispatch tag={} effects={}", message.tag, len(effects))
        return new_state, effects

    def resolve_effects(self, state: State, tree: EffectTree) -> Resolution:
        """Resolve ``tree`` depth-first, left to right."""
        return self._drain(state, [tree], origin=current_unit())

    def process_effects_and_messages(self, state: State, tree: EffectTree, responses: list[Message]) -> Resolution:
        """Resolve ``tree``, then dispatch each response in order."""
        return self._drain(state, [tree, *responses], origin=current_unit())

    def _drain(self, state: State, work: list[WorkItem], *, origin: str) -> Resolution:
        # Explicit stack, popped from the end: the next item to resolve is last.
        # Expanding an item pushes its children in reverse so the order matches
        # the recursive definition without growing the Python call stack.
        stack: list[WorkItem] = list(reversed(work))
        effects: list[Effect] = []
        steps = 0
        while stack:
            item = stack.pop()
            steps += 1
            if self._max_steps is not None and steps > self._max_steps:
                raise CascadeLimitError(origin, self._max_steps)
            match item:
                case Message():
                    with _acting(item.tag):
                        state, tree, responses = self._update(item, state)
                    _schedule(stack, tree, responses)
                case Empty():
                    continue
                case External(effect):
                    effects.append(effect)
                case Request(tag, payload):
                    with _acting(tag):
                        state, tree, responses = self._request(tag, payload, state)
                    _schedule(stack, tree, responses)
                case Batch(items):
                    stack.extend(reversed(items))
                case _:
                    raise TypeError(f"not a message or effect tree: {item!r}")
        return state, effects

    def _update(self, message: Message, state: State) -> tuple[State, EffectTree, list[Message]]:
        descriptor = self.registry.get(message.tag)
        if descriptor is None:
            logger.warning("router.unknown_tag tag={}", message.tag)
            return state, empty(), []
        local = descriptor.read(state)
        if isinstance(descriptor, ServiceDescriptor):
            local, tree, responses = descriptor.update(message.body, local)
        else:
            local, tree = descriptor.update(message.body, local)
            responses = []
        logger.log(self._log_level, "router.update tag={} tree={}", message.tag, describe(tree))
        return descriptor.write(local, state), map_effects(descriptor.lift, tree), _checked(message.tag, responses)

    def _request(self, tag: str, payload: Any, state: State) -> tuple[State, EffectTree, list[Message]]:
        descriptor = self.registry.service(tag)
        if descriptor is None:
            logger.warning("router.unknown_service tag={}", tag)
            return state, empty(), []
        local, tree, responses = descriptor.request(payload, descriptor.read(state))
        logger.log(
            self._log_level, "router.request service={} tree={} responses={}", tag, describe(tree), len(responses)
        )
        return descriptor.write(local, state), map_effects(descriptor.lift, tree), _checked(tag, responses)


def _schedule(stack: list[WorkItem], tree: EffectTree, responses: list[Message]) -> None:
    stack.extend(reversed(responses))
    stack.append(tree)


class Router:
    """Single owner of the aggregate state.

    The host hands it one message at a time; each call replaces the state and
    returns the effects the host must execute.
    """

    def __init__(self, engine: Engine, state: State | None = None) -> None:
        self._engine = engine
        self._state = engine.registry.initial_state() if state is None else state

    @classmethod
    def from_registry(cls, registry: Registry, *, max_steps: int | None = None, trace: bool = False) -> Router:
        return cls(Engine(registry, max_steps=max_steps, trace=trace))

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def registry(self) -> Registry:
        return self._engine.registry

    @property
    def state(self) -> State:
        return self._state

    def dispatch(self, message: Message) -> list[Effect]:
        self._state, effects = self._engine.dispatch(message, self._state)
        return effects

    def read(self, tag: str) -> Any:
        """Local state of unit ``tag``."""
        return self.registry.get_or_raise(tag).read(self._state)

    def view(self, tag: str) -> Any:
        """Presentation of unit ``tag``; the raw local state if it has no view."""
        descriptor = self.registry.get_or_raise(tag)
        local = descriptor.read(self._state)
        return local if descriptor.view is None else descriptor.view(local)
