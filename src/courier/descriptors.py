"""Descriptors binding a unit's local state and messages into the aggregate."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from courier.effects import EffectTree

type State = Mapping[str, Any]
type Step = tuple[Any, EffectTree]
type ServiceStep = tuple[Any, EffectTree, list[Message]]


@dataclass(frozen=True)
class Message:
    """Aggregate message: one unit's local message tagged with the unit."""

    tag: str
    body: Any


@dataclass(frozen=True, kw_only=True)
class Descriptor:
    """How a component lives inside the aggregate state and message type."""

    tag: str
    lift: Callable[[Any], Message]
    read: Callable[[State], Any]
    write: Callable[[Any, State], State]
    update: Callable[[Any, Any], Step]
    init: Callable[[], Any]
    view: Callable[[Any], Any] | None = field(default=None, compare=False)

    @property
    def is_service(self) -> bool:
        return False


@dataclass(frozen=True, kw_only=True)
class ServiceDescriptor(Descriptor):
    """Descriptor of a singleton service.

    ``update`` also returns aggregate-level response messages, and ``request``
    handles payloads sent to the service from any unit's effect tree.
    """

    update: Callable[[Any, Any], ServiceStep]
    request: Callable[[Any, Any], ServiceStep]

    @property
    def is_service(self) -> bool:
        return True


def keyed_slot(
    tag: str,
) -> tuple[Callable[[Any], Message], Callable[[State], Any], Callable[[Any, State], State]]:
    """Build ``lift``/``read``/``write`` for a unit stored under ``tag``."""

    def lift(body: Any) -> Message:
        return Message(tag, body)

    def read(state: State) -> Any:
        return state[tag]

    def write(local: Any, state: State) -> State:
        return {**state, tag: local}

    return lift, read, write


def component(
    tag: str,
    *,
    update: Callable[[Any, Any], Step],
    init: Callable[[], Any],
    view: Callable[[Any], Any] | None = None,
) -> Descriptor:
    lift, read, write = keyed_slot(tag)
    return Descriptor(tag=tag, lift=lift, read=read, write=write, update=update, init=init, view=view)


def service(
    tag: str,
    *,
    update: Callable[[Any, Any], ServiceStep],
    request: Callable[[Any, Any], ServiceStep],
    init: Callable[[], Any],
    view: Callable[[Any], Any] | None = None,
) -> ServiceDescriptor:
    lift, read, write = keyed_slot(tag)
    return ServiceDescriptor(
        tag=tag,
        lift=lift,
        read=read,
        write=write,
        update=update,
        request=request,
        init=init,
        view=view,
    )
