"""Effect trees: what a unit asks for after a transition.

A transition never performs work itself. It returns an effect tree describing
what should happen next, and the router walks that tree:

- ``Empty`` is nothing at all.
- ``External`` wraps an opaque effect the router only batches and forwards.
  Effects that report back (such as :class:`Task`) subclass
  :class:`Liftable` so their continuation can be lifted like a request's.
- ``Request`` asks a service, addressed by tag, to handle a payload.
- ``Batch`` groups trees that resolve left to right.

Trees are parameterized by the message type they eventually produce. Lifting a
unit's tree into a wider message type is done with :func:`map_effects`, which
composes the mapping function into any continuation carried by a request
payload instead of replacing it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

type Effect = Any


def compose[A, B, C](g: Callable[[B], C], f: Callable[[A], B]) -> Callable[[A], C]:
    """Return ``g ∘ f``."""

    def composed(value: A) -> C:
        return g(f(value))

    return composed


class Liftable(ABC):
    """Payload or effect carrying a continuation that can be lifted.

    Only subclasses are mapped by :func:`map_effects`; any other value is
    forwarded untouched, whatever attributes it has.
    """

    __slots__ = ()

    @abstractmethod
    def map(self, f: Callable[[Any], Any]) -> Liftable: ...


class _Tree:
    __slots__ = ()

    def map(self, f: Callable[[Any], Any]) -> EffectTree:
        return map_effects(f, self)  # type: ignore[arg-type]


@dataclass(frozen=True)
class Empty(_Tree):
    """No effect."""


@dataclass(frozen=True)
class External(_Tree):
    """An opaque effect for the host runtime."""

    effect: Effect


@dataclass(frozen=True)
class Request(_Tree):
    """A request addressed to the service registered under ``tag``."""

    tag: str
    payload: Any


@dataclass(frozen=True)
class Batch(_Tree):
    """Trees resolved in order, left to right."""

    items: tuple[EffectTree, ...] = field(default_factory=tuple)


type EffectTree = Empty | External | Request | Batch


@dataclass(frozen=True)
class Task(Liftable):
    """External effect whose result is turned into a message.

    The host calls ``run`` (sync or async) and posts ``then(result)`` back as a
    new inbound message.
    """

    run: Callable[[], Any]
    then: Callable[[Any], Any]

    def map(self, f: Callable[[Any], Any]) -> Task:
        return Task(self.run, compose(f, self.then))


_EMPTY = Empty()


def empty() -> Empty:
    return _EMPTY


def external(effect: Effect) -> External:
    return External(effect)


def request(tag: str, payload: Any) -> Request:
    return Request(tag, payload)


def batch(items: Iterable[EffectTree] = ()) -> Batch:
    return Batch(tuple(items))


def map_effects(f: Callable[[Any], Any], tree: EffectTree) -> EffectTree:
    """Lift every message ``tree`` can produce through ``f``.

    ``map_effects(g, map_effects(f, t))`` behaves exactly like
    ``map_effects(compose(g, f), t)``, including for continuations stored in
    request payloads.
    """
    match tree:
        case Empty():
            return tree
        case External(effect):
            # effects without a continuation never produce messages
            if isinstance(effect, Liftable):
                return External(effect.map(f))
            return tree
        case Request(tag, payload):
            if isinstance(payload, Liftable):
                return Request(tag, payload.map(f))
            return tree
        case Batch(items):
            return Batch(tuple(map_effects(f, item) for item in items))
    raise TypeError(f"not an effect tree: {tree!r}")


def describe(tree: EffectTree) -> str:
    """Short, log-friendly rendering of a tree's shape."""
    match tree:
        case Empty():
            return "empty"
        case External():
            return "external"
        case Request(tag, _):
            return f"request({tag})"
        case Batch(items):
            return "batch[" + ", ".join(describe(item) for item in items) + "]"
    return repr(tree)
