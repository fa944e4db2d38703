"""Generic request/response service with a pending-request table.

A caller puts ``call(tag, label, continuation)`` into its effect tree. The
service records the request under a fresh id and answers nothing yet. Later a
``Resolve(id, value)`` message, usually posted by the host after user input or
an external effect, consumes the entry and emits ``continuation(value)`` as an
aggregate message, which the router dispatches like any other.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from courier.descriptors import Message, ServiceDescriptor, ServiceStep, service
from courier.effects import Liftable, Request, compose, empty


@dataclass(frozen=True)
class ServiceCall(Liftable):
    """Request payload: a display label and the continuation for the result."""

    label: str
    continuation: Callable[[Any], Any] = field(compare=False)

    def map(self, f: Callable[[Any], Any]) -> ServiceCall:
        return ServiceCall(self.label, compose(f, self.continuation))


@dataclass(frozen=True)
class PendingEntry:
    id: int
    label: str
    continuation: Callable[[Any], Message] = field(compare=False)


@dataclass(frozen=True)
class ServiceState:
    """Local state of one service instance.

    ``next_id`` only grows, so ids are never reused even after resolution.
    """

    next_id: int = 0
    pending: Mapping[int, PendingEntry] = field(default_factory=dict)


@dataclass(frozen=True)
class Resolve:
    """Local message resolving pending request ``id`` with ``value``."""

    id: int
    value: Any


def init() -> ServiceState:
    return ServiceState()


def request(call: ServiceCall, state: ServiceState) -> ServiceStep:
    """Record ``call`` under the next id. Produces no effect and no response."""
    entry = PendingEntry(id=state.next_id, label=call.label, continuation=call.continuation)
    pending = {**state.pending, entry.id: entry}
    return ServiceState(next_id=state.next_id + 1, pending=pending), empty(), []


def resolve(request_id: int, value: Any, state: ServiceState) -> ServiceStep:
    entry = state.pending.get(request_id)
    if entry is None:
        logger.debug("service.resolve.miss id={}", request_id)
        return state, empty(), []
    pending = {key: item for key, item in state.pending.items() if key != request_id}
    return ServiceState(next_id=state.next_id, pending=pending), empty(), [entry.continuation(value)]


def update(msg: Any, state: ServiceState) -> ServiceStep:
    match msg:
        case Resolve(request_id, value):
            return resolve(request_id, value, state)
    return state, empty(), []


def pending(state: ServiceState) -> list[tuple[int, str]]:
    """Pending requests as ``(id, label)`` pairs, oldest first."""
    return [(entry.id, entry.label) for entry in sorted(state.pending.values(), key=lambda item: item.id)]


def service_descriptor(tag: str, *, view: Callable[[Any], Any] | None = None) -> ServiceDescriptor:
    """Descriptor for a pending-request service registered under ``tag``."""
    return service(tag, update=update, request=request, init=init, view=view or pending)


def call(tag: str, label: str, continuation: Callable[[Any], Any]) -> Request:
    """Effect asking service ``tag`` to hold a request until it is resolved."""
    return Request(tag, ServiceCall(label, continuation))


def resolve_message(tag: str, request_id: int, value: Any) -> Message:
    """Aggregate message resolving ``request_id`` on service ``tag``."""
    return Message(tag, Resolve(request_id, value))
