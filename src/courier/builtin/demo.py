"""Demo units: a counter that asks a prompt service for numbers and an audit
service that records every number it receives.

``prompt`` is the generic pending-request service: answers arrive later as
``Resolve`` messages. ``audit`` answers immediately, so resolving a prompt
request cascades through ``counter`` into ``audit`` and back into ``counter``
within one dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from loguru import logger

from courier import pending
from courier.descriptors import Descriptor, Message, ServiceStep, component, service
from courier.effects import EffectTree, batch, empty, external
from courier.hookspecs import hookimpl
from courier.pending import ServiceCall

PROMPT = "prompt"
AUDIT = "audit"
COUNTER = "counter"


@dataclass(frozen=True)
class Notice:
    """External effect: a line of text for the user."""

    text: str


# counter


@dataclass(frozen=True)
class CounterState:
    total: int = 0
    received: tuple[int, ...] = ()
    audited: int = 0


@dataclass(frozen=True)
class Ask:
    label: str


@dataclass(frozen=True)
class Got:
    value: int


@dataclass(frozen=True)
class Audited:
    entry: int


def counter_init() -> CounterState:
    return CounterState()


def counter_update(msg: Any, state: CounterState) -> tuple[CounterState, EffectTree]:
    match msg:
        case Ask(label):
            return state, pending.call(PROMPT, label, Got)
        case Got(value):
            new_state = replace(state, total=state.total + value, received=(*state.received, value))
            return new_state, batch(
                [
                    pending.call(AUDIT, f"received {value}", Audited),
                    external(Notice(f"total is now {new_state.total}")),
                ]
            )
        case Audited(entry):
            return replace(state, audited=state.audited + 1), external(Notice(f"audit entry #{entry}"))
    return state, empty()


# audit


@dataclass(frozen=True)
class AuditState:
    entries: tuple[str, ...] = ()


@dataclass(frozen=True)
class Clear:
    pass


def audit_init() -> AuditState:
    return AuditState()


def audit_request(call: ServiceCall, state: AuditState) -> ServiceStep:
    entry = len(state.entries)
    return AuditState(entries=(*state.entries, call.label)), empty(), [call.continuation(entry)]


def audit_update(msg: Any, state: AuditState) -> ServiceStep:
    match msg:
        case Clear():
            return AuditState(), empty(), []
    return state, empty(), []


def units() -> list[Descriptor]:
    return [
        component(COUNTER, update=counter_update, init=counter_init),
        pending.service_descriptor(PROMPT),
        service(AUDIT, update=audit_update, request=audit_request, init=audit_init, view=lambda s: list(s.entries)),
    ]


def ask(label: str) -> Message:
    return Message(COUNTER, Ask(label))


@hookimpl
def provide_units() -> list[Descriptor]:
    return units()


@hookimpl
def execute_effect(effect: Any) -> bool | None:
    if not isinstance(effect, Notice):
        return None
    logger.info("demo.notice {}", effect.text)
    return True
