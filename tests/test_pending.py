from __future__ import annotations

from courier.descriptors import Message, ServiceDescriptor
from courier.effects import Empty, Request
from courier.pending import (
    PendingEntry,
    Resolve,
    ServiceCall,
    ServiceState,
    call,
    init,
    pending,
    request,
    resolve_message,
    service_descriptor,
    update,
)


def _call(label: str) -> ServiceCall:
    return ServiceCall(label, lambda value: Message("caller", (label, value)))


def test_init_is_empty() -> None:
    state = init()

    assert state.next_id == 0
    assert dict(state.pending) == {}
    assert pending(state) == []


def test_request_allocates_increasing_ids() -> None:
    state = init()
    seen: list[int] = []
    for label in ("a", "b", "c"):
        before = state.next_id
        state, tree, responses = request(_call(label), state)
        assert state.next_id == before + 1
        assert tree == Empty()
        assert responses == []
        seen.append(before)

    assert seen == [0, 1, 2]
    assert pending(state) == [(0, "a"), (1, "b"), (2, "c")]


def test_resolve_fires_continuation_and_removes_entry() -> None:
    state, _, _ = request(_call("X"), init())

    state, tree, responses = update(Resolve(0, 42), state)

    assert tree == Empty()
    assert responses == [Message("caller", ("X", 42))]
    assert pending(state) == []
    assert state.next_id == 1


def test_resolving_twice_is_a_noop() -> None:
    state, _, _ = request(_call("X"), init())
    state, _, first = update(Resolve(0, 1), state)

    again, tree, second = update(Resolve(0, 2), state)

    assert first == [Message("caller", ("X", 1))]
    assert second == []
    assert tree == Empty()
    assert again is state


def test_unknown_id_is_a_noop() -> None:
    state, _, _ = request(_call("X"), init())

    after, _, responses = update(Resolve(99, "late"), state)

    assert after is state
    assert responses == []


def test_resolve_only_removes_matching_entry() -> None:
    state = init()
    for label in ("first", "second", "third"):
        state, _, _ = request(_call(label), state)

    state, _, responses = update(Resolve(1, "x"), state)

    assert responses == [Message("caller", ("second", "x"))]
    assert pending(state) == [(0, "first"), (2, "third")]


def test_ids_are_not_reused_after_resolution() -> None:
    state, _, _ = request(_call("a"), init())
    state, _, _ = update(Resolve(0, None), state)

    state, _, _ = request(_call("b"), state)

    assert pending(state) == [(1, "b")]


def test_unrelated_local_message_is_ignored() -> None:
    state = init()

    after, tree, responses = update("ping", state)

    assert after is state
    assert tree == Empty()
    assert responses == []


def test_pending_entries_do_not_compare_continuations() -> None:
    assert PendingEntry(0, "a", lambda v: v) == PendingEntry(0, "a", lambda v: v)
    assert ServiceState() == init()


def test_call_builds_request_effect() -> None:
    effect = call("prompt", "pick", str)

    assert isinstance(effect, Request)
    assert effect.tag == "prompt"
    assert effect.payload.label == "pick"
    assert effect.payload.continuation(5) == "5"


def test_service_descriptor_uses_generic_contract() -> None:
    descriptor = service_descriptor("prompt")

    assert isinstance(descriptor, ServiceDescriptor)
    assert descriptor.tag == "prompt"
    assert descriptor.init() == init()
    assert descriptor.lift(Resolve(0, 1)) == resolve_message("prompt", 0, 1)
    state, _, _ = descriptor.request(_call("a"), descriptor.init())
    assert descriptor.view(state) == [(0, "a")]
