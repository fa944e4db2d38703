"""Minimal async inbound bus feeding the router."""

from __future__ import annotations

import asyncio
from typing import Protocol

from courier.descriptors import Message


class BusProtocol(Protocol):
    """Minimal contract for inbound message providers."""

    def post_inbound(self, message: Message) -> None: ...

    async def next_inbound(self, timeout_seconds: float | None = None) -> Message | None: ...

    def pending_count(self) -> int: ...


class MessageBus:
    """In-memory FIFO bus of aggregate messages."""

    def __init__(self) -> None:
        self._inbound: asyncio.Queue[Message] = asyncio.Queue()

    def post_inbound(self, message: Message) -> None:
        self._inbound.put_nowait(message)

    async def next_inbound(self, timeout_seconds: float | None = None) -> Message | None:
        if timeout_seconds is None:
            return await self._inbound.get()
        try:
            return await asyncio.wait_for(self._inbound.get(), timeout=timeout_seconds)
        except TimeoutError:
            return None

    def pending_count(self) -> int:
        return self._inbound.qsize()
