"""
Unbuffered handoff channel between long-running asyncio tasks.

A Handoff behaves like a rendezvous channel: ``send`` only returns once a
receiver has taken the value, so a producer can never run ahead of its
consumer by more than one item.
"""

import asyncio
from typing import Any, Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class HandoffClosedError(Exception):
    """Raised when sending on, receiving from, or re-closing a closed handoff."""


class Handoff(Generic[T]):
    """Single-slot rendezvous channel."""

    def __init__(self, name: str = "handoff"):
        self.name = name
        self._queue: "asyncio.Queue[Any]" = asyncio.Queue(maxsize=1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, item: T) -> None:
        """Hand ``item`` to a receiver, waiting until it has been taken."""
        if self._closed:
            raise HandoffClosedError(f"send on closed handoff '{self.name}'")

        await self._queue.put(item)
        await self._queue.join()

    async def receive(self) -> T:
        """Wait for the next item."""
        if self._closed and self._queue.empty():
            raise HandoffClosedError(f"receive on closed handoff '{self.name}'")

        item = await self._queue.get()
        self._queue.task_done()

        if item is _CLOSED:
            raise HandoffClosedError(f"receive on closed handoff '{self.name}'")

        return item

    def close(self) -> None:
        """
        Close the handoff.

        Must be called exactly once, after every producer has stopped.
        A receiver blocked in ``receive`` is woken up with HandoffClosedError.
        """
        if self._closed:
            raise HandoffClosedError(f"handoff '{self.name}' already closed")

        self._closed = True
        if not self._queue.full():
            self._queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "Handoff[T]":
        return self

    async def __anext__(self) -> T:
        try:
            return await self.receive()
        except HandoffClosedError:
            raise StopAsyncIteration
