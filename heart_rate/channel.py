"""Bounded single-producer, single-consumer channel for heart rate values."""

import asyncio
from collections import deque
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_CAPACITY = 100


class ChannelClosed(Exception):
    """The other half of the channel has been closed."""


class _ChannelState(Generic[T]):
    def __init__(self, capacity: int):
        self.capacity = capacity
        self.buffer: deque[T] = deque()
        self.sender_closed = False
        self.receiver_closed = False
        self.changed = asyncio.Condition()


class Sender(Generic[T]):
    """Producer half. Sends wait while the buffer is full."""

    def __init__(self, state: _ChannelState[T]):
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.sender_closed or self._state.receiver_closed

    async def send(self, value: T) -> None:
        """Append a value, waiting for room.

        Raises:
            ChannelClosed: If the receiver is (or becomes) closed
        """
        state = self._state
        async with state.changed:
            await state.changed.wait_for(lambda: state.receiver_closed or len(state.buffer) < state.capacity)
            if state.receiver_closed:
                raise ChannelClosed("Receiver closed")
            if state.sender_closed:
                raise ChannelClosed("Sender closed")
            state.buffer.append(value)
            state.changed.notify_all()

    async def aclose(self) -> None:
        """Close the sender. Values already buffered can still be received."""
        state = self._state
        async with state.changed:
            state.sender_closed = True
            state.changed.notify_all()


class Receiver(Generic[T]):
    """Consumer half. Iterate with ``async for`` until the sender closes."""

    def __init__(self, state: _ChannelState[T]):
        self._state = state

    @property
    def capacity(self) -> int:
        return self._state.capacity

    @property
    def closed(self) -> bool:
        return self._state.receiver_closed

    def qsize(self) -> int:
        """Number of values waiting to be received."""
        return len(self._state.buffer)

    async def recv(self) -> T:
        """Receive the next value in send order.

        Raises:
            ChannelClosed: If the receiver was closed, or the sender was
                closed and every buffered value has been received
        """
        state = self._state
        async with state.changed:
            await state.changed.wait_for(lambda: state.buffer or state.sender_closed or state.receiver_closed)
            if state.receiver_closed:
                raise ChannelClosed("Receiver closed")
            if not state.buffer:
                raise ChannelClosed("Sender closed")
            value = state.buffer.popleft()
            state.changed.notify_all()
            return value

    async def aclose(self) -> None:
        """Close the receiver and drop buffered values.

        A producer waiting in ``send`` wakes up with ``ChannelClosed``.
        """
        state = self._state
        async with state.changed:
            state.receiver_closed = True
            state.buffer.clear()
            state.changed.notify_all()

    def __aiter__(self) -> "Receiver[T]":
        return self

    async def __anext__(self) -> T:
        try:
            return await self.recv()
        except ChannelClosed:
            raise StopAsyncIteration from None

    async def __aenter__(self) -> "Receiver[T]":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def open_channel(capacity: int = DEFAULT_CAPACITY) -> tuple[Sender[T], Receiver[T]]:
    """Create a bounded channel and return its (sender, receiver) halves."""
    if capacity < 1:
        raise ValueError(f"Channel capacity must be at least 1, got {capacity}")
    state: _ChannelState[T] = _ChannelState(capacity)
    return Sender(state), Receiver(state)
