"""Sync coordinator states and the typed event stream it publishes."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from triptrack.core.contracts.data import AppData
from triptrack.core.contracts.room import PendingRequest


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class RequestState(StrEnum):
    IDLE = "idle"
    REQUEST_PENDING = "request-pending"
    REQUEST_SENT = "request-sent"


@dataclass(frozen=True)
class StateChanged:
    connection: ConnectionState
    request: RequestState


@dataclass(frozen=True)
class SnapshotApplied:
    """The room snapshot replaced local data."""

    snapshot: AppData
    updated_at: datetime | None


@dataclass(frozen=True)
class IncomingRequest:
    request: PendingRequest


@dataclass(frozen=True)
class RequestCleared:
    pass


@dataclass(frozen=True)
class RemoteFailure:
    error: BaseException


SyncEvent = StateChanged | SnapshotApplied | IncomingRequest | RequestCleared | RemoteFailure


class SyncEventStream:
    """Bounded queue of sync events, consumable with ``async for``.

    When nobody consumes the stream the oldest events are dropped once
    *maxsize* are queued. Iteration ends once :meth:`close` has been called and
    queued events are exhausted.
    """

    _CLOSED = object()

    def __init__(self, maxsize: int = 256) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize)
        self._closed = False
        self._dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def dropped(self) -> int:
        """Number of events discarded because the queue was full."""
        return self._dropped

    def _put(self, item: object) -> None:
        if self._queue.full():
            self._queue.get_nowait()
            self._dropped += 1
        self._queue.put_nowait(item)

    def publish(self, event: SyncEvent) -> None:
        if not self._closed:
            self._put(event)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._put(self._CLOSED)

    def drain(self) -> list[SyncEvent]:
        """Return queued events without waiting."""
        events: list[SyncEvent] = []
        while True:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return events
            if item is self._CLOSED:
                self._queue.put_nowait(item)
                return events
            events.append(item)  # type: ignore[arg-type]

    def __aiter__(self) -> SyncEventStream:
        return self

    async def __anext__(self) -> SyncEvent:
        item = await self._queue.get()
        if item is self._CLOSED:
            self._queue.put_nowait(item)
            raise StopAsyncIteration
        return item  # type: ignore[return-value]


__all__ = [
    "ConnectionState",
    "IncomingRequest",
    "RemoteFailure",
    "RequestCleared",
    "RequestState",
    "SnapshotApplied",
    "StateChanged",
    "SyncEvent",
    "SyncEventStream",
]
