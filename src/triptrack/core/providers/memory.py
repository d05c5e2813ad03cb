"""In-process room store."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from types import TracebackType

from triptrack.core.contracts.data import utc_now
from triptrack.core.contracts.exceptions import RemoteError
from triptrack.core.contracts.room import (
    Room,
    RoomChangeCallback,
    RoomErrorCallback,
    RoomPatch,
    RoomStore,
    Subscription,
)


@dataclass(frozen=True)
class RoomOperation:
    """Deterministic room store operation log entry."""

    sequence: int
    name: str
    room_id: str
    fields: tuple[str, ...]


class MemorySubscription(Subscription):
    def __init__(
        self,
        room_id: str,
        on_change: RoomChangeCallback,
        on_error: RoomErrorCallback,
        detach: Callable[[MemorySubscription], None],
    ) -> None:
        self.room_id = room_id
        self._on_change = on_change
        self._on_error = on_error
        self._detach = detach
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._detach(self)

    def deliver(self, room: Room) -> None:
        if self._cancelled:
            return
        try:
            self._on_change(room)
        except Exception as exc:
            error = RemoteError(f"room change handler failed: {exc}", room_id=self.room_id)
            error.__cause__ = exc
            self._on_error(error)

    def fail(self, error: BaseException) -> None:
        if not self._cancelled:
            self._on_error(error)


class MemoryRoomStore(RoomStore):
    """Room store shared by participants living in one process.

    Writes merge at the field level and are pushed to every live subscriber
    of the room once committed. ``updated_at`` is assigned here, strictly
    increasing, whenever a write touches ``snapshot``.
    """

    def __init__(self, *, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock
        self._rooms: dict[str, Room] = {}
        self._subscriptions: dict[str, list[MemorySubscription]] = {}
        self._last_stamp: datetime | None = None
        self._operation_counter = 0
        self._operations: list[RoomOperation] = []
        self.fail_next: BaseException | None = None

    @property
    def operations(self) -> tuple[RoomOperation, ...]:
        return tuple(self._operations)

    def rooms(self) -> dict[str, Room]:
        return dict(self._rooms)

    def subscriber_count(self, room_id: str) -> int:
        return len(self._subscriptions.get(room_id, []))

    def _record_operation(self, name: str, room_id: str, fields: tuple[str, ...] = ()) -> None:
        self._operation_counter += 1
        self._operations.append(
            RoomOperation(sequence=self._operation_counter, name=name, room_id=room_id, fields=fields)
        )

    def _raise_if_failing(self, room_id: str) -> None:
        if self.fail_next is None:
            return
        cause = self.fail_next
        self.fail_next = None
        raise RemoteError(f"room store unavailable: {cause}", room_id=room_id) from cause

    def _server_timestamp(self) -> datetime:
        stamp = self._clock()
        if self._last_stamp is not None and stamp <= self._last_stamp:
            stamp = self._last_stamp + timedelta(microseconds=1)
        self._last_stamp = stamp
        return stamp

    async def __aenter__(self) -> MemoryRoomStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    async def read_room(self, room_id: str) -> Room | None:
        self._record_operation("read_room", room_id)
        self._raise_if_failing(room_id)
        return self._rooms.get(room_id)

    async def write_room(self, room_id: str, patch: RoomPatch) -> Room:
        fields = tuple(sorted(patch.model_fields_set))
        self._record_operation("write_room", room_id, fields)
        self._raise_if_failing(room_id)

        current = self._rooms.get(room_id) or Room()
        update: dict[str, object] = {}
        if "snapshot" in patch.model_fields_set and patch.snapshot is not None:
            update["snapshot"] = patch.snapshot
            update["updated_at"] = self._server_timestamp()
        if "members" in patch.model_fields_set and patch.members is not None:
            update["members"] = list(dict.fromkeys(patch.members))
        if "pending_request" in patch.model_fields_set:
            update["pending_request"] = patch.pending_request
        room = current.model_copy(update=update)
        self._rooms[room_id] = room

        for subscription in list(self._subscriptions.get(room_id, [])):
            subscription.deliver(room)
        return room

    def subscribe_room(
        self,
        room_id: str,
        on_change: RoomChangeCallback,
        on_error: RoomErrorCallback,
    ) -> MemorySubscription:
        self._record_operation("subscribe_room", room_id)
        subscription = MemorySubscription(room_id, on_change, on_error, self._detach)
        self._subscriptions.setdefault(room_id, []).append(subscription)
        return subscription

    def push_error(self, room_id: str, error: BaseException) -> None:
        """Deliver *error* to every live subscriber of *room_id*."""
        for subscription in list(self._subscriptions.get(room_id, [])):
            subscription.fail(error)

    def _detach(self, subscription: MemorySubscription) -> None:
        self._record_operation("unsubscribe_room", subscription.room_id)
        subscribers = self._subscriptions.get(subscription.room_id, [])
        if subscription in subscribers:
            subscribers.remove(subscription)


__all__ = ["MemoryRoomStore", "MemorySubscription", "RoomOperation"]
