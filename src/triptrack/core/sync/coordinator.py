"""Room-based snapshot sync between participants."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from triptrack.core.contracts.data import AppData, utc_now
from triptrack.core.contracts.exceptions import RemoteError, SyncError, ValidationError
from triptrack.core.contracts.room import PendingRequest, Room, RoomPatch, RoomStore, Subscription
from triptrack.core.store.local import ROOM_ID_KEY, ensure_participant_id
from triptrack.core.sync.events import (
    ConnectionState,
    IncomingRequest,
    RemoteFailure,
    RequestCleared,
    RequestState,
    SnapshotApplied,
    StateChanged,
    SyncEventStream,
)
from triptrack.core.workspace import TripWorkspace

_LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectResult:
    room_id: str
    created: bool
    remote_differs: bool


class SyncCoordinator:
    """Keeps one workspace in step with a shared room.

    Two paths coexist. Live sync: every snapshot written to the room by
    :meth:`direct_sync` replaces each other participant's local data when
    their subscription delivers it, last writer wins. Consent: a participant
    proposes its snapshot with :meth:`request_sync`; nothing changes until a
    peer calls :meth:`accept_sync`, and :meth:`reject_sync` drops the proposal.

    Remote failures raise :class:`RemoteError` and leave local data and the
    coordinator state untouched.
    """

    def __init__(
        self,
        store: RoomStore,
        workspace: TripWorkspace,
        *,
        participant_id: str | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._workspace = workspace
        self._participant_id = participant_id or ensure_participant_id(workspace.store)
        self._clock = clock
        self._events = SyncEventStream()

        self._connection = ConnectionState.DISCONNECTED
        self._request = RequestState.IDLE
        self._room_id: str | None = None
        self._subscription: Subscription | None = None
        self._incoming: PendingRequest | None = None
        self._last_snapshot_at: datetime | None = None

    @property
    def participant_id(self) -> str:
        return self._participant_id

    @property
    def room_id(self) -> str | None:
        return self._room_id

    @property
    def connection_state(self) -> ConnectionState:
        return self._connection

    @property
    def request_state(self) -> RequestState:
        return self._request

    @property
    def incoming_request(self) -> PendingRequest | None:
        return self._incoming

    @property
    def events(self) -> SyncEventStream:
        return self._events

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self, room_id: str) -> ConnectResult:
        room_id = room_id.strip()
        if not room_id:
            raise ValidationError("room id must not be empty")
        if self._connection is not ConnectionState.DISCONNECTED:
            raise SyncError(f"already {self._connection.value} to room {self._room_id}")

        self._set_state(connection=ConnectionState.CONNECTING)
        local = self._workspace.data
        subscription: Subscription | None = None
        try:
            room = await self._store.read_room(room_id)
            if room is None:
                joined = await self._store.write_room(
                    room_id, RoomPatch(snapshot=local, members=[self._participant_id])
                )
                created = True
            else:
                joined = room
                if self._participant_id not in room.members:
                    joined = await self._store.write_room(
                        room_id, RoomPatch(members=[*room.members, self._participant_id])
                    )
                created = False
            subscription = self._store.subscribe_room(room_id, self._handle_change, self._handle_error)
            self._workspace.store.set(ROOM_ID_KEY, room_id)
        except BaseException:
            if subscription is not None:
                subscription.cancel()
            self._set_state(connection=ConnectionState.DISCONNECTED)
            raise

        self._room_id = room_id
        self._subscription = subscription
        self._last_snapshot_at = joined.updated_at
        self._set_state(connection=ConnectionState.CONNECTED, request=RequestState.IDLE)
        self._observe_request(joined.pending_request)
        _LOG.debug("Participant %s joined room %s (created=%s)", self._participant_id, room_id, created)
        return ConnectResult(room_id=room_id, created=created, remote_differs=joined.snapshot != local)

    async def resume(self) -> ConnectResult | None:
        """Reconnect to the room remembered in the local store, if any."""
        room_id = self._workspace.store.get(ROOM_ID_KEY)
        if not room_id:
            return None
        return await self.connect(room_id)

    def close(self) -> None:
        """Stop receiving room changes but remember the room for :meth:`resume`."""
        self._detach()

    def disconnect(self) -> None:
        """Leave the room; the room record and its member list are left as they are."""
        self._detach()
        self._workspace.store.delete(ROOM_ID_KEY)

    def _detach(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
        self._subscription = None
        self._room_id = None
        self._incoming = None
        self._last_snapshot_at = None
        self._set_state(connection=ConnectionState.DISCONNECTED, request=RequestState.IDLE)

    # ------------------------------------------------------------------
    # Sync operations
    # ------------------------------------------------------------------

    async def direct_sync(self) -> Room:
        """Overwrite the room snapshot with local data."""
        room_id = self._require_connected()
        room = await self._store.write_room(room_id, RoomPatch(snapshot=self._workspace.data))
        self._last_snapshot_at = room.updated_at
        return room

    async def adopt_room_snapshot(self) -> AppData:
        """Replace local data with the room snapshot, typically right after :meth:`connect`."""
        room_id = self._require_connected()
        room = await self._store.read_room(room_id)
        if room is None:
            raise SyncError(f"room no longer exists: {room_id}")
        self._apply_snapshot(room)
        return room.snapshot

    async def request_sync(self) -> PendingRequest:
        """Propose local data to the room without changing anyone's data."""
        room_id = self._require_connected()
        if self._request is RequestState.REQUEST_PENDING:
            raise SyncError("an incoming sync request is pending; accept or reject it first")
        request = PendingRequest(
            from_participant=self._participant_id,
            proposed_snapshot=self._workspace.data,
            requested_at=self._clock(),
        )
        await self._store.write_room(room_id, RoomPatch(pending_request=request))
        self._set_state(request=RequestState.REQUEST_SENT)
        return request

    async def accept_sync(self) -> AppData:
        """Adopt the incoming proposal locally and publish it as the room snapshot."""
        room_id = self._require_connected()
        incoming = self._incoming
        if incoming is None:
            raise SyncError("no incoming sync request to accept")
        proposed = incoming.proposed_snapshot
        room = await self._store.write_room(room_id, RoomPatch(snapshot=proposed, pending_request=None))
        self._last_snapshot_at = room.updated_at
        self._workspace.replace(proposed)
        self._clear_request()
        return proposed

    async def reject_sync(self) -> None:
        """Drop the pending request, incoming or outgoing, leaving every snapshot as it is."""
        room_id = self._require_connected()
        if self._request is RequestState.IDLE:
            raise SyncError("no sync request to reject")
        await self._store.write_room(room_id, RoomPatch(pending_request=None))
        self._clear_request()

    # ------------------------------------------------------------------
    # Subscription handling
    # ------------------------------------------------------------------

    def _handle_change(self, room: Room) -> None:
        if self._connection is not ConnectionState.CONNECTED:
            return
        if self._observe_request(room.pending_request):
            return
        if room.updated_at is None or room.updated_at == self._last_snapshot_at:
            return
        self._apply_snapshot(room)

    def _handle_error(self, error: BaseException) -> None:
        if not isinstance(error, RemoteError):
            wrapped = RemoteError(f"room subscription failed: {error}", room_id=self._room_id)
            wrapped.__cause__ = error
            error = wrapped
        self._events.publish(RemoteFailure(error=error))

    def _apply_snapshot(self, room: Room) -> None:
        if room.snapshot == self._workspace.data:
            self._last_snapshot_at = room.updated_at
            return
        self._workspace.replace(room.snapshot)
        self._last_snapshot_at = room.updated_at
        self._events.publish(SnapshotApplied(snapshot=room.snapshot, updated_at=room.updated_at))

    def _observe_request(self, pending: PendingRequest | None) -> bool:
        """Track the room's pending request; returns True when one awaits this participant."""
        if pending is None:
            if self._request is not RequestState.IDLE:
                self._clear_request()
            return False
        if pending.from_participant == self._participant_id:
            self._incoming = None
            self._set_state(request=RequestState.REQUEST_SENT)
            return False
        if pending != self._incoming:
            self._incoming = pending
            self._set_state(request=RequestState.REQUEST_PENDING)
            self._events.publish(IncomingRequest(request=pending))
        return True

    def _clear_request(self) -> None:
        was_active = self._request is not RequestState.IDLE
        self._incoming = None
        self._set_state(request=RequestState.IDLE)
        if was_active:
            self._events.publish(RequestCleared())

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def _require_connected(self) -> str:
        if self._connection is not ConnectionState.CONNECTED or self._room_id is None:
            raise SyncError("not connected to a sync room")
        return self._room_id

    def _set_state(
        self,
        *,
        connection: ConnectionState | None = None,
        request: RequestState | None = None,
    ) -> None:
        new_connection = connection or self._connection
        new_request = request or self._request
        if new_connection is self._connection and new_request is self._request:
            return
        _LOG.debug(
            "Sync state %s/%s -> %s/%s",
            self._connection.value,
            self._request.value,
            new_connection.value,
            new_request.value,
        )
        self._connection = new_connection
        self._request = new_request
        self._events.publish(StateChanged(connection=new_connection, request=new_request))


__all__ = ["ConnectResult", "SyncCoordinator"]
