from __future__ import annotations

import httpx
import pytest

from triptrack.core.catalog import toggle_visited
from triptrack.core.codec import decode
from triptrack.core.contracts.data import AppData
from triptrack.core.contracts.exceptions import ConfigError, RemoteError, SyncError, ValidationError
from triptrack.core.contracts.room import RoomPatch, RoomStore
from triptrack.core.providers.http import HttpRoomStore
from triptrack.core.providers.memory import MemoryRoomStore
from triptrack.core.store import DATA_KEY, ROOM_ID_KEY, MemoryStore
from triptrack.core.sync import (
    ConnectionState,
    IncomingRequest,
    RemoteFailure,
    RequestCleared,
    RequestState,
    SnapshotApplied,
    StateChanged,
    SyncCoordinator,
)
from triptrack.core.workspace import TripWorkspace
from tests.fakes.data import StepClock, single_city
from tests.fakes.rooms import FakeRoomService, wait_until

ROOM = "room12345"


class FlakyStore(MemoryStore):
    """Local store refusing writes to the keys listed in ``failing``."""

    def __init__(self) -> None:
        super().__init__()
        self.failing: set[str] = set()

    def set(self, key: str, value: str) -> None:
        if key in self.failing:
            raise ConfigError(f"failed writing local store key {key}")
        super().set(key, value)


def _participant(
    room_store: RoomStore, name: str, data: AppData, store: MemoryStore | None = None
) -> SyncCoordinator:
    workspace = TripWorkspace(store if store is not None else MemoryStore(), seed=data)
    workspace.load()
    return SyncCoordinator(room_store, workspace, participant_id=f"user-{name}", clock=StepClock())


@pytest.fixture
def room_store() -> MemoryRoomStore:
    return MemoryRoomStore(clock=StepClock())


@pytest.fixture
def alice(room_store: MemoryRoomStore) -> SyncCoordinator:
    return _participant(room_store, "alice", single_city("lisbon", "belem-tower"))


@pytest.fixture
def bob(room_store: MemoryRoomStore) -> SyncCoordinator:
    return _participant(room_store, "bob", single_city("porto", "ribeira"))


def _data(coordinator: SyncCoordinator) -> AppData:
    return coordinator._workspace.data


@pytest.mark.asyncio
async def test_connect_creates_missing_room_from_local_data(
    room_store: MemoryRoomStore, alice: SyncCoordinator
) -> None:
    result = await alice.connect(ROOM)

    room = room_store.rooms()[ROOM]
    assert result.created is True
    assert result.remote_differs is False
    assert room.snapshot == _data(alice)
    assert room.members == ["user-alice"]
    assert room.updated_at is not None
    assert alice.connection_state is ConnectionState.CONNECTED
    assert alice.request_state is RequestState.IDLE
    assert alice._workspace.store.get(ROOM_ID_KEY) == ROOM
    assert room_store.subscriber_count(ROOM) == 1


@pytest.mark.asyncio
async def test_connect_joins_existing_room_without_touching_local_data(
    room_store: MemoryRoomStore, alice: SyncCoordinator, bob: SyncCoordinator
) -> None:
    await alice.connect(ROOM)
    bob_before = _data(bob)

    result = await bob.connect(ROOM)

    assert result.created is False
    assert result.remote_differs is True
    assert _data(bob) == bob_before
    assert _data(alice).city_ids() == ["lisbon"]
    assert room_store.rooms()[ROOM].members == ["user-alice", "user-bob"]


@pytest.mark.asyncio
async def test_reconnect_does_not_duplicate_member(room_store: MemoryRoomStore, alice: SyncCoordinator) -> None:
    await alice.connect(ROOM)
    alice.close()
    await alice.connect(ROOM)

    assert room_store.rooms()[ROOM].members == ["user-alice"]
    writes = [op for op in room_store.operations if op.name == "write_room"]
    assert [op.fields for op in writes] == [("members", "snapshot")]


@pytest.mark.asyncio
async def test_connect_rejects_empty_room_id(alice: SyncCoordinator) -> None:
    with pytest.raises(ValidationError):
        await alice.connect("   ")

    assert alice.connection_state is ConnectionState.DISCONNECTED


@pytest.mark.asyncio
async def test_connect_twice_raises_sync_error(alice: SyncCoordinator) -> None:
    await alice.connect(ROOM)

    with pytest.raises(SyncError, match="already connected"):
        await alice.connect("otherroom")
    assert alice.room_id == ROOM


@pytest.mark.asyncio
async def test_connect_failure_leaves_coordinator_disconnected(
    room_store: MemoryRoomStore, alice: SyncCoordinator
) -> None:
    room_store.fail_next = ConnectionError("offline")

    with pytest.raises(RemoteError) as excinfo:
        await alice.connect(ROOM)

    assert excinfo.value.room_id == ROOM
    assert alice.connection_state is ConnectionState.DISCONNECTED
    assert alice.room_id is None
    assert alice._workspace.store.get(ROOM_ID_KEY) is None
    assert room_store.subscriber_count(ROOM) == 0


@pytest.mark.asyncio
async def test_failing_room_id_persist_leaves_coordinator_disconnected(room_store: MemoryRoomStore) -> None:
    store = FlakyStore()
    store.failing.add(ROOM_ID_KEY)
    alice = _participant(room_store, "alice", single_city("lisbon"), store)

    with pytest.raises(ConfigError):
        await alice.connect(ROOM)

    assert alice.connection_state is ConnectionState.DISCONNECTED
    assert alice.room_id is None
    assert store.get(ROOM_ID_KEY) is None
    assert room_store.subscriber_count(ROOM) == 0

    store.failing.clear()
    result = await alice.connect(ROOM)

    assert result.created is False
    assert alice.connection_state is ConnectionState.CONNECTED
    assert room_store.subscriber_count(ROOM) == 1


@pytest.mark.asyncio
async def test_direct_sync_overwrites_peer_data(alice: SyncCoordinator, bob: SyncCoordinator) -> None:
    await alice.connect(ROOM)
    await bob.connect(ROOM)
    bob_data = _data(bob)

    await bob.direct_sync()

    assert _data(alice) == bob_data
    assert _data(bob) == bob_data


@pytest.mark.asyncio
async def test_direct_sync_discards_unsynced_local_edits_of_peer(
    alice: SyncCoordinator, bob: SyncCoordinator
) -> None:
    await alice.connect(ROOM)
    await bob.connect(ROOM)
    alice._workspace.apply(toggle_visited, "lisbon", "belem-tower")

    await bob.direct_sync()

    assert _data(alice) == _data(bob)
    assert _data(alice).city_ids() == ["porto"]


@pytest.mark.asyncio
async def test_request_then_reject_leaves_everyone_unchanged(
    room_store: MemoryRoomStore, alice: SyncCoordinator, bob: SyncCoordinator
) -> None:
    await alice.connect(ROOM)
    await bob.connect(ROOM)
    alice_before, bob_before = _data(alice), _data(bob)
    room_before = room_store.rooms()[ROOM].snapshot

    request = await bob.request_sync()

    assert bob.request_state is RequestState.REQUEST_SENT
    assert alice.request_state is RequestState.REQUEST_PENDING
    assert alice.incoming_request == request
    assert _data(alice) == alice_before

    await alice.reject_sync()

    assert alice.request_state is RequestState.IDLE
    assert bob.request_state is RequestState.IDLE
    assert alice.incoming_request is None
    assert room_store.rooms()[ROOM].pending_request is None
    assert room_store.rooms()[ROOM].snapshot == room_before
    assert _data(alice) == alice_before
    assert _data(bob) == bob_before


@pytest.mark.asyncio
async def test_accept_adopts_proposal_and_publishes_it(
    room_store: MemoryRoomStore, alice: SyncCoordinator, bob: SyncCoordinator
) -> None:
    await alice.connect(ROOM)
    await bob.connect(ROOM)
    await bob.request_sync()

    adopted = await alice.accept_sync()

    room = room_store.rooms()[ROOM]
    assert adopted == _data(bob)
    assert _data(alice) == _data(bob)
    assert room.snapshot == adopted
    assert room.pending_request is None
    assert alice.request_state is RequestState.IDLE
    assert bob.request_state is RequestState.IDLE


@pytest.mark.asyncio
async def test_requester_can_withdraw_request(
    room_store: MemoryRoomStore, alice: SyncCoordinator, bob: SyncCoordinator
) -> None:
    await alice.connect(ROOM)
    await bob.connect(ROOM)
    await bob.request_sync()

    await bob.reject_sync()

    assert room_store.rooms()[ROOM].pending_request is None
    assert alice.request_state is RequestState.IDLE


@pytest.mark.asyncio
async def test_request_sync_blocked_while_incoming_request_pending(
    alice: SyncCoordinator, bob: SyncCoordinator
) -> None:
    await alice.connect(ROOM)
    await bob.connect(ROOM)
    await bob.request_sync()

    with pytest.raises(SyncError, match="pending"):
        await alice.request_sync()


@pytest.mark.asyncio
async def test_pending_request_is_surfaced_on_connect(room_store: MemoryRoomStore, alice: SyncCoordinator) -> None:
    await alice.connect(ROOM)
    request = await alice.request_sync()
    carol = _participant(room_store, "carol", single_city("faro"))

    await carol.connect(ROOM)

    assert carol.request_state is RequestState.REQUEST_PENDING
    assert carol.incoming_request == request
    assert IncomingRequest(request=request) in carol.events.drain()


@pytest.mark.asyncio
async def test_accept_and_reject_require_a_request(alice: SyncCoordinator) -> None:
    await alice.connect(ROOM)

    with pytest.raises(SyncError):
        await alice.accept_sync()
    with pytest.raises(SyncError):
        await alice.reject_sync()


@pytest.mark.asyncio
async def test_operations_require_connection(alice: SyncCoordinator) -> None:
    with pytest.raises(SyncError, match="not connected"):
        await alice.direct_sync()
    with pytest.raises(SyncError, match="not connected"):
        await alice.request_sync()
    with pytest.raises(SyncError, match="not connected"):
        await alice.adopt_room_snapshot()


@pytest.mark.asyncio
async def test_remote_failure_keeps_local_data_and_state(
    room_store: MemoryRoomStore, alice: SyncCoordinator, bob: SyncCoordinator
) -> None:
    await alice.connect(ROOM)
    await bob.connect(ROOM)
    await bob.request_sync()
    alice_before = _data(alice)
    room_store.fail_next = TimeoutError("timed out")

    with pytest.raises(RemoteError):
        await alice.accept_sync()

    assert _data(alice) == alice_before
    assert alice.request_state is RequestState.REQUEST_PENDING
    assert alice.connection_state is ConnectionState.CONNECTED
    assert room_store.rooms()[ROOM].pending_request is not None


@pytest.mark.asyncio
async def test_disconnect_cancels_subscription_and_forgets_room(
    room_store: MemoryRoomStore, alice: SyncCoordinator, bob: SyncCoordinator
) -> None:
    await alice.connect(ROOM)
    await bob.connect(ROOM)
    alice_before = _data(alice)

    alice.disconnect()
    await bob.direct_sync()

    assert alice.connection_state is ConnectionState.DISCONNECTED
    assert alice.room_id is None
    assert alice._workspace.store.get(ROOM_ID_KEY) is None
    assert room_store.subscriber_count(ROOM) == 1
    assert _data(alice) == alice_before
    assert "user-alice" in room_store.rooms()[ROOM].members


@pytest.mark.asyncio
async def test_resume_reconnects_to_remembered_room(room_store: MemoryRoomStore, alice: SyncCoordinator) -> None:
    assert await alice.resume() is None

    await alice.connect(ROOM)
    alice.close()
    assert alice._workspace.store.get(ROOM_ID_KEY) == ROOM

    result = await alice.resume()

    assert result is not None
    assert result.room_id == ROOM
    assert result.created is False
    assert alice.connection_state is ConnectionState.CONNECTED


@pytest.mark.asyncio
async def test_adopt_room_snapshot_replaces_local_data(alice: SyncCoordinator, bob: SyncCoordinator) -> None:
    await alice.connect(ROOM)
    await bob.connect(ROOM)

    adopted = await bob.adopt_room_snapshot()

    assert adopted == _data(alice)
    assert _data(bob) == _data(alice)


@pytest.mark.asyncio
async def test_events_describe_state_changes_and_applied_snapshots(
    alice: SyncCoordinator, bob: SyncCoordinator
) -> None:
    await alice.connect(ROOM)
    await bob.connect(ROOM)

    connect_events = alice.events.drain()
    assert connect_events == [
        StateChanged(connection=ConnectionState.CONNECTING, request=RequestState.IDLE),
        StateChanged(connection=ConnectionState.CONNECTED, request=RequestState.IDLE),
    ]

    await bob.request_sync()
    await alice.reject_sync()
    await bob.direct_sync()

    events = alice.events.drain()
    assert isinstance(events[0], StateChanged)
    assert events[0].request is RequestState.REQUEST_PENDING
    assert isinstance(events[1], IncomingRequest)
    assert isinstance(events[2], StateChanged)
    assert events[2].request is RequestState.IDLE
    assert isinstance(events[3], RequestCleared)
    assert isinstance(events[4], SnapshotApplied)
    assert events[4].snapshot == _data(bob)
    assert len(events) == 5


@pytest.mark.asyncio
async def test_subscription_errors_are_published_without_state_change(
    room_store: MemoryRoomStore, alice: SyncCoordinator
) -> None:
    await alice.connect(ROOM)
    alice.events.drain()

    room_store.push_error(ROOM, OSError("stream reset"))

    events = alice.events.drain()
    assert len(events) == 1
    assert isinstance(events[0], RemoteFailure)
    assert isinstance(events[0].error, RemoteError)
    assert isinstance(events[0].error.__cause__, OSError)
    assert alice.connection_state is ConnectionState.CONNECTED


@pytest.mark.asyncio
async def test_event_stream_iteration_ends_after_close(alice: SyncCoordinator) -> None:
    await alice.connect(ROOM)
    alice.events.close()

    seen = [event async for event in alice.events]

    assert len(seen) == 2
    assert alice.events.closed is True


@pytest.mark.asyncio
async def test_failed_local_save_keeps_pushed_snapshot_pending(
    room_store: MemoryRoomStore, bob: SyncCoordinator
) -> None:
    store = FlakyStore()
    alice = _participant(room_store, "alice", single_city("lisbon", "belem-tower"), store)
    await alice.connect(ROOM)
    await bob.connect(ROOM)
    alice.events.drain()
    alice_before = _data(alice)
    store.failing.add(DATA_KEY)

    pushed = await bob.direct_sync()

    events = alice.events.drain()
    assert len(events) == 1
    assert isinstance(events[0], RemoteFailure)
    assert isinstance(events[0].error.__cause__, ConfigError)
    assert _data(alice) == alice_before
    assert store.get(DATA_KEY) is None

    store.failing.clear()
    await room_store.write_room(ROOM, RoomPatch(members=["user-alice", "user-bob", "user-carol"]))

    assert room_store.rooms()[ROOM].updated_at == pushed.updated_at
    assert _data(alice) == _data(bob)
    assert decode(store.get(DATA_KEY) or "") == _data(bob)
    assert [type(event) for event in alice.events.drain()] == [SnapshotApplied]


@pytest.mark.asyncio
async def test_peers_exchange_snapshots_over_http_room_store() -> None:
    service = FakeRoomService()
    clients = [httpx.AsyncClient(transport=httpx.MockTransport(service)) for _ in range(2)]
    alice = _participant(
        HttpRoomStore("https://rooms.example/api", http_client=clients[0], poll_interval=0.01),
        "alice",
        single_city("lisbon", "belem-tower"),
    )
    bob = _participant(
        HttpRoomStore("https://rooms.example/api", http_client=clients[1], poll_interval=0.01),
        "bob",
        single_city("porto", "ribeira"),
    )
    try:
        await alice.connect(ROOM)
        await bob.connect(ROOM)
        await wait_until(lambda: service.get_count() >= 6)
        assert _data(bob).city_ids() == ["porto"]

        alice._workspace.replace(single_city("madrid", "prado"))
        await alice.direct_sync()
        await wait_until(lambda: _data(bob).city_ids() == ["madrid"])

        await bob.request_sync()
        await wait_until(lambda: alice.request_state is RequestState.REQUEST_PENDING)
        await alice.accept_sync()
        await wait_until(lambda: bob.request_state is RequestState.IDLE)
    finally:
        alice.close()
        bob.close()
        for client in clients:
            await client.aclose()

    assert _data(alice) == _data(bob)
    assert service.rooms[ROOM]["members"] == ["user-alice", "user-bob"]
    assert service.rooms[ROOM]["pendingRequest"] is None
    assert not any(isinstance(event, RemoteFailure) for event in alice.events.drain())
