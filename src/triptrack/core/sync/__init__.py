"""Remote sync coordination."""

from triptrack.core.sync.coordinator import ConnectResult, SyncCoordinator
from triptrack.core.sync.events import (
    ConnectionState,
    IncomingRequest,
    RemoteFailure,
    RequestCleared,
    RequestState,
    SnapshotApplied,
    StateChanged,
    SyncEvent,
    SyncEventStream,
)

__all__ = [
    "ConnectResult",
    "ConnectionState",
    "IncomingRequest",
    "RemoteFailure",
    "RequestCleared",
    "RequestState",
    "SnapshotApplied",
    "StateChanged",
    "SyncCoordinator",
    "SyncEvent",
    "SyncEventStream",
]
