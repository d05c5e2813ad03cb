"""Public API surface for triptrack."""

__version__ = "1.0.0"

from triptrack.core.catalog import city_progress, is_visited, overall_progress
from triptrack.core.codec import (
    decode,
    decode_from_link,
    encode,
    encode_for_link,
    export_to_file,
    import_from_file,
    share_link,
    strip_share_param,
)
from triptrack.core.config import load_config, write_config
from triptrack.core.contracts.config import TripTrackConfig
from triptrack.core.contracts.data import AppData, Attraction, City, Coordinates
from triptrack.core.contracts.exceptions import (
    ConfigError,
    FormatError,
    NotFoundError,
    RemoteError,
    SyncError,
    TripTrackError,
    ValidationError,
)
from triptrack.core.contracts.room import PendingRequest, Room, RoomPatch, RoomStore, Subscription
from triptrack.core.merge import default_seed, merge
from triptrack.core.providers import HttpRoomStore, MemoryRoomStore, create_room_store
from triptrack.core.store import JsonFileStore, LocalStore, MemoryStore, ensure_participant_id, generate_room_id
from triptrack.core.sync import ConnectionState, ConnectResult, RequestState, SyncCoordinator
from triptrack.core.workspace import TripWorkspace

__all__ = [
    "AppData",
    "Attraction",
    "City",
    "ConfigError",
    "ConnectResult",
    "ConnectionState",
    "Coordinates",
    "FormatError",
    "HttpRoomStore",
    "JsonFileStore",
    "LocalStore",
    "MemoryRoomStore",
    "MemoryStore",
    "NotFoundError",
    "PendingRequest",
    "RemoteError",
    "RequestState",
    "Room",
    "RoomPatch",
    "RoomStore",
    "Subscription",
    "SyncCoordinator",
    "SyncError",
    "TripTrackConfig",
    "TripTrackError",
    "TripWorkspace",
    "ValidationError",
    "__version__",
    "city_progress",
    "create_room_store",
    "decode",
    "decode_from_link",
    "default_seed",
    "encode",
    "encode_for_link",
    "ensure_participant_id",
    "export_to_file",
    "generate_room_id",
    "import_from_file",
    "is_visited",
    "load_config",
    "merge",
    "overall_progress",
    "share_link",
    "strip_share_param",
    "write_config",
]
