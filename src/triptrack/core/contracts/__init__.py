"""Core contracts-domain exports."""

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

__all__ = [
    "AppData",
    "Attraction",
    "City",
    "ConfigError",
    "Coordinates",
    "FormatError",
    "NotFoundError",
    "PendingRequest",
    "RemoteError",
    "Room",
    "RoomPatch",
    "RoomStore",
    "Subscription",
    "SyncError",
    "TripTrackConfig",
    "TripTrackError",
    "ValidationError",
]
