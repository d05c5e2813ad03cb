"""Core room store exports."""

from triptrack.core.providers.factory import create_room_store
from triptrack.core.providers.http import HttpRoomStore, PollingSubscription
from triptrack.core.providers.memory import MemoryRoomStore, MemorySubscription, RoomOperation

__all__ = [
    "HttpRoomStore",
    "MemoryRoomStore",
    "MemorySubscription",
    "PollingSubscription",
    "RoomOperation",
    "create_room_store",
]
