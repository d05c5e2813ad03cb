"""Local durable storage."""

from triptrack.core.store.local import (
    DATA_KEY,
    PARTICIPANT_ID_KEY,
    ROOM_ID_KEY,
    JsonFileStore,
    LocalStore,
    MemoryStore,
    ensure_participant_id,
    generate_room_id,
)

__all__ = [
    "DATA_KEY",
    "PARTICIPANT_ID_KEY",
    "ROOM_ID_KEY",
    "JsonFileStore",
    "LocalStore",
    "MemoryStore",
    "ensure_participant_id",
    "generate_room_id",
]
