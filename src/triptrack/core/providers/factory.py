"""Factory for room store instances.

Callers select a store from configuration without importing concrete stores.
"""

from __future__ import annotations

from triptrack.core.contracts.config import TripTrackConfig
from triptrack.core.contracts.exceptions import ConfigError
from triptrack.core.contracts.room import RoomStore
from triptrack.core.providers.http import HttpRoomStore
from triptrack.core.providers.memory import MemoryRoomStore


def create_room_store(config: TripTrackConfig) -> RoomStore:
    """Create the room store named by ``config.room_store``.

    The returned store is an async context manager::

        async with create_room_store(config) as store:
            room = await store.read_room(room_id)

    Raises:
        ConfigError: If the store name is unknown or its settings are incomplete.
    """
    if config.room_store == "memory":
        return MemoryRoomStore()
    if config.room_store == "http":
        if not config.room_url:
            raise ConfigError("room_store 'http' requires room_url")
        return HttpRoomStore(config.room_url, poll_interval=config.poll_interval, timeout=config.timeout)
    raise ConfigError(f"unknown room store: {config.room_store!r}")


__all__ = ["create_room_store"]
