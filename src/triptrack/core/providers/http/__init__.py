"""HTTP room store."""

from triptrack.core.providers.http.store import HttpRoomStore, PollingSubscription

__all__ = ["HttpRoomStore", "PollingSubscription"]
