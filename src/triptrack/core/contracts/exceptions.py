"""Exception hierarchy for triptrack.

All triptrack exceptions inherit from :class:`TripTrackError`, so callers can
catch any library error with a single ``except`` clause while still telling
the failure modes apart.
"""

from __future__ import annotations


class TripTrackError(Exception):
    """Base exception for all triptrack errors."""


class ConfigError(TripTrackError):
    """Configuration loading or validation failure."""


class FormatError(TripTrackError):
    """Snapshot text, link token or import file could not be decoded."""


class NotFoundError(TripTrackError):
    """A referenced city or attraction does not exist."""

    def __init__(self, message: str, *, city_id: str, attraction_id: str | None = None) -> None:
        super().__init__(message)
        self.city_id = city_id
        self.attraction_id = attraction_id


class ValidationError(TripTrackError):
    """User input is out of range or otherwise invalid."""


class RemoteError(TripTrackError):
    """Remote room store operation failure.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, *, room_id: str | None = None) -> None:
        super().__init__(message)
        self.room_id = room_id


class SyncError(TripTrackError):
    """Sync operation is not valid in the coordinator's current state."""
