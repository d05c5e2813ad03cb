"""Remote room contracts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from types import TracebackType
from typing import Any

from pydantic import BaseModel, Field

from triptrack.core.contracts.data import AppData

_WIRE_MODEL_CONFIG = {"frozen": True, "populate_by_name": True}


class PendingRequest(BaseModel):
    from_participant: str = Field(alias="fromParticipant")
    proposed_snapshot: AppData = Field(alias="proposedSnapshot")
    requested_at: datetime = Field(alias="requestedAt")

    model_config = _WIRE_MODEL_CONFIG


class Room(BaseModel):
    """Shared rendezvous record for participants syncing one snapshot.

    ``updated_at`` is assigned by the store whenever ``snapshot`` is written.
    """

    snapshot: AppData = Field(default_factory=AppData)
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    members: list[str] = Field(default_factory=list)
    pending_request: PendingRequest | None = Field(default=None, alias="pendingRequest")

    model_config = _WIRE_MODEL_CONFIG


class RoomPatch(BaseModel):
    """Partial room write; only explicitly set fields are sent.

    Setting ``pending_request=None`` explicitly clears the pending request.
    """

    snapshot: AppData | None = None
    members: list[str] | None = None
    pending_request: PendingRequest | None = Field(default=None, alias="pendingRequest")

    model_config = _WIRE_MODEL_CONFIG

    def to_wire(self) -> dict[str, Any]:
        payload = self.model_dump(mode="json", by_alias=True)
        keep = {type(self).model_fields[name].alias or name for name in self.model_fields_set}
        return {key: value for key, value in payload.items() if key in keep}


RoomChangeCallback = Callable[[Room], None]
RoomErrorCallback = Callable[[BaseException], None]


class Subscription(ABC):
    """Standing push subscription to one room."""

    @property
    @abstractmethod
    def cancelled(self) -> bool: ...  # pragma: no cover

    @abstractmethod
    def cancel(self) -> None:
        """Stop delivery; no callback runs after this returns."""
        ...  # pragma: no cover


class RoomStore(ABC):
    @abstractmethod
    async def __aenter__(self) -> RoomStore: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def read_room(self, room_id: str) -> Room | None: ...  # pragma: no cover

    @abstractmethod
    async def write_room(self, room_id: str, patch: RoomPatch) -> Room: ...  # pragma: no cover

    @abstractmethod
    def subscribe_room(
        self,
        room_id: str,
        on_change: RoomChangeCallback,
        on_error: RoomErrorCallback,
    ) -> Subscription: ...  # pragma: no cover


__all__ = [
    "PendingRequest",
    "Room",
    "RoomChangeCallback",
    "RoomErrorCallback",
    "RoomPatch",
    "RoomStore",
    "Subscription",
]
