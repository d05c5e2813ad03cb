"""HTTP room store backed by a JSON room service."""

from __future__ import annotations

import asyncio
import logging
from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from triptrack.core.contracts.exceptions import RemoteError
from triptrack.core.contracts.room import (
    Room,
    RoomChangeCallback,
    RoomErrorCallback,
    RoomPatch,
    RoomStore,
    Subscription,
)

_LOG = logging.getLogger(__name__)


class PollingSubscription(Subscription):
    """Delivers room changes observed by periodic reads.

    Every read that differs from the last seen room is pushed to
    ``on_change``, the first one included. Failures, including exceptions
    raised by ``on_change``, go to ``on_error`` as :class:`RemoteError` and
    polling continues.
    """

    def __init__(
        self,
        store: HttpRoomStore,
        room_id: str,
        on_change: RoomChangeCallback,
        on_error: RoomErrorCallback,
        *,
        interval: float,
    ) -> None:
        self._store = store
        self._room_id = room_id
        self._on_change = on_change
        self._on_error = on_error
        self._interval = interval
        self._cancelled = False
        self._task = asyncio.get_running_loop().create_task(self._run())

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True
        self._task.cancel()

    async def _run(self) -> None:
        last_seen: Room | None = None
        while not self._cancelled:
            try:
                room = await self._store.read_room(self._room_id)
            except RemoteError as exc:
                if not self._cancelled:
                    self._on_error(exc)
            else:
                if room is not None and room != last_seen and not self._cancelled:
                    self._deliver(room)
                last_seen = room
            await asyncio.sleep(self._interval)

    def _deliver(self, room: Room) -> None:
        try:
            self._on_change(room)
        except Exception as exc:
            _LOG.debug("Room change handler failed for %s: %s", self._room_id, exc)
            error = RemoteError(f"room change handler failed: {exc}", room_id=self._room_id)
            error.__cause__ = exc
            self._on_error(error)


class HttpRoomStore(RoomStore):
    """Room store speaking JSON over HTTP.

    ``GET {base_url}/rooms/{id}`` returns the room (404 when absent) and
    ``PATCH {base_url}/rooms/{id}`` merges the given camelCase fields, assigns
    ``updatedAt`` when ``snapshot`` is present and returns the stored room.
    Requests are not retried.
    """

    def __init__(
        self,
        base_url: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        poll_interval: float = 2.0,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._poll_interval = poll_interval

    async def __aenter__(self) -> HttpRoomStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _room_url(self, room_id: str) -> str:
        return f"{self._base_url}/rooms/{quote(room_id, safe='')}"

    async def _send(self, method: str, room_id: str, *, json: dict[str, Any] | None = None) -> httpx.Response:
        url = self._room_url(room_id)
        _LOG.debug("%s %s", method, url)
        try:
            return await self._client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            raise RemoteError(f"room request failed: {method} {url}: {exc}", room_id=room_id) from exc

    @staticmethod
    def _parse_room(response: httpx.Response, room_id: str) -> Room:
        try:
            return Room.model_validate(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise RemoteError(f"room service returned an invalid room: {room_id}", room_id=room_id) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response, room_id: str) -> None:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RemoteError(
                f"room service rejected request ({response.status_code}): {room_id}", room_id=room_id
            ) from exc

    async def read_room(self, room_id: str) -> Room | None:
        response = await self._send("GET", room_id)
        if response.status_code == 404:
            return None
        self._raise_for_status(response, room_id)
        return self._parse_room(response, room_id)

    async def write_room(self, room_id: str, patch: RoomPatch) -> Room:
        response = await self._send("PATCH", room_id, json=patch.to_wire())
        self._raise_for_status(response, room_id)
        return self._parse_room(response, room_id)

    def subscribe_room(
        self,
        room_id: str,
        on_change: RoomChangeCallback,
        on_error: RoomErrorCallback,
    ) -> PollingSubscription:
        return PollingSubscription(self, room_id, on_change, on_error, interval=self._poll_interval)


__all__ = ["HttpRoomStore", "PollingSubscription"]
