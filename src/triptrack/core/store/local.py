"""Durable key/value storage for the local snapshot, room id and participant id."""

from __future__ import annotations

import json
import logging
import random
import string
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from triptrack.core.contracts.exceptions import ConfigError

_LOG = logging.getLogger(__name__)

DATA_KEY = "trip-app-data"
ROOM_ID_KEY = "trip-app-room-id"
PARTICIPANT_ID_KEY = "trip-app-user-id"

_BASE36 = string.digits + string.ascii_lowercase


class LocalStore(ABC):
    @abstractmethod
    def get(self, key: str) -> str | None: ...  # pragma: no cover

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...  # pragma: no cover

    @abstractmethod
    def delete(self, key: str) -> None: ...  # pragma: no cover


class MemoryStore(LocalStore):
    """Volatile store, used by tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class JsonFileStore(LocalStore):
    """Keys persisted together in one JSON object file.

    Every write rewrites the file through a temporary sibling so a crash never
    leaves a half-written store behind.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._values: dict[str, str] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if self._values is not None:
            return self._values
        if not self._path.exists():
            self._values = {}
            return self._values
        try:
            payload: Any = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"invalid local store file: {self._path}") from exc
        if not isinstance(payload, dict) or not all(isinstance(value, str) for value in payload.values()):
            raise ConfigError(f"invalid local store file: {self._path}")
        self._values = dict(payload)
        return self._values

    def _flush(self, values: dict[str, str]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(values, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
            tmp_path.replace(self._path)
        except OSError as exc:
            raise ConfigError(f"failed writing local store file: {self._path}") from exc
        _LOG.debug("Wrote local store %s (%d keys)", self._path, len(values))

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        values = dict(self._load())
        values[key] = value
        self._flush(values)
        self._values = values

    def delete(self, key: str) -> None:
        values = dict(self._load())
        if values.pop(key, None) is None:
            return
        self._flush(values)
        self._values = values


def _random_base36(length: int, rng: random.Random | None = None) -> str:
    chooser = rng or random.SystemRandom()
    return "".join(chooser.choice(_BASE36) for _ in range(length))


def ensure_participant_id(store: LocalStore, *, rng: random.Random | None = None) -> str:
    """Return the stable participant id, generating and caching it on first use."""
    participant_id = store.get(PARTICIPANT_ID_KEY)
    if participant_id:
        return participant_id
    participant_id = f"user-{int(time.time() * 1000)}-{_random_base36(9, rng)}"
    store.set(PARTICIPANT_ID_KEY, participant_id)
    return participant_id


def generate_room_id(*, rng: random.Random | None = None) -> str:
    return _random_base36(9, rng)


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
