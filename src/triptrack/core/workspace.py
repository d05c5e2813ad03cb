"""Application state container holding the current travel snapshot."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from triptrack.core.codec import decode, encode
from triptrack.core.contracts.data import AppData
from triptrack.core.contracts.exceptions import FormatError, SyncError
from triptrack.core.merge import default_seed, merge
from triptrack.core.store.local import DATA_KEY, LocalStore

_LOG = logging.getLogger(__name__)


class TripWorkspace:
    """Owns the in-memory snapshot and keeps the local store in step with it.

    Every change goes through :meth:`replace`, which persists the whole
    snapshot immediately.
    """

    def __init__(self, store: LocalStore, *, seed: AppData | None = None) -> None:
        self._store = store
        self._seed = seed if seed is not None else default_seed()
        self._data = self._seed
        self._pending_import: AppData | None = None

    @property
    def store(self) -> LocalStore:
        return self._store

    @property
    def seed(self) -> AppData:
        return self._seed

    @property
    def data(self) -> AppData:
        return self._data

    def load(self) -> AppData:
        raw = self._store.get(DATA_KEY)
        if raw is None:
            self._data = self._seed
            return self._data
        try:
            stored = decode(raw)
        except FormatError as exc:
            _LOG.warning("Stored snapshot is unreadable, falling back to seed data: %s", exc)
            self._data = self._seed
            return self._data
        self._data = merge(self._seed, stored)
        return self._data

    def save(self) -> None:
        self._store.set(DATA_KEY, encode(self._data))

    def replace(self, data: AppData) -> None:
        self._store.set(DATA_KEY, encode(data))
        self._data = data

    def apply(self, operation: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run a catalog operation on the current snapshot and persist its result.

        Operations returning ``(AppData, created)`` yield ``created``.
        """
        result = operation(self._data, *args, **kwargs)
        if isinstance(result, tuple):
            data, created = result
            self.replace(data)
            return created
        self.replace(result)
        return None

    # ------------------------------------------------------------------
    # Shared-snapshot import (propose, then confirm or cancel)
    # ------------------------------------------------------------------

    @property
    def pending_import(self) -> AppData | None:
        return self._pending_import

    def propose_import(self, data: AppData) -> None:
        self._pending_import = data

    def confirm_import(self) -> AppData:
        if self._pending_import is None:
            raise SyncError("no import is pending")
        imported = self._pending_import
        self._pending_import = None
        self.replace(imported)
        return imported

    def cancel_import(self) -> None:
        self._pending_import = None


__all__ = ["TripWorkspace"]
