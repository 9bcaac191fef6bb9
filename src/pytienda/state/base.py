"""Observable stores with optional snapshot persistence.

A store owns a frozen pydantic state object and replaces it wholesale on
every mutation. Subscribers are called synchronously after each
replacement with ``(state, previous)``.

:class:`PersistedStore` additionally writes a partialized projection of the
state to a :class:`~pytienda.storage.KeyValueStorage` after each mutation,
and replays it on :meth:`PersistedStore.rehydrate`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from pytienda.exceptions import TiendaStorageError
from pytienda.storage import KeyValueStorage, dump_snapshot, load_snapshot

_logger = logging.getLogger(__name__)

S = TypeVar("S", bound=BaseModel)
V = TypeVar("V")

Unsubscribe = Callable[[], None]


class Store(Generic[S]):
    """In-memory observable store."""

    def __init__(self, initial: S) -> None:
        self._state: S = initial
        self._listeners: list[Callable[[S, S], None]] = []

    @property
    def state(self) -> S:
        """Current immutable state snapshot."""
        return self._state

    def subscribe(self, listener: Callable[[S, S], None]) -> Unsubscribe:
        """Register *listener*; returns a callable that removes it again."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def subscribe_selector(
        self,
        selector: Callable[[S], V],
        listener: Callable[[V, V], None],
    ) -> Unsubscribe:
        """Call *listener* only when ``selector(state)`` changes."""

        def _on_change(state: S, previous: S) -> None:
            new_value = selector(state)
            old_value = selector(previous)
            if new_value != old_value:
                listener(new_value, old_value)

        return self.subscribe(_on_change)

    def _set(self, **changes: Any) -> None:
        previous = self._state
        self._state = previous.model_copy(update=changes)
        self._after_set(changes)
        self._notify(previous)

    def _after_set(self, changes: dict[str, Any]) -> None:
        """Hook for subclasses; called before listeners are notified."""

    def _notify(self, previous: S) -> None:
        state = self._state
        for listener in list(self._listeners):
            try:
                listener(state, previous)
            except Exception:
                _logger.warning("%s listener failed", type(self).__name__, exc_info=True)


class PersistedStore(Store[S]):
    """Store whose partialized state survives restarts.

    Subclasses implement :meth:`_partialize` (state → JSON-safe dict) and
    :meth:`_restore` (dict → state changes). The ``hydrated`` field of the
    state is never persisted; it flips to ``True`` exactly once, when the
    first :meth:`rehydrate` completes.
    """

    #: State fields whose change triggers a write.
    persisted_fields: frozenset[str] = frozenset()

    def __init__(self, initial: S, *, storage: KeyValueStorage, key: str) -> None:
        super().__init__(initial)
        self._storage = storage
        self._key = key
        self._rehydrate_callbacks: list[Callable[[], None]] = []

    @property
    def storage_key(self) -> str:
        return self._key

    @property
    def hydrated(self) -> bool:
        return bool(getattr(self._state, "hydrated", False))

    def on_rehydrate(self, callback: Callable[[], None]) -> None:
        """Run *callback* after every completed rehydration."""
        self._rehydrate_callbacks.append(callback)

    def set_hydrated(self) -> None:
        """Mark the store as hydrated. Idempotent."""
        if self.hydrated:
            return
        self._set(hydrated=True)

    def _partialize(self) -> dict[str, Any]:
        raise NotImplementedError

    def _restore(self, snapshot: dict[str, Any]) -> dict[str, Any]:
        """Translate a persisted snapshot into state field updates."""
        raise NotImplementedError

    def _empty(self) -> dict[str, Any]:
        """State field updates that reset the store to its initial contents."""
        raise NotImplementedError

    def _after_set(self, changes: dict[str, Any]) -> None:
        if self.persisted_fields.intersection(changes):
            self.persist()

    def persist(self) -> None:
        """Write the partialized state; failures are logged, not raised."""
        try:
            self._storage.set_item(self._key, dump_snapshot(self._partialize()))
        except TiendaStorageError:
            _logger.warning("Could not persist %s", self._key, exc_info=True)

    async def rehydrate(self) -> None:
        """Replay the persisted snapshot into memory, then mark hydrated.

        A missing snapshot leaves the state untouched. An unreadable or
        invalid one is logged and the store falls back to its empty state.
        """
        try:
            raw = await asyncio.to_thread(self._storage.get_item, self._key)
            snapshot = load_snapshot(raw, key=self._key)
            if snapshot is not None:
                self._replace(self._restore(snapshot))
                _logger.debug("Rehydrated %s", self._key)
        except (TiendaStorageError, ValidationError, ValueError, TypeError, KeyError):
            _logger.warning("Discarding unreadable snapshot %s", self._key, exc_info=True)
            self._replace(self._empty())

        self.set_hydrated()
        for callback in list(self._rehydrate_callbacks):
            try:
                callback()
            except Exception:
                _logger.warning("%s rehydrate callback failed", self._key, exc_info=True)

    def _replace(self, changes: dict[str, Any]) -> None:
        """Apply *changes* without writing them back to storage."""
        previous = self._state
        self._state = previous.model_copy(update=changes)
        self._notify(previous)
