"""Persisted key-value storage adapters.

Each persisted store writes a JSON snapshot of its partialized state under
its own key. Snapshots are wrapped in a small envelope so future format
changes can be detected::

    {"state": {...}, "version": 0}

The adapters have no ownership over the data; only the owning store writes
to its key.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Protocol

from pytienda._constants import STORAGE_VERSION
from pytienda.exceptions import TiendaStorageError

_logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Structural storage interface used by persisted stores.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementations concrete.
    """

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    """Process-local storage; nothing survives the interpreter."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileStorage:
    """One JSON file per key inside *directory*.

    Writes go to a temporary file in the same directory and are moved into
    place with :func:`os.replace`, so a reader never sees a half-written
    snapshot.
    """

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def _path(self, key: str) -> Path:
        safe = "".join(ch if ch.isalnum() or ch in "-_." else "_" for ch in key)
        return self._directory / f"{safe}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise TiendaStorageError(f"Cannot read {path}: {exc}", key=key) from exc

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{path.stem}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise TiendaStorageError(f"Cannot write {path}: {exc}", key=key) from exc

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise TiendaStorageError(f"Cannot remove {path}: {exc}", key=key) from exc


def dump_snapshot(state: dict[str, Any], *, version: int = STORAGE_VERSION) -> str:
    """Serialize a partialized state into an envelope string."""
    return json.dumps({"state": state, "version": version}, separators=(",", ":"), ensure_ascii=False)


def load_snapshot(raw: str | None, *, key: str = "", version: int = STORAGE_VERSION) -> dict[str, Any] | None:
    """Parse an envelope string back into its state dict.

    Returns ``None`` when nothing was stored. Raises
    :class:`TiendaStorageError` for malformed or mismatched envelopes; the
    caller decides whether to fall back to an empty state.
    """
    if raw is None:
        return None
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise TiendaStorageError(f"Snapshot under {key!r} is not JSON", key=key) from exc

    if not isinstance(envelope, dict) or not isinstance(envelope.get("state"), dict):
        raise TiendaStorageError(f"Snapshot under {key!r} has no state object", key=key)

    stored_version = envelope.get("version", 0)
    if stored_version != version:
        raise TiendaStorageError(
            f"Snapshot under {key!r} has version {stored_version}, expected {version}",
            key=key,
        )
    _logger.debug("Loaded snapshot key=%s fields=%s", key, sorted(envelope["state"]))
    return envelope["state"]
