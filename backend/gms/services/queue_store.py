"""Durable storage for the offline action queue.

The whole queue lives under one storage key as a JSON array. Loading never
raises: a missing key, unreadable storage or malformed JSON all yield an empty
queue and a logged warning. Write failures are logged and swallowed; the
queue may then not survive a restart, which is accepted degraded behaviour.
"""

import logging
import os
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from gms.schemas.sync import QueuedAction, action_list_adapter

logger = logging.getLogger(__name__)

Observer = Callable[[], None]


class StorageError(Exception):
    """The key-value backend could not read or write."""


class KeyValueStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStorage:
    """Process-local storage. Nothing survives a restart."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileStorage:
    """One file per key inside a directory.

    Writes go to a temporary file that is renamed over the target, so a crash
    mid-write leaves the previous content intact.
    """

    def __init__(self, directory: str | os.PathLike[str]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Cannot read {path}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(value)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write {path}: {exc}") from exc


class RedisStorage:
    """A Redis string per key."""

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisStorage":
        import redis

        return cls(redis.Redis.from_url(url, decode_responses=True))

    def get(self, key: str) -> str | None:
        import redis

        try:
            return self.client.get(key)
        except (redis.RedisError, UnicodeDecodeError) as exc:
            raise StorageError(f"Redis GET {key} failed: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        import redis

        try:
            self.client.set(key, value)
        except redis.RedisError as exc:
            raise StorageError(f"Redis SET {key} failed: {exc}") from exc


class PersistentQueueStore:
    def __init__(self, storage: KeyValueStorage, key: str = "gms_sync_queue"):
        self.storage = storage
        self.key = key
        self._observers: list[Observer] = []

    def add_observer(self, observer: Observer) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: Observer) -> None:
        self._observers = [o for o in self._observers if o != observer]

    def load(self) -> list[QueuedAction]:
        """Return the persisted queue, or an empty list if absent or unreadable."""
        try:
            raw = self.storage.get(self.key)
        except StorageError as exc:
            logger.warning("Could not read sync queue from storage: %s", exc)
            return []
        if not raw:
            return []
        try:
            return action_list_adapter.validate_json(raw)
        except ValidationError as exc:
            logger.warning(
                "Discarding unreadable sync queue under %r (%d errors): %s",
                self.key,
                exc.error_count(),
                exc.errors(include_url=False)[:3],
            )
            return []

    def save(self, actions: list[QueuedAction]) -> None:
        """Persist the full list, then notify observers."""
        try:
            payload = action_list_adapter.dump_json(actions, by_alias=True).decode("utf-8")
            self.storage.set(self.key, payload)
        except StorageError as exc:
            logger.error(
                "Could not save sync queue (%d actions); pending work may not survive restart: %s",
                len(actions),
                exc,
            )
        self._notify()

    def _notify(self) -> None:
        for observer in list(self._observers):
            try:
                observer()
            except Exception:
                logger.exception("Sync queue observer %r failed", observer)
