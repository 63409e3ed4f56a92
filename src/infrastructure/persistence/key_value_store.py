from __future__ import annotations

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


class KeyValueStore(ABC):
    """Durable string store addressed by a fixed key per collection."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self, initial: dict[str, str] | None = None):
        self._store: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._store.get(key)

    def set(self, key: str, value: str) -> None:
        self._store[key] = value

    def delete(self, key: str) -> None:
        self._store.pop(key, None)


class JsonFileKeyValueStore(KeyValueStore):
    """One `<key>.json` file per key inside a data directory."""

    def __init__(self, directory: str | Path | None = None) -> None:
        raw = directory or os.getenv("SPENDWISE_DATA_DIR") or Path.home() / ".spendwise"
        self.directory = Path(raw).expanduser()

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    # surrogateescape keeps undecodable bytes intact so a corrupt file can be
    # quarantined byte for byte.
    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8", errors="surrogateescape")
        except FileNotFoundError:
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_name: str | None = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape") as fh:
                fh.write(value)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
            raise StorageError(f"Could not write {path}: {exc}") from exc
        logger.debug("KeyValueStore wrote key=%s bytes=%d", key, len(value))

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            raise StorageError(f"Could not delete {self._path(key)}: {exc}") from exc
