"""Per-user storage for the cached timer session.

The cache survives restarts but is never authoritative: the server's open
time entry is.
"""
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class SessionCache(ABC):
    """Key/value contract keyed by user."""

    @abstractmethod
    def read(self, user_key: str) -> Optional[str]:
        ...

    @abstractmethod
    def write(self, user_key: str, payload: str) -> None:
        ...

    @abstractmethod
    def clear(self, user_key: str) -> None:
        ...


class MemorySessionCache(SessionCache):
    """In-process cache, shared by every manager holding the same instance."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def read(self, user_key: str) -> Optional[str]:
        return self._data.get(user_key)

    def write(self, user_key: str, payload: str) -> None:
        self._data[user_key] = payload

    def clear(self, user_key: str) -> None:
        self._data.pop(user_key, None)


class FileSessionCache(SessionCache):
    """One JSON file per user inside a cache directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, user_key: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", "_", user_key)
        return self.directory / f"timer_{safe_key}.json"

    def read(self, user_key: str) -> Optional[str]:
        path = self._path(user_key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write(self, user_key: str, payload: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(user_key)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, path)

    def clear(self, user_key: str) -> None:
        self._path(user_key).unlink(missing_ok=True)
