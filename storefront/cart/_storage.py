"""
Cart storage — where serialized cart state lives between sessions.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# KeyValueStorage Protocol — Users Implement This
# ═══════════════════════════════════════════════════════════════════════════════


class KeyValueStorage(Protocol):
    """
    String key/value storage for cart state.

    Implement this for custom backends (browser storage bridge, Redis, ...).
    """

    def get(self, key: str) -> str | None:
        """Get value. Returns None when missing."""
        ...

    def set(self, key: str, value: str) -> None:
        """Set value."""
        ...

    def delete(self, key: str) -> bool:
        """Delete key. Returns True if existed."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# MemoryStorage — Default
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryStorage:
    """In-process storage. Contents are lost with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def __contains__(self, key: str) -> bool:
        return key in self._data


# ═══════════════════════════════════════════════════════════════════════════════
# JsonFileStorage — single JSON document on disk
# ═══════════════════════════════════════════════════════════════════════════════


class JsonFileStorage:
    """
    Keeps all keys in one JSON object file.

    A missing or unreadable file reads as empty; the next write replaces it.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storage file %s: %s", self._path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring storage file %s: not a JSON object", self._path)
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _dump(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        tmp.replace(self._path)

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def delete(self, key: str) -> bool:
        data = self._load()
        if key not in data:
            return False
        del data[key]
        self._dump(data)
        return True


__all__ = ("KeyValueStorage", "MemoryStorage", "JsonFileStorage")
