"""
Durable key-value storage for client-side state.

The console persists only a tiny amount of state (the session token and its
expiry). It lives in a single JSON file, by default:

    ~/.eventreview/session.json

Design rationale:
- the catalog owns every event; nothing about events is stored locally
- a flat {key: value} JSON object is enough and easy to inspect by hand

MemoryStore has the same interface and is meant for tests and throwaway sessions.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional


def default_store_path() -> Path:
    """
    Return the default location of the session file in the user's home directory.

    Using a function instead of a constant makes testing easier,
    because tests can override the path.
    """
    return Path.home() / ".eventreview" / "session.json"


class MemoryStore:
    """In-process key-value store."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)


class JsonFileStore:
    """
    Key-value store backed by one JSON file.

    Every call re-reads the file, so two console processes see each other's
    login/logout without extra coordination.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        # Use custom path if provided (mainly for tests),
        # otherwise fall back to the default location
        self.path = Path(path) if path is not None else default_store_path()

    def _read(self) -> dict[str, str]:
        # First run: file does not exist yet → empty store
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError, UnicodeDecodeError):
            return {}
        if not isinstance(data, dict):
            return {}
        # ignore anything that is not a plain string value
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False, sort_keys=True), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = str(value)
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key not in data:
            return
        del data[key]
        self._write(data)

    def keys(self) -> list[str]:
        return sorted(self._read())
