"""Local persistence for the session token and the serialized user."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from xecare.config import get_settings

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"
_SESSION_FILE = "session.json"


class SessionStorage:
    """Small key/value store backed by a JSON file, like browser local storage."""

    def __init__(self, directory: Path | None = None) -> None:
        self.directory = Path(directory or get_settings().storage_dir).expanduser()
        self.path = self.directory / _SESSION_FILE

    def get_item(self, key: str) -> Any:
        return self._read().get(key)

    def set_item(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return

    def _read(self) -> dict[str, Any]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable session file %s", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        os.replace(tmp_path, self.path)


__all__ = ["SessionStorage", "TOKEN_KEY", "USER_KEY"]
