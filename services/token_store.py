"""
Credential storage for the bearer token.

The token is kept under the key ``token`` in a small JSON document on disk,
the command-line counterpart of the browser's local storage. An in-memory
store with the same interface is used by tests and embedded callers.
"""

import json
import os
from pathlib import Path
from typing import Dict, Optional

from utils.logging import setup_logger

logger = setup_logger(__name__)

TOKEN_KEY = "token"


class MemoryTokenStore:
    """Key/value store kept in process memory."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str = TOKEN_KEY) -> Optional[str]:
        return self._data.get(key)

    def set(self, value: str, key: str = TOKEN_KEY) -> None:
        self._data[key] = value

    def delete(self, key: str = TOKEN_KEY) -> None:
        self._data.pop(key, None)


class FileTokenStore(MemoryTokenStore):
    """
    Key/value store persisted as JSON.

    The file is rewritten on every change and created readable by the
    owner only.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable credential store {self.path}: {e}")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)} if isinstance(data, dict) else {}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".tmp")
        fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(self._data, fh)
        os.replace(tmp_path, self.path)

    def set(self, value: str, key: str = TOKEN_KEY) -> None:
        super().set(value, key)
        self._save()

    def delete(self, key: str = TOKEN_KEY) -> None:
        if key not in self._data:
            return
        super().delete(key)
        self._save()
