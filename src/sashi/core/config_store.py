"""Key/value configuration stores.

The engine only needs ``get_config``/``set_config``; where values live is up
to the hosting application. Two implementations ship: an in-memory dict for
tests and single-process servers, and a JSON file written atomically.
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class ConfigStore(ABC):
    """Pluggable configuration storage."""

    @abstractmethod
    def get_config(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when absent."""

    @abstractmethod
    def set_config(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def get_all_configs(self) -> dict[str, Any]:
        """Return a snapshot of every stored key."""


class InMemoryConfigStore(ConfigStore):
    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._values: dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()

    def get_config(self, key: str) -> Optional[Any]:
        return self._values.get(key)

    def set_config(self, key: str, value: Any) -> None:
        with self._lock:
            self._values[key] = value

    def get_all_configs(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._values)


class JsonFileConfigStore(ConfigStore):
    """Stores configs in a JSON object on disk, rewriting it atomically on every set."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Config file {self.path} must contain a JSON object")
        return data

    def get_config(self, key: str) -> Optional[Any]:
        return self._read().get(key)

    def set_config(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self.path.parent.mkdir(parents=True, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".configs.", suffix=".tmp")
            try:
                with open(temp_fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(temp_path, self.path)
            except Exception:
                Path(temp_path).unlink(missing_ok=True)
                raise
        logger.debug(f"Stored config '{key}'", extra={"config_path": str(self.path)})

    def get_all_configs(self) -> dict[str, Any]:
        return self._read()
