"""
Key-value persistence backends for the progress store.

The store only needs ``load(key) -> Optional[bytes]``, ``store(key, data)``
and ``remove(key)``. Two backends are provided: an in-memory one for tests
and short-lived processes, and a single JSON file on disk.
"""

import base64
import json
import logging
import os
import tempfile
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Base interface for byte-valued key-value persistence."""

    def load(self, key: str) -> Optional[bytes]:
        raise NotImplementedError

    def store(self, key: str, data: bytes) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError

    def load_bool(self, key: str) -> bool:
        """Read a JSON boolean flag; anything unreadable counts as False."""
        data = self.load(key)
        if data is None:
            return False
        try:
            return json.loads(data.decode('utf-8')) is True
        except ValueError:
            logger.warning(f"Ignoring unreadable flag {key!r}")
            return False

    def store_bool(self, key: str, value: bool) -> None:
        self.store(key, json.dumps(bool(value)).encode('utf-8'))

    def load_str(self, key: str) -> Optional[str]:
        data = self.load(key)
        if data is None:
            return None
        try:
            value = json.loads(data.decode('utf-8'))
        except ValueError:
            logger.warning(f"Ignoring unreadable value {key!r}")
            return None
        return value if isinstance(value, str) else None

    def store_str(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self.remove(key)
        else:
            self.store(key, json.dumps(value).encode('utf-8'))


class MemoryKeyValueStore(KeyValueStore):
    """Keeps values in a dict for the lifetime of the object."""

    def __init__(self):
        self.values: Dict[str, bytes] = {}

    def load(self, key: str) -> Optional[bytes]:
        return self.values.get(key)

    def store(self, key: str, data: bytes) -> None:
        self.values[key] = bytes(data)

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


class JSONFileKeyValueStore(KeyValueStore):
    """
    Persists all keys in one JSON file.

    Values are base64 encoded. Every write replaces the file atomically
    through a temporary file in the same directory.
    """

    def __init__(self, path: str):
        """
        Initialize file-backed store.

        Args:
            path: Path of the JSON file (created on first write)
        """
        self.path = path

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read key-value file {self.path}: {str(e)}, starting empty")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Unexpected content in {self.path}, starting empty")
            return {}
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.kv-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def load(self, key: str) -> Optional[bytes]:
        encoded = self._read_all().get(key)
        if encoded is None:
            return None
        try:
            return base64.b64decode(encoded)
        except (TypeError, ValueError) as e:
            logger.warning(f"Corrupt value for {key!r} in {self.path}: {str(e)}")
            return None

    def store(self, key: str, data: bytes) -> None:
        values = self._read_all()
        values[key] = base64.b64encode(data).decode('ascii')
        self._write_all(values)

    def remove(self, key: str) -> None:
        values = self._read_all()
        if key in values:
            del values[key]
            self._write_all(values)
