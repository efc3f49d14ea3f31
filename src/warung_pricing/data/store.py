"""
JSON key-value store.

Each key is persisted as one pretty-printed JSON document under the data
directory, the server-side counterpart of the POS browser storage.
"""
import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class JsonStore:
    """Key-value store backed by one JSON file per key."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def get(self, key: str, default: Any = None) -> Any:
        """Read a key, returning default when it is missing or unreadable."""
        path = self._path(key)
        if not path.exists():
            return default

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring corrupt store file %s: %s", path, e)
            return default

    def set(self, key: str, value: Any):
        """Write a key, replacing any previous value."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix('.json.tmp')
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(value, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)
        logger.debug("Wrote %s", path)

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True
