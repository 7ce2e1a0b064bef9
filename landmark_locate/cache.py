from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from filelock import FileLock

from .utils import get_cache_dir

logger = logging.getLogger(__name__)


class Cache:
    """One JSON file per key under a directory, writes guarded by a file lock."""

    def __init__(self, cache_dir: Optional[Path] = None) -> None:
        self.root = cache_dir or get_cache_dir()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str) -> Optional[Any]:
        p = self._path(key)
        if not p.exists():
            return None
        try:
            with p.open("r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable cache entry %s: %s", p.name, e)
            return None

    def set(self, key: str, value: Any) -> None:
        p = self._path(key)
        lock = FileLock(str(p) + ".lock")
        with lock:
            with p.open("w", encoding="utf-8") as f:
                json.dump(value, f, ensure_ascii=False, indent=2)

    def clear(self, prefix: str = "") -> int:
        removed = 0
        for item in self.root.glob(f"{prefix}*.json"):
            try:
                item.unlink()
                removed += 1
            except OSError as e:
                logger.warning("Could not remove %s: %s", item.name, e)
        return removed
