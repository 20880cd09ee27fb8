# learnhub/core/cache.py
from __future__ import annotations

import time
from typing import Any, Dict, Optional


class TTLMap:
    """In-memory key/value map whose entries expire after a per-entry TTL.

    - get(key) -> Optional[Any]
    - set(key, value, ttl_seconds)
    - delete(key)
    """

    def __init__(self, maxsize: int = 4096):
        self.maxsize = maxsize
        self._data: Dict[str, Any] = {}
        self._exp: Dict[str, float] = {}

    def get(self, key: str) -> Optional[Any]:
        exp = self._exp.get(key)
        if exp is None:
            return None
        if time.monotonic() >= exp:
            self.delete(key)
            return None
        return self._data.get(key)

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if key not in self._data and len(self._data) >= self.maxsize:
            try:
                # oldest insertion first
                self.delete(next(iter(self._data)))
            except StopIteration:
                pass
        self._data[key] = value
        self._exp[key] = time.monotonic() + ttl_seconds

    def delete(self, key: str) -> None:
        self._data.pop(key, None)
        self._exp.pop(key, None)

    def clear(self) -> None:
        self._data.clear()
        self._exp.clear()

    def __len__(self) -> int:
        return len(self._data)
