"""Process-wide read-through cache for reference parameter lookups."""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable
from typing import Any

from loguru import logger


class ParameterCache:
    """Get-or-compute cache, written at most once per key.

    Entries are never invalidated for the lifetime of the process. Reads
    go straight to the dict; the lock only serialises the write path so a
    value is computed once even when two callers miss at the same time.
    """

    def __init__(self) -> None:
        self._values: dict[Hashable, Any] = {}
        self._lock = threading.Lock()

    def get_or_compute(self, key: Hashable, compute: Callable[[], Any]) -> Any:
        try:
            return self._values[key]
        except KeyError:
            pass

        with self._lock:
            if key not in self._values:
                self._values[key] = compute()
                logger.debug("Cached parameter {key} = {value}", key=key, value=self._values[key])
            return self._values[key]

    def __contains__(self, key: Hashable) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
