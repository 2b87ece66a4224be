"""
Short-lived in-memory cache for calculation results.
"""

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, Optional

from .bc_data import CACHE_CLEANUP_THRESHOLD, CACHE_TTL_SECONDS
from .inputs import CalculationInput

if TYPE_CHECKING:
    from .calculator import CalculationResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A cached result and the time it was computed."""
    result: 'CalculationResult'
    computed_at_ms: float


def make_cache_key(inputs: CalculationInput) -> str:
    """
    Canonical key for an input: every field, sorted by name.

    Numbers are serialized as floats so 100 and 100.0 share a key.
    """
    values = inputs.to_dict()
    for name in ('system_size_kw', 'monthly_usage_kwh', 'current_monthly_bill_cad'):
        values[name] = float(values[name])
    return json.dumps(values, sort_keys=True, separators=(',', ':'))


class CalculationCache:
    """
    Time-bounded memoization of calculation results.

    Entries stay valid for ``ttl_seconds`` after insertion. Once more than
    ``cleanup_threshold`` entries are held, inserting sweeps out expired
    entries; unexpired entries are never evicted, so the table can grow
    without bound inside one TTL window.

    A single lock guards the table. Two callers that miss on the same key
    at once will both compute and both store; the results are identical.
    """

    def __init__(
        self,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        cleanup_threshold: int = CACHE_CLEANUP_THRESHOLD,
        clock: Callable[[], float] = time.time
    ):
        self.ttl_ms = ttl_seconds * 1000
        self.cleanup_threshold = cleanup_threshold
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def _is_expired(self, entry: CacheEntry, now_ms: float) -> bool:
        return now_ms - entry.computed_at_ms >= self.ttl_ms

    def get(self, inputs: CalculationInput) -> Optional['CalculationResult']:
        """Return the cached result for the inputs, or None on a miss or expiry."""
        key = make_cache_key(inputs)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Cache miss for %s", key)
                return None

            if self._is_expired(entry, self._now_ms()):
                del self._entries[key]
                logger.debug("Cache entry expired for %s", key)
                return None

            logger.debug("Cache hit for %s", key)
            return entry.result

    def set(self, inputs: CalculationInput, result: 'CalculationResult') -> None:
        """Store a result, replacing any previous entry for the same inputs."""
        key = make_cache_key(inputs)
        with self._lock:
            self._entries[key] = CacheEntry(result=result, computed_at_ms=self._now_ms())
            if len(self._entries) > self.cleanup_threshold:
                self._cleanup()

    def _cleanup(self) -> None:
        now_ms = self._now_ms()
        expired = [
            key for key, entry in self._entries.items()
            if self._is_expired(entry, now_ms)
        ]
        for key in expired:
            del self._entries[key]
        logger.debug("Cache cleanup removed %d expired entries", len(expired))

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()
