"""Short-lived memoization of radio state."""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from .model import Mode


class Quantity(Enum):
    """Cached quantities and the value type each one holds."""

    FREQUENCY = ("frequency", int)
    MODE = ("mode", Mode)
    PTT = ("ptt", bool)
    POWER = ("power", int)
    SPLIT = ("split", bool)
    S_METER = ("s_meter", int)

    def __init__(self, label: str, value_type: type):
        self.label = label
        self.value_type = value_type

    def check(self, value: Any) -> None:
        # bool is an int subclass; keep the two apart
        if not isinstance(value, self.value_type) or (
            self.value_type is int and isinstance(value, bool)
        ):
            raise TypeError(
                f"{self.label} cache entries hold {self.value_type.__name__}, "
                f"got {type(value).__name__}"
            )


@dataclass(frozen=True)
class CacheKey:
    """(quantity, identifier) pair; the identifier is usually a VFO name."""

    quantity: Quantity
    ident: str = "current"

    def __str__(self) -> str:
        return f"{self.quantity.label}:{self.ident}"


@dataclass(frozen=True)
class CacheStatistics:
    entries: int
    hits: int
    misses: int
    invalidations: int

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total else 0.0

    def to_dict(self) -> dict:
        return {
            "entries": self.entries,
            "hits": self.hits,
            "misses": self.misses,
            "invalidations": self.invalidations,
            "hit_rate": round(self.hit_rate, 3),
        }


class StateCache:
    """Per-key memoization with a maximum age.

    Writes are serialized by a lock. Each invalidation bumps a generation
    counter; a fetch that was started before an invalidation still returns its
    result to the caller but does not store it.

    Args:
        default_max_age: Seconds an entry stays fresh when ``get`` is not
            given a ``max_age``
        clock: Monotonic time source, in seconds
    """

    def __init__(self, default_max_age: float = 0.5, clock: Callable[[], float] = time.monotonic):
        self.default_max_age = default_max_age
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[Any, float]] = {}
        self._generations: Dict[CacheKey, int] = {}
        self._epoch = 0
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._invalidations = 0

    async def get(
        self,
        key: CacheKey,
        fetch: Callable[[], Awaitable[Any]],
        max_age: Optional[float] = None,
    ) -> Any:
        """Return a fresh cached value or await ``fetch()`` and store its result.

        A failing fetch propagates and leaves any existing entry untouched.
        """
        if max_age is None:
            max_age = self.default_max_age

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._clock() - entry[1] < max_age:
                self._hits += 1
                return entry[0]
            self._misses += 1
            token = self._token(key)

        value = await fetch()
        key.quantity.check(value)

        with self._lock:
            if self._token(key) == token:
                self._entries[key] = (value, self._clock())
        return value

    def put(self, key: CacheKey, value: Any) -> None:
        key.quantity.check(value)
        with self._lock:
            self._entries[key] = (value, self._clock())

    def invalidate(self, key: Optional[CacheKey] = None) -> None:
        """Drop one entry, or every entry when ``key`` is None."""
        with self._lock:
            self._invalidations += 1
            if key is None:
                self._entries.clear()
                self._generations.clear()
                self._epoch += 1
            else:
                self._entries.pop(key, None)
                self._generations[key] = self._generations.get(key, 0) + 1

    def contains(self, key: CacheKey) -> bool:
        with self._lock:
            return key in self._entries

    def age(self, key: CacheKey) -> Optional[float]:
        with self._lock:
            entry = self._entries.get(key)
            return None if entry is None else self._clock() - entry[1]

    def statistics(self) -> CacheStatistics:
        with self._lock:
            return CacheStatistics(
                entries=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                invalidations=self._invalidations,
            )

    def _token(self, key: CacheKey) -> Tuple[int, int]:
        return (self._epoch, self._generations.get(key, 0))
