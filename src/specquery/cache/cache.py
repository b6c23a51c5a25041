"""TTL cache for normalized specs.

Entries live in process memory only and never survive a restart. Each entry
records the time it was stored and its own TTL; an expired entry is deleted
on the next :meth:`SpecCache.get` instead of being served stale.

The clock is injectable so expiry can be tested without sleeping.

See Also:
    :class:`~specquery.models.CacheConfig` -- supplies ``ttl_seconds``.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from specquery.models import ParsedSpec

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


@dataclass
class _Entry:
    spec: ParsedSpec
    stored_at: float
    ttl: float

    def expires_at(self) -> float:
        return self.stored_at + self.ttl


class SpecCache:
    """In-memory TTL cache mapping string keys to :class:`ParsedSpec`.

    Args:
        default_ttl: TTL in seconds applied when :meth:`set` is called
            without one.
        clock: Monotonic time source; defaults to :func:`time.monotonic`.

    Example::

        cache = SpecCache(default_ttl=300)
        cache.set("current", spec)
        cache.get("current")   # -> spec, until 300 seconds have passed
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @property
    def default_ttl(self) -> float:
        return self._default_ttl

    def get(self, key: str) -> Optional[ParsedSpec]:
        """Return the spec stored under *key*, or ``None`` on a miss.

        An entry whose TTL has elapsed is removed and reported as a miss.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Spec cache miss: %s", key)
                return None
            if self._clock() >= entry.expires_at():
                del self._entries[key]
                logger.debug("Spec cache entry expired: %s", key)
                return None
            logger.debug("Spec cache hit: %s", key)
            return entry.spec

    def set(self, key: str, spec: ParsedSpec, ttl: Optional[float] = None) -> None:
        """Store *spec* under *key*, replacing any previous entry."""
        entry = _Entry(
            spec=spec,
            stored_at=self._clock(),
            ttl=self._default_ttl if ttl is None else ttl,
        )
        with self._lock:
            self._entries[key] = entry

    def invalidate(self, key: str) -> bool:
        """Remove *key*; returns whether an entry was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def is_stale(self, key: str, within: float = 0.0) -> bool:
        """Report whether *key* is missing, expired, or expires within *within* seconds.

        Unlike :meth:`get` this never deletes anything. It lets a caller
        decide to reload ahead of expiry.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return True
            return self._clock() + within >= entry.expires_at()

    def stats(self) -> dict[str, Any]:
        """Return ``size``, ``keys`` and ``default_ttl``."""
        with self._lock:
            return {
                "size": len(self._entries),
                "keys": sorted(self._entries),
                "default_ttl": self._default_ttl,
            }
