from __future__ import annotations

import threading
import time
from collections.abc import Callable

from lovemarket.core.config import settings

from .variants import Market


class ContractPreloadCache:
    """Latest known market snapshots keyed by contract id.

    Readers take a :meth:`generation` token before loading a contract and
    prime the cache with it afterwards; a prime is dropped when the entry was
    invalidated after the token was taken. Writers invalidate an entry once
    their change is committed. Entries expire after ``ttl_seconds`` so writes
    committed by other processes show up. ``resolve`` swaps a supplied
    snapshot for the cached one when it exists.
    """

    def __init__(
        self,
        max_entries: int = 1024,
        *,
        ttl_seconds: float | None = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: dict[str, tuple[Market, float]] = {}
        self._invalidated: dict[str, int] = {}
        self._generation = 0
        self._lock = threading.Lock()
        self._max_entries = max_entries
        self._ttl_seconds = ttl_seconds or None
        self._clock = clock

    def generation(self) -> int:
        with self._lock:
            return self._generation

    def prime(self, market: Market, *, generation: int | None = None) -> bool:
        with self._lock:
            if generation is not None and self._invalidated.get(market.id, -1) >= generation:
                return False
            self._entries.pop(market.id, None)
            self._entries[market.id] = (market, self._clock())
            while len(self._entries) > self._max_entries:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
            return True

    def get(self, contract_id: str) -> Market | None:
        with self._lock:
            entry = self._entries.get(contract_id)
            if entry is None:
                return None
            market, stored_at = entry
            if self._ttl_seconds is not None and self._clock() - stored_at >= self._ttl_seconds:
                del self._entries[contract_id]
                return None
            return market

    def resolve(self, market: Market) -> Market:
        return self.get(market.id) or market

    def invalidate(self, contract_id: str) -> None:
        with self._lock:
            self._entries.pop(contract_id, None)
            self._invalidated.pop(contract_id, None)
            self._invalidated[contract_id] = self._generation
            self._generation += 1
            while len(self._invalidated) > self._max_entries:
                oldest = next(iter(self._invalidated))
                del self._invalidated[oldest]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._invalidated.clear()


preload_cache = ContractPreloadCache(ttl_seconds=settings.card_cache_ttl_seconds)


__all__ = ["ContractPreloadCache", "preload_cache"]
