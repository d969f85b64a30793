"""Registry of per-pool order books.

Each pool identity maps to exactly one entry that owns its OrderBook. An
entry is PREPARED by beforeInitialize and ACTIVE after afterInitialize;
only active pools accept swaps and orders. Entries are never removed once
active.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import structlog

from flowhook.book.order_book import OrderBook
from flowhook.errors import AlreadyInitialized, PoolNotInitialized
from flowhook.models.pool import PoolKey

logger = structlog.get_logger()


class PoolState(str, Enum):
    """Lifecycle state of a pool's book."""

    PREPARED = "prepared"
    ACTIVE = "active"


@dataclass
class PoolEntry:
    """A registered pool and the book it owns."""

    key: PoolKey
    book: OrderBook
    state: PoolState
    sqrt_price_x96: int
    tick: int | None = None

    @property
    def is_active(self) -> bool:
        return self.state is PoolState.ACTIVE


class PoolBookRegistry:
    """Mapping from pool identity to its owned OrderBook.

    Lookups are available both by PoolKey and by pool_id (the hex digest
    used on the HTTP surface).
    """

    def __init__(self) -> None:
        self._entries: dict[PoolKey, PoolEntry] = {}
        # Secondary index: pool_id -> key
        self._keys_by_id: dict[str, PoolKey] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def prepare(self, key: PoolKey, sqrt_price_x96: int) -> PoolEntry:
        """Register an empty book for a pool.

        Raises:
            AlreadyInitialized: If the pool already has a book
        """
        if key in self._entries:
            raise AlreadyInitialized(f"Pool {key.pool_id[:10]} already has an order book")

        pool_id = key.pool_id
        entry = PoolEntry(
            key=key,
            book=OrderBook(pool_id),
            state=PoolState.PREPARED,
            sqrt_price_x96=sqrt_price_x96,
        )
        self._entries[key] = entry
        self._keys_by_id[pool_id] = key
        logger.debug("pool_prepared", pool_id=pool_id[:10])
        return entry

    def activate(self, key: PoolKey, tick: int) -> PoolEntry:
        """Move a prepared pool to ACTIVE.

        Raises:
            PoolNotInitialized: If the pool was never prepared
            AlreadyInitialized: If the pool is already active
        """
        entry = self._entries.get(key)
        if entry is None:
            raise PoolNotInitialized(f"Pool {key.pool_id[:10]} was not prepared")
        if entry.is_active:
            raise AlreadyInitialized(f"Pool {key.pool_id[:10]} is already active")
        entry.state = PoolState.ACTIVE
        entry.tick = tick
        return entry

    def abandon(self, key: PoolKey) -> None:
        """Drop a PREPARED entry whose initialization did not complete.

        Active entries are left alone.
        """
        entry = self._entries.get(key)
        if entry is None or entry.is_active:
            return
        del self._entries[key]
        del self._keys_by_id[key.pool_id]
        logger.info("pool_abandoned", pool_id=key.pool_id[:10])

    def get(self, key: PoolKey) -> PoolEntry | None:
        return self._entries.get(key)

    def get_by_id(self, pool_id: str) -> PoolEntry | None:
        key = self._keys_by_id.get(pool_id.lower())
        return self._entries.get(key) if key is not None else None

    def require_active(self, key: PoolKey) -> PoolEntry:
        """Return the active entry for a pool.

        Raises:
            PoolNotInitialized: If the pool is unknown or not yet active
        """
        entry = self._entries.get(key)
        if entry is None or not entry.is_active:
            raise PoolNotInitialized(f"Pool {key.pool_id[:10]} is not initialized")
        return entry

    def entries(self) -> list[PoolEntry]:
        return list(self._entries.values())


__all__ = ["PoolState", "PoolEntry", "PoolBookRegistry"]
