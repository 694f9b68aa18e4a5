"""Keyed object pool for tile and effect handles."""
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


class PoolKey(str, Enum):
    """Prototype identities that handles are pooled under."""
    EMPTY_TILE = "empty_tile"
    BOMB_TILE = "bomb_tile"
    DIAMOND_TILE = "diamond_tile"
    GRASS_A = "grass_a"
    GRASS_B = "grass_b"
    GRASS_C = "grass_c"
    HINT_FX = "hint_fx"
    EXPLODE_FX = "explode_fx"
    EXPLOSION = "explosion"

    @classmethod
    def grass_keys(cls) -> List["PoolKey"]:
        """Cover variants placed on top of every tile."""
        return [cls.GRASS_A, cls.GRASS_B, cls.GRASS_C]


class UnknownPoolKeyError(KeyError):
    """Raised when acquiring from a key that was never registered."""


@dataclass(eq=False)
class PooledHandle:
    """A reusable handle owned by the pool for its key."""
    key: Any
    handle_id: int
    obj: Any = None
    active: bool = False


@dataclass
class PoolStats:
    """Bookkeeping snapshot for one key."""
    active: int
    inactive: int
    created: int
    preallocated: int

    @property
    def total(self) -> int:
        return self.active + self.inactive


class _KeyPool:
    """Handles for a single prototype."""

    def __init__(self, factory: Callable[[], Any], preallocated: int):
        self.factory = factory
        self.preallocated = preallocated
        self.inactive: List[PooledHandle] = []
        self.active: Dict[int, PooledHandle] = {}
        self.created = 0


class ObjectPool:
    """Keyed pool of reusable handles.

    Each key is backed by one prototype factory. Preallocated size is a soft
    floor: ``acquire`` grows the pool whenever no inactive handle is left.
    A handle is always either borrowed (active) or pooled (inactive), never
    both.
    """

    def __init__(self):
        self._pools: Dict[Any, _KeyPool] = {}
        self._ids = itertools.count(1)

    def preallocate(
        self, key: Any, count: int, factory: Optional[Callable[[], Any]] = None
    ) -> bool:
        """
        Register a prototype and create ``count`` inactive handles.

        Args:
            key: Pool key for the prototype.
            count: Number of handles created up front.
            factory: Builds the object carried by each handle.

        Returns:
            False if the key was already registered (the new definition is
            ignored), True otherwise.
        """
        if key in self._pools:
            logger.warning("Object pool already contains a pool for %s", key)
            return False

        pool = _KeyPool(factory or (lambda: None), max(0, count))
        self._pools[key] = pool
        for _ in range(pool.preallocated):
            pool.inactive.append(self._create(key, pool))
        return True

    def is_registered(self, key: Any) -> bool:
        return key in self._pools

    def keys(self) -> List[Any]:
        return list(self._pools)

    def acquire(self, key: Any) -> PooledHandle:
        """
        Borrow an inactive handle for ``key``, growing the pool if needed.

        Raises:
            UnknownPoolKeyError: If ``key`` was never registered.
        """
        pool = self._pools.get(key)
        if pool is None:
            raise UnknownPoolKeyError(key)

        if pool.inactive:
            handle = pool.inactive.pop()
        else:
            handle = self._create(key, pool)
            logger.debug("Pool %s grew to %d handles", key, pool.created)

        handle.active = True
        pool.active[handle.handle_id] = handle
        return handle

    def try_acquire(self, key: Any) -> Optional[PooledHandle]:
        """Like ``acquire`` but logs and returns None for unknown keys."""
        try:
            return self.acquire(key)
        except UnknownPoolKeyError:
            logger.warning("No pool registered for %s", key)
            return None

    def release(self, handle: Optional[PooledHandle]) -> bool:
        """
        Deactivate a borrowed handle and return it to its pool.

        Returns:
            True if the handle went back to the pool. False for handles of
            unregistered keys (dropped from bookkeeping) and for handles that
            are not currently borrowed.
        """
        if handle is None:
            return False

        pool = self._pools.get(handle.key)
        if pool is None:
            logger.warning(
                "Tried to return a handle that wasn't part of the pool (%s)", handle.key
            )
            handle.active = False
            return False

        if pool.active.pop(handle.handle_id, None) is None:
            logger.warning(
                "Handle %d for %s released while not borrowed", handle.handle_id, handle.key
            )
            return False

        handle.active = False
        pool.inactive.append(handle)
        return True

    def stats(self, key: Any) -> PoolStats:
        pool = self._pools.get(key)
        if pool is None:
            raise UnknownPoolKeyError(key)
        return PoolStats(
            active=len(pool.active),
            inactive=len(pool.inactive),
            created=pool.created,
            preallocated=pool.preallocated,
        )

    def active_count(self) -> int:
        """Handles currently borrowed across all keys."""
        return sum(len(pool.active) for pool in self._pools.values())

    def _create(self, key: Any, pool: _KeyPool) -> PooledHandle:
        pool.created += 1
        return PooledHandle(key=key, handle_id=next(self._ids), obj=pool.factory())


def create_board_pool(tile_count: int = 64, effect_count: int = 64) -> ObjectPool:
    """Create a pool with every key the board uses registered."""
    pool = ObjectPool()
    for key in (PoolKey.EMPTY_TILE, PoolKey.BOMB_TILE, PoolKey.DIAMOND_TILE):
        pool.preallocate(key, tile_count)
    for key in PoolKey.grass_keys():
        pool.preallocate(key, tile_count // 2)
    for key in (PoolKey.HINT_FX, PoolKey.EXPLODE_FX):
        pool.preallocate(key, effect_count)
    pool.preallocate(PoolKey.EXPLOSION, 4)
    return pool
