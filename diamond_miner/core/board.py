"""Board simulation: tile lifecycle, explosions and bomb chain reactions."""
import itertools
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..models.level import BOMB, EMPTY, Grid, LevelSpec
from ..models.events import (
    BoardEvent,
    BombExploded,
    DiamondsRemoved,
    EffectBurst,
    HintScheduled,
    TilePhase,
    TileStateChanged,
)
from .generator import LevelGenerator, get_generator
from .pool import ObjectPool, PooledHandle, PoolKey
from .scheduler import Scheduler
from ..utils.helpers import validate_grid

logger = logging.getLogger(__name__)

BoardListener = Callable[[BoardEvent], Any]

# Orthogonal neighbours revealed by a bomb
NEIGHBOUR_OFFSETS = ((-1, 0), (1, 0), (0, -1), (0, 1))

_board_ids = itertools.count(1)


class DigOutcome(str, Enum):
    """Result of a dig request."""
    ACCEPTED = "accepted"
    ALREADY_TRIGGERED = "already_triggered"
    OUT_OF_BOUNDS = "out_of_bounds"
    NO_BOARD = "no_board"
    NOT_IN_GAME = "not_in_game"
    NO_DIGS_LEFT = "no_digs_left"


@dataclass(eq=False)
class Tile:
    """Runtime state of one board cell and the pooled handles it holds."""
    x: int
    y: int
    value: int
    phase: TilePhase = TilePhase.CLICKABLE
    body: Optional[PooledHandle] = None
    cover: Optional[PooledHandle] = None
    hint_fx: Optional[PooledHandle] = None
    explode_fx: Optional[PooledHandle] = None

    @property
    def clickable(self) -> bool:
        return self.phase == TilePhase.CLICKABLE

    @property
    def is_bomb(self) -> bool:
        return self.value == BOMB

    @property
    def holds_handles(self) -> bool:
        return any(h is not None for h in (self.body, self.cover, self.hint_fx, self.explode_fx))

    def to_dict(self, reveal: bool = False) -> Dict[str, Any]:
        shown = reveal or not self.clickable
        return {
            "x": self.x,
            "y": self.y,
            "phase": self.phase.value,
            "value": self.value if shown else None,
        }


def tile_key_for_value(value: int) -> PoolKey:
    """Pool key of the tile body that represents ``value``."""
    if value == BOMB:
        return PoolKey.BOMB_TILE
    if value == EMPTY:
        return PoolKey.EMPTY_TILE
    return PoolKey.DIAMOND_TILE


class Board:
    """Owns one level's tiles and drives their state transitions.

    Tiles go CLICKABLE -> EXPLODING -> RECYCLED. Delayed work (explosions,
    hint sweeps, effect lifetimes) is queued on the shared scheduler under a
    group unique to the current board, so tearing the board down cancels
    anything still pending for it.
    """

    def __init__(
        self,
        pool: ObjectPool,
        scheduler: Scheduler,
        rng: Optional[random.Random] = None,
        explode_delay: float = 0.25,
        hint_step: float = 0.05,
        explosion_lifetime: float = 1.0,
    ):
        self.pool = pool
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.explode_delay = explode_delay
        self.hint_step = hint_step
        self.explosion_lifetime = explosion_lifetime

        self._tiles: List[List[Tile]] = []
        self._group: Optional[Tuple[str, int]] = None
        self._listeners: List[BoardListener] = []
        self._effects: List[PooledHandle] = []
        self._pending_explosions = 0

    # ----- listeners -----

    def subscribe(self, listener: BoardListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: BoardListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: BoardEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # ----- accessors -----

    @property
    def size(self) -> int:
        return len(self._tiles)

    @property
    def pending_explosions(self) -> int:
        return self._pending_explosions

    @property
    def grid(self) -> Grid:
        return [[tile.value for tile in column] for column in self._tiles]

    @property
    def diamonds_on_board(self) -> int:
        """Diamonds in tiles that have not exploded yet."""
        return sum(
            tile.value for tile in self.tiles()
            if tile.clickable and tile.value > 0
        )

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def tile(self, x: int, y: int) -> Tile:
        return self._tiles[x][y]

    def tiles(self) -> List[Tile]:
        return [tile for column in self._tiles for tile in column]

    def to_view(self, reveal: bool = False) -> List[List[Dict[str, Any]]]:
        return [[tile.to_dict(reveal) for tile in column] for column in self._tiles]

    # ----- lifecycle -----

    def build(
        self,
        spec: LevelSpec,
        generator: Optional[LevelGenerator] = None,
        seed: Optional[int] = None,
    ) -> Grid:
        """
        Generate a board for ``spec`` and materialize it.

        Raises:
            InvalidSpecError: If the level spec cannot be generated. The current
                board is left untouched in that case.
        """
        generator = generator or get_generator()
        rng = random.Random(seed) if seed is not None else self.rng
        grid = generator.generate(spec, rng=rng)
        self.materialize(grid)
        return grid

    def materialize(self, grid: Grid) -> None:
        """Create a tile with pooled handles for every grid cell.

        Raises:
            ValueError: If the grid is not square or holds invalid values.
        """
        is_valid, error = validate_grid(grid)
        if not is_valid:
            raise ValueError(error)

        if self._tiles:
            self.recycle_all()

        self._group = ("board", next(_board_ids))
        self._pending_explosions = 0
        self._tiles = []

        for x, column in enumerate(grid):
            tiles: List[Tile] = []
            for y, value in enumerate(column):
                tile = Tile(
                    x=x,
                    y=y,
                    value=value,
                    body=self.pool.try_acquire(tile_key_for_value(value)),
                    cover=self.pool.try_acquire(self.rng.choice(PoolKey.grass_keys())),
                    hint_fx=self.pool.try_acquire(PoolKey.HINT_FX),
                    explode_fx=self.pool.try_acquire(PoolKey.EXPLODE_FX),
                )
                tiles.append(tile)
            self._tiles.append(tiles)

        for tile in self.tiles():
            self._emit(TileStateChanged(tile.x, tile.y, tile.phase, tile.value))

        logger.debug("Materialized %dx%d board %s", self.size, self.size, self._group)

    def recycle_all(self) -> None:
        """Return every handle to the pool and cancel pending board work.

        Safe to call repeatedly and on tiles that were already recycled.
        """
        if self._group is not None:
            self.scheduler.cancel_group(self._group)

        for tile in self.tiles():
            self._release_tile(tile)
            tile.phase = TilePhase.RECYCLED

        for effect in self._effects:
            self.pool.release(effect)
        self._effects = []
        self._pending_explosions = 0

    # ----- player actions -----

    def dig(self, x: int, y: int) -> DigOutcome:
        """
        Start digging a tile: it explodes after ``explode_delay``.

        Returns:
            ACCEPTED if the explosion was scheduled. A tile that is already
            exploding or recycled gives ALREADY_TRIGGERED and nothing changes.
        """
        if not self._tiles:
            return DigOutcome.NO_BOARD
        if not self.in_bounds(x, y):
            return DigOutcome.OUT_OF_BOUNDS

        tile = self._tiles[x][y]
        if not tile.clickable:
            return DigOutcome.ALREADY_TRIGGERED

        self._set_phase(tile, TilePhase.EXPLODING)
        self._pending_explosions += 1
        self.scheduler.schedule(
            self.explode_delay,
            lambda: self.explode(x, y),
            group=self._group,
            channel=(self._group, x, y),
        )
        return DigOutcome.ACCEPTED

    def explode(self, x: int, y: int) -> None:
        """Detonate a tile that was dug."""
        tile = self._tiles[x][y]
        if tile.phase != TilePhase.EXPLODING:
            return
        self._pending_explosions -= 1

        # Remove grass covering
        self.pool.release(tile.cover)
        tile.cover = None

        self._emit(EffectBurst(x, y, "explode", tile.value * tile.value))

        if tile.is_bomb:
            self._spawn_explosion(tile)
            self._emit(BombExploded(x, y))
            # Neighbours are revealed, not dug
            for dx, dy in NEIGHBOUR_OFFSETS:
                nx, ny = x + dx, y + dy
                if self.in_bounds(nx, ny):
                    self.play_hint(nx, ny)
        elif tile.value > 0:
            self._emit(DiamondsRemoved(x, y, tile.value))

        self._release_tile(tile)
        self._set_phase(tile, TilePhase.RECYCLED)

    def play_hint(self, x: int, y: int) -> None:
        """Play the hint animation on one tile, sized by its diamonds."""
        tile = self._tiles[x][y]
        if tile.clickable:
            magnitude = tile.value * tile.value * 3 if tile.value > 0 else 0
            self._emit(EffectBurst(x, y, "hint", magnitude))

    def hint(self) -> List[HintScheduled]:
        """Sweep the hint animation diagonally across clickable tiles."""
        schedule: List[HintScheduled] = []
        for tile in self.tiles():
            if not tile.clickable:
                continue
            delay = self.hint_step * (tile.x + tile.y)
            x, y = tile.x, tile.y
            self.scheduler.schedule(
                delay,
                lambda x=x, y=y: self.play_hint(x, y),
                group=self._group,
                channel=(self._group, x, y),
            )
            entry = HintScheduled(x, y, delay)
            schedule.append(entry)
            self._emit(entry)
        return schedule

    # ----- internals -----

    def _set_phase(self, tile: Tile, phase: TilePhase) -> None:
        tile.phase = phase
        self._emit(TileStateChanged(tile.x, tile.y, phase, tile.value))

    def _release_tile(self, tile: Tile) -> None:
        for attr in ("cover", "hint_fx", "explode_fx", "body"):
            handle = getattr(tile, attr)
            if handle is not None:
                self.pool.release(handle)
                setattr(tile, attr, None)

    def _spawn_explosion(self, tile: Tile) -> None:
        """Overhead explosion that returns itself to the pool when done."""
        self._emit(EffectBurst(tile.x, tile.y, "board_clear", self.size * self.size))
        explosion = self.pool.try_acquire(PoolKey.EXPLOSION)
        if explosion is None:
            return
        self._effects.append(explosion)

        def finish():
            if explosion in self._effects:
                self._effects.remove(explosion)
                self.pool.release(explosion)

        self.scheduler.schedule(self.explosion_lifetime, finish, group=self._group)
