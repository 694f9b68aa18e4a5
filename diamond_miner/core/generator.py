"""Board generator engine with constraint validation."""
import logging
import random
import time
from dataclasses import dataclass
from typing import List, Optional

from ..models.level import (
    BOMB,
    Grid,
    GenerationResult,
    LevelSpec,
)
from ..utils.helpers import format_grid

logger = logging.getLogger(__name__)


class InvalidSpecError(ValueError):
    """Raised when a level spec cannot produce a valid board."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


@dataclass
class _Slot:
    """One expanded board cell before placement."""
    is_bomb: bool
    min_diamonds: int
    max_diamonds: int


class LevelGenerator:
    """Generates diamond/bomb boards from level specs.

    The generator keeps no state between calls: the same spec and the same
    seed always produce the same grid.
    """

    def generate(
        self,
        spec: LevelSpec,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> Grid:
        """
        Generate a board for a level.

        Args:
            spec: Level definition.
            rng: Random source. Created from ``seed`` when omitted.
            seed: Seed for a fresh random source, ignored if ``rng`` is given.

        Returns:
            Grid indexed ``grid[x][y]``: -1 bomb, 0 empty, k > 0 diamonds.

        Raises:
            InvalidSpecError: If the level spec is unsatisfiable.
        """
        # Validation must happen before anything is allocated
        self.validate(spec)

        if rng is None:
            rng = random.Random(seed)

        slots = self._expand(spec)
        self._shuffle(slots, rng)

        grid, placed = self._populate_to_minimum(spec.board_size, slots)
        self._place_surplus(grid, slots, spec.num_diamonds - placed, rng)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Generated board:\n%s", format_grid(grid))

        return grid

    def generate_result(self, spec: LevelSpec, seed: Optional[int] = None) -> GenerationResult:
        """Generate a board and wrap it with timing information."""
        start_time = time.time()
        grid = self.generate(spec, seed=seed)
        generation_time_ms = int((time.time() - start_time) * 1000)

        return GenerationResult(
            grid=grid,
            seed=seed,
            generation_time_ms=generation_time_ms,
        )

    def validate(self, spec: LevelSpec) -> None:
        """
        Check that a spec can be generated.

        Every problem found is logged, then all of them are raised together.

        Raises:
            InvalidSpecError: If any check fails.
        """
        problems: List[str] = []

        if spec.board_size < 1:
            problems.append(f"Board size must be positive, got {spec.board_size}")

        for i, tile_type in enumerate(spec.tile_types):
            if tile_type.count < 0:
                problems.append(f"Tile type {i} has a negative count ({tile_type.count})")
            if tile_type.min_diamonds < 0 or tile_type.max_diamonds < tile_type.min_diamonds:
                problems.append(
                    f"Tile type {i} has an invalid diamond range "
                    f"({tile_type.min_diamonds}..{tile_type.max_diamonds})"
                )

        num_tiles = spec.board_size * spec.board_size
        if spec.total_tiles > num_tiles:
            problems.append(
                f"Too many tiles specified for level ({spec.total_tiles} > {num_tiles})"
            )
        if spec.total_tiles < num_tiles:
            problems.append(
                f"Not enough tiles specified for level ({spec.total_tiles} < {num_tiles})"
            )
        if spec.min_diamonds > spec.num_diamonds:
            problems.append(
                f"Too many diamonds required to spawn in tiles "
                f"({spec.min_diamonds} > {spec.num_diamonds})"
            )
        if spec.max_diamonds < spec.num_diamonds:
            problems.append(
                f"Not enough diamonds will spawn in the level "
                f"({spec.max_diamonds} < {spec.num_diamonds})"
            )

        # Rank thresholds must be monotonic for Rank.from_score
        if not (spec.gold_score >= spec.silver_score >= spec.bronze_score):
            problems.append(
                f"Score thresholds must satisfy gold >= silver >= bronze "
                f"({spec.gold_score}/{spec.silver_score}/{spec.bronze_score})"
            )

        if problems:
            for problem in problems:
                logger.warning(problem)
            raise InvalidSpecError(problems)

    def _expand(self, spec: LevelSpec) -> List[_Slot]:
        """Make one slot per board cell from the declared tile types."""
        slots: List[_Slot] = []
        for tile_type in spec.tile_types:
            for _ in range(tile_type.count):
                if tile_type.is_bomb:
                    # Bomb overrides any diamond range
                    slots.append(_Slot(True, 0, 0))
                else:
                    slots.append(
                        _Slot(False, tile_type.min_diamonds, tile_type.max_diamonds)
                    )
        return slots

    @staticmethod
    def _shuffle(slots: List[_Slot], rng: random.Random) -> None:
        """Fisher-Yates shuffle in place."""
        for i in range(len(slots) - 1, 0, -1):
            j = rng.randint(0, i)
            slots[i], slots[j] = slots[j], slots[i]

    @staticmethod
    def _populate_to_minimum(size: int, slots: List[_Slot]):
        """Fill each cell with its minimum; returns (grid, diamonds placed)."""
        grid: Grid = [[0] * size for _ in range(size)]
        placed = 0
        index = 0
        for x in range(size):
            for y in range(size):
                slot = slots[index]
                if slot.is_bomb:
                    grid[x][y] = BOMB
                else:
                    grid[x][y] = slot.min_diamonds
                    placed += slot.min_diamonds
                index += 1
        return grid, placed

    @staticmethod
    def _place_surplus(
        grid: Grid, slots: List[_Slot], surplus: int, rng: random.Random
    ) -> None:
        """Add the remaining diamonds one at a time to random cells with headroom."""
        size = len(grid)
        # (x, y, remaining headroom) for every cell that can still take diamonds
        open_cells = []
        for index, slot in enumerate(slots):
            if not slot.is_bomb and slot.max_diamonds > slot.min_diamonds:
                x, y = divmod(index, size)
                open_cells.append([x, y, slot.max_diamonds - slot.min_diamonds])

        while surplus > 0:
            pick = rng.randrange(len(open_cells))
            cell = open_cells[pick]
            grid[cell[0]][cell[1]] += 1
            cell[2] -= 1
            surplus -= 1
            if cell[2] == 0:
                # Swap-remove keeps the draw uniform over remaining cells
                open_cells[pick] = open_cells[-1]
                open_cells.pop()


# Singleton instance
_generator = None


def get_generator() -> LevelGenerator:
    """Get or create generator singleton instance."""
    global _generator
    if _generator is None:
        _generator = LevelGenerator()
    return _generator
