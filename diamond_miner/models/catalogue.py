"""Built-in level catalogue.

Levels are numbered from 1. Each entry is a fully declared ``LevelSpec`` whose
tile counts cover the whole board and whose diamond ranges can hold exactly
``num_diamonds``; the generator re-validates them on every level start.
"""

from typing import Dict, List, Any

from .level import LevelSpec, TileTypeSpec


DEFAULT_LEVELS: List[LevelSpec] = [
    LevelSpec(
        board_size=4,
        num_diamonds=10,
        num_digs=6,
        gold_score=8,
        silver_score=6,
        bronze_score=4,
        tile_types=(
            TileTypeSpec(count=8),
            TileTypeSpec(count=6, min_diamonds=1, max_diamonds=2),
            TileTypeSpec(count=2, is_bomb=True),
        ),
    ),
    LevelSpec(
        board_size=5,
        num_diamonds=16,
        num_digs=8,
        gold_score=12,
        silver_score=9,
        bronze_score=6,
        tile_types=(
            TileTypeSpec(count=12),
            TileTypeSpec(count=8, min_diamonds=1, max_diamonds=2),
            TileTypeSpec(count=2, min_diamonds=2, max_diamonds=3),
            TileTypeSpec(count=3, is_bomb=True),
        ),
    ),
    LevelSpec(
        board_size=6,
        num_diamonds=24,
        num_digs=10,
        gold_score=16,
        silver_score=12,
        bronze_score=8,
        tile_types=(
            TileTypeSpec(count=20),
            TileTypeSpec(count=8, min_diamonds=1, max_diamonds=2),
            TileTypeSpec(count=3, min_diamonds=2, max_diamonds=4),
            TileTypeSpec(count=5, is_bomb=True),
        ),
    ),
    LevelSpec(
        board_size=7,
        num_diamonds=30,
        num_digs=12,
        gold_score=20,
        silver_score=15,
        bronze_score=10,
        tile_types=(
            TileTypeSpec(count=30),
            TileTypeSpec(count=10, min_diamonds=1, max_diamonds=2),
            TileTypeSpec(count=3, min_diamonds=3, max_diamonds=5),
            TileTypeSpec(count=6, is_bomb=True),
        ),
    ),
    LevelSpec(
        board_size=8,
        num_diamonds=36,
        num_digs=12,
        gold_score=24,
        silver_score=18,
        bronze_score=12,
        tile_types=(
            TileTypeSpec(count=42),
            TileTypeSpec(count=12, min_diamonds=1, max_diamonds=3),
            TileTypeSpec(count=2, min_diamonds=4, max_diamonds=5),
            TileTypeSpec(count=8, is_bomb=True),
        ),
    ),
]


class LevelCatalogue:
    """Ordered, read-only collection of level specs addressed by number."""

    def __init__(self, levels: List[LevelSpec]):
        if not levels:
            raise ValueError("Level catalogue needs at least one level")
        self._levels = list(levels)

    def __len__(self) -> int:
        return len(self._levels)

    def __iter__(self):
        return iter(self._levels)

    def clamp(self, number: int) -> int:
        """Clamp a 1-based level number into the catalogue range."""
        return max(1, min(number, len(self._levels)))

    def get(self, number: int) -> LevelSpec:
        """Get a level by 1-based number (clamped into range)."""
        return self._levels[self.clamp(number) - 1]

    def next_number(self, number: int) -> int:
        """Level that follows ``number``, wrapping to 1 after the last."""
        return 1 if number >= len(self._levels) else number + 1

    def is_last(self, number: int) -> bool:
        return number >= len(self._levels)

    def to_list(self) -> List[Dict[str, Any]]:
        return [
            {"number": i + 1, **level.to_dict()}
            for i, level in enumerate(self._levels)
        ]


# Singleton instance
_catalogue = None


def get_catalogue() -> LevelCatalogue:
    """Get or create the default catalogue singleton instance."""
    global _catalogue
    if _catalogue is None:
        _catalogue = LevelCatalogue(DEFAULT_LEVELS)
    return _catalogue
