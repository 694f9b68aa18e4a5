"""Level data models and structures."""
from dataclasses import dataclass, field
from typing import Dict, List, Any, Tuple
from enum import Enum


# Tile values stored in a generated grid
BOMB = -1
EMPTY = 0

Grid = List[List[int]]


class Rank(str, Enum):
    """Score rank enumeration, best first."""
    GOLD = "gold"
    SILVER = "silver"
    BRONZE = "bronze"
    UNRANKED = "unranked"

    @classmethod
    def from_score(cls, score: int, level: "LevelSpec") -> "Rank":
        """Get rank from score using the level's thresholds."""
        if score >= level.gold_score:
            return cls.GOLD
        elif score >= level.silver_score:
            return cls.SILVER
        elif score >= level.bronze_score:
            return cls.BRONZE
        else:
            return cls.UNRANKED

    @classmethod
    def next_rank_score(cls, score: int, level: "LevelSpec") -> int:
        """Score needed for the next rank, or -1 once Gold is reached."""
        rank = cls.from_score(score, level)
        if rank == cls.UNRANKED:
            return level.bronze_score
        elif rank == cls.BRONZE:
            return level.silver_score
        elif rank == cls.SILVER:
            return level.gold_score
        return -1

    @property
    def order(self) -> int:
        """Position in the ranking, 0 is best."""
        return list(Rank).index(self)


@dataclass(frozen=True)
class TileTypeSpec:
    """A category of board cell: how many, bomb or not, diamond range."""
    count: int
    is_bomb: bool = False
    min_diamonds: int = 0
    max_diamonds: int = 0

    @property
    def diamond_spread(self) -> int:
        return self.max_diamonds - self.min_diamonds

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "count": self.count,
            "is_bomb": self.is_bomb,
            "min_diamonds": self.min_diamonds,
            "max_diamonds": self.max_diamonds,
        }


@dataclass(frozen=True)
class LevelSpec:
    """Declarative definition of one level.

    The board is ``board_size`` x ``board_size`` cells. ``tile_types`` must
    account for every cell, and the non-bomb diamond ranges must be able to
    hold exactly ``num_diamonds``.
    """
    board_size: int
    num_diamonds: int
    num_digs: int
    gold_score: int
    silver_score: int
    bronze_score: int
    tile_types: Tuple[TileTypeSpec, ...] = field(default_factory=tuple)

    def __post_init__(self):
        # Accept any sequence but keep the level spec hashable and immutable
        if not isinstance(self.tile_types, tuple):
            object.__setattr__(self, "tile_types", tuple(self.tile_types))

    @property
    def total_tiles(self) -> int:
        return sum(t.count for t in self.tile_types)

    @property
    def bomb_count(self) -> int:
        return sum(t.count for t in self.tile_types if t.is_bomb)

    @property
    def min_diamonds(self) -> int:
        """Diamonds placed when every non-bomb tile holds its minimum."""
        return sum(t.min_diamonds * t.count for t in self.tile_types if not t.is_bomb)

    @property
    def max_diamonds(self) -> int:
        """Diamonds placed when every non-bomb tile holds its maximum."""
        return sum(t.max_diamonds * t.count for t in self.tile_types if not t.is_bomb)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "board_size": self.board_size,
            "num_diamonds": self.num_diamonds,
            "num_digs": self.num_digs,
            "gold_score": self.gold_score,
            "silver_score": self.silver_score,
            "bronze_score": self.bronze_score,
            "tile_types": [t.to_dict() for t in self.tile_types],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LevelSpec":
        """Build a spec from the dictionary produced by ``to_dict``."""
        return cls(
            board_size=data["board_size"],
            num_diamonds=data["num_diamonds"],
            num_digs=data["num_digs"],
            gold_score=data["gold_score"],
            silver_score=data["silver_score"],
            bronze_score=data["bronze_score"],
            tile_types=tuple(
                TileTypeSpec(
                    count=t["count"],
                    is_bomb=t.get("is_bomb", False),
                    min_diamonds=t.get("min_diamonds", 0),
                    max_diamonds=t.get("max_diamonds", 0),
                )
                for t in data.get("tile_types", [])
            ),
        )


@dataclass
class GenerationResult:
    """Result of board generation."""
    grid: Grid
    seed: Any = None
    generation_time_ms: int = 0

    @property
    def bomb_count(self) -> int:
        return sum(1 for column in self.grid for value in column if value == BOMB)

    @property
    def diamond_count(self) -> int:
        return sum(value for column in self.grid for value in column if value > 0)

    @property
    def empty_count(self) -> int:
        return sum(1 for column in self.grid for value in column if value == EMPTY)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "grid": self.grid,
            "seed": self.seed,
            "bomb_count": self.bomb_count,
            "diamond_count": self.diamond_count,
            "empty_count": self.empty_count,
            "generation_time_ms": self.generation_time_ms,
        }
