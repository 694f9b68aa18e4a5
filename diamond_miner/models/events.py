"""Events published by the board and the game session."""
from dataclasses import dataclass, asdict
from typing import Dict, Any
from enum import Enum

from .level import Rank


class TilePhase(str, Enum):
    """Lifecycle of a board tile."""
    CLICKABLE = "clickable"
    EXPLODING = "exploding"
    RECYCLED = "recycled"


class GameState(str, Enum):
    """Game flow state."""
    IN_GAME = "in_game"
    LEVEL_FAILED = "level_failed"
    LEVEL_COMPLETED = "level_completed"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class BoardEvent:
    """Base class for everything a board publishes."""
    x: int
    y: int

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Enum):
                data[key] = value.value
        data["event"] = self.kind
        return data


@dataclass(frozen=True)
class TileStateChanged(BoardEvent):
    phase: TilePhase
    value: int


@dataclass(frozen=True)
class HintScheduled(BoardEvent):
    delay: float


@dataclass(frozen=True)
class EffectBurst(BoardEvent):
    """Effect to play at a tile.

    ``effect`` is ``"hint"``, ``"explode"`` or ``"board_clear"``; ``magnitude``
    sizes the particle burst.
    """
    effect: str
    magnitude: int


@dataclass(frozen=True)
class DiamondsRemoved(BoardEvent):
    diamonds: int


@dataclass(frozen=True)
class BombExploded(BoardEvent):
    pass


@dataclass(frozen=True)
class SessionSnapshot:
    """HUD state pushed to the UI after every session mutation."""
    level: int
    score: int
    digs_remaining: int
    rank: Rank
    hints_remaining: int
    next_rank_score: int
    diamonds_remaining: int
    state: GameState

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "level": self.level,
            "score": self.score,
            "digs_remaining": self.digs_remaining,
            "rank": self.rank.value,
            "hints_remaining": self.hints_remaining,
            "next_rank_score": self.next_rank_score,
            "diamonds_remaining": self.diamonds_remaining,
            "state": self.state.value,
        }
