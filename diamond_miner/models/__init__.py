"""Data models package.

This package contains level definitions, events and API schemas.
"""
from .level import (
    BOMB,
    EMPTY,
    Grid,
    Rank,
    TileTypeSpec,
    LevelSpec,
    GenerationResult,
)
from .events import (
    TilePhase,
    GameState,
    BoardEvent,
    TileStateChanged,
    HintScheduled,
    EffectBurst,
    DiamondsRemoved,
    BombExploded,
    SessionSnapshot,
)
from .catalogue import LevelCatalogue, DEFAULT_LEVELS, get_catalogue

__all__ = [
    # Level models
    "BOMB",
    "EMPTY",
    "Grid",
    "Rank",
    "TileTypeSpec",
    "LevelSpec",
    "GenerationResult",
    # Events
    "TilePhase",
    "GameState",
    "BoardEvent",
    "TileStateChanged",
    "HintScheduled",
    "EffectBurst",
    "DiamondsRemoved",
    "BombExploded",
    "SessionSnapshot",
    # Catalogue
    "LevelCatalogue",
    "DEFAULT_LEVELS",
    "get_catalogue",
]
