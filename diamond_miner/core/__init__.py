"""Core business logic package.

This package contains the engines for board generation, object pooling,
scheduling, board simulation and game flow.
"""
from .generator import LevelGenerator, InvalidSpecError, get_generator
from .pool import ObjectPool, PoolKey, PooledHandle, UnknownPoolKeyError, create_board_pool
from .scheduler import Scheduler
from .board import Board, DigOutcome, Tile
from .session import GameSession, SessionRegistry, get_session_registry

__all__ = [
    "LevelGenerator",
    "InvalidSpecError",
    "get_generator",
    "ObjectPool",
    "PoolKey",
    "PooledHandle",
    "UnknownPoolKeyError",
    "create_board_pool",
    "Scheduler",
    "Board",
    "DigOutcome",
    "Tile",
    "GameSession",
    "SessionRegistry",
    "get_session_registry",
]
