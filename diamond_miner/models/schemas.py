"""Pydantic schemas for API request/response validation."""
from pydantic import BaseModel, Field
from typing import Dict, List, Any, Optional

from .level import LevelSpec, TileTypeSpec


class TileTypeConfig(BaseModel):
    """Tile type definition for a level."""
    count: int = Field(..., ge=0, description="Number of tiles of this type")
    is_bomb: bool = Field(default=False, description="Whether these tiles are bombs")
    min_diamonds: int = Field(default=0, ge=0, le=5, description="Minimum diamonds per tile")
    max_diamonds: int = Field(default=0, ge=0, le=5, description="Maximum diamonds per tile")


class LevelSpecConfig(BaseModel):
    """Level definition submitted for generation."""
    board_size: int = Field(..., ge=1, le=32, description="Board side length")
    num_diamonds: int = Field(..., ge=0, description="Total diamonds on the board")
    num_digs: int = Field(default=10, ge=1, description="Dig budget")
    gold_score: int = Field(default=0, ge=0, description="Score needed for gold")
    silver_score: int = Field(default=0, ge=0, description="Score needed for silver")
    bronze_score: int = Field(default=0, ge=0, description="Score needed for bronze")
    tile_types: List[TileTypeConfig] = Field(..., description="Tile type definitions")

    def to_level_spec(self) -> LevelSpec:
        return LevelSpec(
            board_size=self.board_size,
            num_diamonds=self.num_diamonds,
            num_digs=self.num_digs,
            gold_score=self.gold_score,
            silver_score=self.silver_score,
            bronze_score=self.bronze_score,
            tile_types=tuple(
                TileTypeSpec(
                    count=t.count,
                    is_bomb=t.is_bomb,
                    min_diamonds=t.min_diamonds,
                    max_diamonds=t.max_diamonds,
                )
                for t in self.tile_types
            ),
        )


class GenerateRequest(BaseModel):
    """Request schema for board generation."""
    level: LevelSpecConfig = Field(..., description="Level definition")
    seed: Optional[int] = Field(default=None, description="Seed for reproducible boards")


class GenerateResponse(BaseModel):
    """Response schema for board generation."""
    grid: List[List[int]] = Field(..., description="Board indexed [x][y]: -1 bomb, 0 empty, k diamonds")
    seed: Optional[int] = Field(default=None, description="Seed used")
    bomb_count: int = Field(..., description="Number of bombs")
    diamond_count: int = Field(..., description="Number of diamonds")
    empty_count: int = Field(..., description="Number of empty tiles")
    generation_time_ms: int = Field(default=0, description="Generation time in milliseconds")


class LevelListResponse(BaseModel):
    """Response schema for the level catalogue."""
    levels: List[Dict[str, Any]] = Field(default=[], description="Catalogue levels")


class SnapshotModel(BaseModel):
    """Session HUD state."""
    level: int
    score: int
    digs_remaining: int
    rank: str
    hints_remaining: int
    next_rank_score: int
    diamonds_remaining: int
    state: str


class StartLevelRequest(BaseModel):
    """Request schema for starting a level."""
    level: int = Field(default=1, ge=1, description="1-based level number")
    seed: Optional[int] = Field(default=None, description="Seed for reproducible boards")


class SeedRequest(BaseModel):
    """Optional seed for retry/next level."""
    seed: Optional[int] = Field(default=None, description="Seed for reproducible boards")


class DigRequest(BaseModel):
    """Request schema for digging a tile."""
    x: int = Field(..., ge=0, description="Tile column")
    y: int = Field(..., ge=0, description="Tile row")


class TickRequest(BaseModel):
    """Request schema for advancing simulation time."""
    elapsed: float = Field(..., gt=0, le=60, description="Seconds to advance")


class SessionResponse(BaseModel):
    """Session state plus board events since the last call."""
    session_id: str = Field(..., description="Session identifier")
    snapshot: SnapshotModel
    accepted: bool = Field(default=True, description="Whether the command was applied")
    outcome: Optional[str] = Field(default=None, description="Dig outcome, for dig commands")
    events: List[Dict[str, Any]] = Field(default=[], description="Board events")
    board: Optional[List[List[Dict[str, Any]]]] = Field(default=None, description="Board view [x][y]")


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Detailed error information")
