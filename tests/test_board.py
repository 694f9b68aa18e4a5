"""Tests for board simulation."""
import logging
import random

import pytest
from diamond_miner.core.board import Board, DigOutcome
from diamond_miner.core.generator import LevelGenerator
from diamond_miner.core.pool import ObjectPool, PoolKey, create_board_pool
from diamond_miner.core.scheduler import Scheduler
from diamond_miner.models.events import (
    BombExploded,
    DiamondsRemoved,
    EffectBurst,
    HintScheduled,
    TilePhase,
    TileStateChanged,
)
from diamond_miner.models.level import LevelSpec, TileTypeSpec


# grid[x][y]; bomb at (1, 0)
SAMPLE_GRID = [
    [0, 2, 0],
    [-1, 2, 1],
    [0, 3, 0],
]


@pytest.fixture
def pool():
    """Create a small board pool."""
    return create_board_pool(tile_count=4, effect_count=4)


@pytest.fixture
def scheduler():
    """Create a scheduler at time zero."""
    return Scheduler()


@pytest.fixture
def events():
    """Collect emitted board events."""
    return []


@pytest.fixture
def board(pool, scheduler, events):
    """Create a board showing the sample grid."""
    board = Board(
        pool,
        scheduler,
        rng=random.Random(1),
        explode_delay=0.25,
        hint_step=0.05,
        explosion_lifetime=1.0,
    )
    board.subscribe(events.append)
    board.materialize(SAMPLE_GRID)
    events.clear()
    return board


def of_type(events, event_type):
    return [e for e in events if isinstance(e, event_type)]


class TestMaterialize:
    """Turning a grid into tiles."""

    def test_all_tiles_clickable(self, board):
        """Test that a fresh board has only clickable tiles."""
        assert board.size == 3
        assert all(tile.phase == TilePhase.CLICKABLE for tile in board.tiles())
        assert board.grid == SAMPLE_GRID

    def test_tiles_hold_four_handles(self, board, pool):
        """Test that each tile borrows body, cover and effect handles."""
        assert all(tile.holds_handles for tile in board.tiles())
        assert pool.active_count() == 9 * 4

    def test_body_key_follows_value(self, board):
        """Test that tile bodies come from the pool matching their value."""
        assert board.tile(1, 0).body.key == PoolKey.BOMB_TILE
        assert board.tile(0, 0).body.key == PoolKey.EMPTY_TILE
        assert board.tile(2, 1).body.key == PoolKey.DIAMOND_TILE
        assert board.tile(0, 0).cover.key in PoolKey.grass_keys()

    def test_emits_state_for_every_tile(self, pool, scheduler):
        """Test that materializing announces every tile."""
        seen = []
        board = Board(pool, scheduler)
        board.subscribe(seen.append)
        board.materialize(SAMPLE_GRID)

        changes = of_type(seen, TileStateChanged)
        assert len(changes) == 9
        assert {(e.x, e.y) for e in changes} == {(x, y) for x in range(3) for y in range(3)}

    def test_rejects_non_square_grid(self, board):
        """Test that a non-square grid is rejected."""
        with pytest.raises(ValueError):
            board.materialize([[0, 0], [0]])

    def test_diamonds_on_board(self, board):
        """Test counting diamonds still on the board."""
        assert board.diamonds_on_board == 8

    def test_missing_pool_keys_are_not_fatal(self, scheduler, caplog):
        """Test that a board still plays when the pool lacks its keys."""
        board = Board(ObjectPool(), scheduler, explode_delay=0.1)
        with caplog.at_level(logging.WARNING, logger="diamond_miner.core.pool"):
            board.materialize([[1]])

        assert "No pool registered" in caplog.text
        assert board.tile(0, 0).body is None
        assert board.dig(0, 0) == DigOutcome.ACCEPTED
        scheduler.tick(0.2)
        assert board.tile(0, 0).phase == TilePhase.RECYCLED

    def test_build_is_reproducible(self, board):
        """Test that building with the same seed gives the same board."""
        spec = LevelSpec(
            board_size=3,
            num_diamonds=5,
            num_digs=3,
            gold_score=4,
            silver_score=3,
            bronze_score=2,
            tile_types=(
                TileTypeSpec(count=4),
                TileTypeSpec(count=4, min_diamonds=1, max_diamonds=2),
                TileTypeSpec(count=1, is_bomb=True),
            ),
        )
        grid = board.build(spec, seed=3)

        assert grid == LevelGenerator().generate(spec, seed=3)
        assert board.grid == grid


class TestDig:
    """Digging and explosions."""

    def test_dig_marks_tile_exploding(self, board, events):
        """Test that digging moves a tile to exploding."""
        assert board.dig(0, 1) == DigOutcome.ACCEPTED

        assert board.tile(0, 1).phase == TilePhase.EXPLODING
        assert board.pending_explosions == 1
        assert of_type(events, TileStateChanged)[-1].phase == TilePhase.EXPLODING

    def test_second_dig_is_already_triggered(self, board, scheduler):
        """Test that a tile can only be dug once."""
        board.dig(0, 1)
        assert board.dig(0, 1) == DigOutcome.ALREADY_TRIGGERED

        scheduler.tick(1.0)
        assert board.dig(0, 1) == DigOutcome.ALREADY_TRIGGERED

    def test_out_of_bounds(self, board):
        """Test digging outside the board."""
        assert board.dig(3, 0) == DigOutcome.OUT_OF_BOUNDS
        assert board.dig(-1, 0) == DigOutcome.OUT_OF_BOUNDS

    def test_no_board(self, pool, scheduler):
        """Test digging before any board exists."""
        assert Board(pool, scheduler).dig(0, 0) == DigOutcome.NO_BOARD

    def test_explodes_after_delay(self, board, scheduler, events):
        """Test that the explosion waits for the explode delay."""
        board.dig(0, 1)

        scheduler.tick(0.1)
        assert board.tile(0, 1).phase == TilePhase.EXPLODING

        scheduler.tick(0.2)
        assert board.tile(0, 1).phase == TilePhase.RECYCLED
        assert board.pending_explosions == 0

    def test_diamond_tile_reports_diamonds(self, board, scheduler, events):
        """Test that a diamond tile reports its diamonds when it explodes."""
        board.dig(2, 1)
        scheduler.tick(0.3)

        removed = of_type(events, DiamondsRemoved)
        assert len(removed) == 1
        assert (removed[0].x, removed[0].y, removed[0].diamonds) == (2, 1, 3)

        bursts = of_type(events, EffectBurst)
        assert bursts[0].effect == "explode"
        assert bursts[0].magnitude == 9

    def test_explosion_returns_handles(self, board, scheduler, pool):
        """Test that an exploded tile gives its handles back."""
        board.dig(2, 1)
        scheduler.tick(0.3)

        assert not board.tile(2, 1).holds_handles
        assert pool.active_count() == 8 * 4

    def test_empty_tile_explodes_quietly(self, board, scheduler, events):
        """Test that an empty tile removes no diamonds."""
        board.dig(0, 0)
        scheduler.tick(0.3)

        assert board.tile(0, 0).phase == TilePhase.RECYCLED
        assert of_type(events, DiamondsRemoved) == []
        assert of_type(events, BombExploded) == []


class TestBomb:
    """Bomb chain reaction."""

    def test_bomb_reveals_neighbours(self, board, scheduler, events):
        """Test that a bomb plays hints on its neighbours."""
        board.dig(1, 0)
        scheduler.tick(0.3)

        assert len(of_type(events, BombExploded)) == 1
        hints = {(e.x, e.y): e.magnitude for e in of_type(events, EffectBurst) if e.effect == "hint"}
        assert hints == {(0, 0): 0, (2, 0): 0, (1, 1): 12}

    def test_bomb_does_not_dig_neighbours(self, board, scheduler, events):
        """Test that bomb neighbours stay clickable."""
        board.dig(1, 0)
        scheduler.tick(5.0)

        for x, y in ((0, 0), (2, 0), (1, 1)):
            assert board.tile(x, y).phase == TilePhase.CLICKABLE
        assert of_type(events, DiamondsRemoved) == []

    def test_bomb_board_clear_burst(self, board, scheduler, events):
        """Test that a bomb emits the board clear effect."""
        board.dig(1, 0)
        scheduler.tick(0.3)

        clears = [e for e in of_type(events, EffectBurst) if e.effect == "board_clear"]
        assert len(clears) == 1
        assert clears[0].magnitude == 9

    def test_explosion_effect_recycles_itself(self, board, scheduler, pool):
        """Test that the bomb explosion returns to the pool after its lifetime."""
        board.dig(1, 0)
        scheduler.tick(0.3)
        assert pool.stats(PoolKey.EXPLOSION).active == 1

        scheduler.tick(1.5)
        assert pool.stats(PoolKey.EXPLOSION).active == 0

    def test_hint_skips_exploded_neighbour(self, board, scheduler, events):
        """Test that a bomb does not hint neighbours that already exploded."""
        board.dig(1, 1)
        board.dig(1, 0)
        scheduler.tick(0.3)

        hinted = {(e.x, e.y) for e in of_type(events, EffectBurst) if e.effect == "hint"}
        assert (1, 1) not in hinted


class TestHint:
    """Diagonal hint sweep."""

    def test_schedules_every_clickable_tile(self, board, events):
        """Test that the hint sweep covers every clickable tile diagonally."""
        schedule = board.hint()

        assert len(schedule) == 9
        delays = {(e.x, e.y): e.delay for e in schedule}
        assert delays[(0, 0)] == 0.0
        assert delays[(2, 2)] == pytest.approx(0.2)
        assert delays[(1, 2)] == pytest.approx(0.15)
        assert len(of_type(events, HintScheduled)) == 9

    def test_skips_dug_tiles(self, board):
        """Test that dug tiles are left out of the sweep."""
        board.dig(0, 0)
        schedule = board.hint()
        assert (0, 0) not in {(e.x, e.y) for e in schedule}
        assert len(schedule) == 8

    def test_does_not_change_state(self, board, scheduler):
        """Test that hints never change tile phases."""
        board.hint()
        scheduler.tick(1.0)
        assert all(tile.phase == TilePhase.CLICKABLE for tile in board.tiles())

    def test_tile_dug_before_its_hint_plays_no_hint(self, board, scheduler, events):
        """Test that a tile dug mid-sweep plays no hint."""
        board.hint()
        board.dig(2, 2)
        scheduler.tick(0.5)

        hinted = [(e.x, e.y) for e in of_type(events, EffectBurst) if e.effect == "hint"]
        assert len(hinted) == 8
        assert (2, 2) not in hinted

    def test_hint_magnitude_follows_diamonds(self, board, scheduler, events):
        """Test that hint bursts scale with diamond count."""
        board.hint()
        scheduler.tick(1.0)

        magnitudes = {(e.x, e.y): e.magnitude for e in of_type(events, EffectBurst)}
        assert magnitudes[(2, 1)] == 27
        assert magnitudes[(1, 2)] == 3
        assert magnitudes[(1, 0)] == 0


class TestRecycle:
    """Teardown."""

    def test_recycle_all_returns_every_handle(self, board, pool, scheduler):
        """Test that recycling returns every handle to the pool."""
        board.dig(0, 1)
        board.hint()
        board.recycle_all()

        assert pool.active_count() == 0
        assert scheduler.pending() == 0
        assert all(tile.phase == TilePhase.RECYCLED for tile in board.tiles())

    def test_recycle_all_twice(self, board, pool):
        """Test that recycling twice is harmless."""
        board.dig(0, 1)
        board.recycle_all()
        board.recycle_all()
        assert pool.active_count() == 0

    def test_recycle_after_explosions(self, board, pool, scheduler):
        """Test recycling a board with exploded tiles."""
        board.dig(1, 0)
        scheduler.tick(0.3)
        board.recycle_all()
        assert pool.active_count() == 0

    def test_pending_dig_cancelled_by_new_board(self, board, scheduler, events):
        """Test that a new board cancels explosions pending on the old one."""
        board.dig(0, 1)
        board.materialize(SAMPLE_GRID)
        scheduler.tick(1.0)

        assert board.tile(0, 1).phase == TilePhase.CLICKABLE
        assert of_type(events, DiamondsRemoved) == []

    def test_new_board_reuses_pool(self, board, pool):
        """Test that a rebuilt board reuses pooled handles."""
        board.materialize(SAMPLE_GRID)
        assert pool.active_count() == 9 * 4
