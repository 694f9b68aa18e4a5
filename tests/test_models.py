"""Tests for level models, ranks and the level catalogue."""
import pytest
from diamond_miner.models.catalogue import DEFAULT_LEVELS, LevelCatalogue, get_catalogue
from diamond_miner.models.events import EffectBurst, GameState, SessionSnapshot, TilePhase, TileStateChanged
from diamond_miner.models.level import LevelSpec, Rank, TileTypeSpec


@pytest.fixture
def level():
    """Sample level for rank tests."""
    return LevelSpec(
        board_size=3,
        num_diamonds=6,
        num_digs=4,
        gold_score=6,
        silver_score=4,
        bronze_score=2,
        tile_types=[
            TileTypeSpec(count=5),
            TileTypeSpec(count=3, min_diamonds=1, max_diamonds=3),
            TileTypeSpec(count=1, is_bomb=True),
        ],
    )


class TestRank:
    """Rank derivation from score."""

    @pytest.mark.parametrize("score,expected", [
        (0, Rank.UNRANKED),
        (1, Rank.UNRANKED),
        (2, Rank.BRONZE),
        (3, Rank.BRONZE),
        (4, Rank.SILVER),
        (6, Rank.GOLD),
        (100, Rank.GOLD),
    ])
    def test_from_score(self, level, score, expected):
        """Test rank thresholds."""
        assert Rank.from_score(score, level) == expected

    def test_monotonic(self, level):
        """Test that a higher score never ranks lower."""
        ranks = [Rank.from_score(score, level) for score in range(10)]
        for worse, better in zip(ranks, ranks[1:]):
            assert better.order <= worse.order

    @pytest.mark.parametrize("score,expected", [
        (0, 2),
        (2, 4),
        (5, 6),
        (6, -1),
    ])
    def test_next_rank_score(self, level, score, expected):
        """Test the score needed for the next rank."""
        assert Rank.next_rank_score(score, level) == expected


class TestLevelSpec:
    """Level spec helpers."""

    def test_tile_types_become_tuple(self, level):
        """Test that tile types are stored as a tuple."""
        assert isinstance(level.tile_types, tuple)
        hash(level)

    def test_totals(self, level):
        """Test derived tile and diamond totals."""
        assert level.total_tiles == 9
        assert level.bomb_count == 1
        assert level.min_diamonds == 3
        assert level.max_diamonds == 9

    def test_dict_round_trip(self, level):
        """Test that a level survives to_dict/from_dict."""
        assert LevelSpec.from_dict(level.to_dict()) == level

    def test_diamond_spread(self):
        """Test the diamond spread of a tile type."""
        assert TileTypeSpec(count=1, min_diamonds=1, max_diamonds=4).diamond_spread == 3


class TestCatalogue:
    """Level catalogue lookup."""

    def test_clamps_level_numbers(self):
        """Test that level numbers are clamped into range."""
        catalogue = LevelCatalogue(DEFAULT_LEVELS)
        assert catalogue.get(0) is DEFAULT_LEVELS[0]
        assert catalogue.get(99) is DEFAULT_LEVELS[-1]

    def test_next_number_wraps(self):
        """Test that the level after the last is level 1."""
        catalogue = LevelCatalogue(DEFAULT_LEVELS)
        assert catalogue.next_number(1) == 2
        assert catalogue.next_number(len(DEFAULT_LEVELS)) == 1
        assert catalogue.is_last(len(DEFAULT_LEVELS))

    def test_empty_catalogue_rejected(self):
        """Test that a catalogue needs at least one level."""
        with pytest.raises(ValueError):
            LevelCatalogue([])

    def test_default_levels_are_consistent(self):
        """Test that built-in levels cover their boards."""
        for level in get_catalogue():
            assert level.total_tiles == level.board_size ** 2
            assert level.min_diamonds <= level.num_diamonds <= level.max_diamonds
            assert level.gold_score >= level.silver_score >= level.bronze_score

    def test_to_list_numbers_levels(self):
        """Test that listed levels are numbered from 1."""
        listed = LevelCatalogue(DEFAULT_LEVELS).to_list()
        assert [item["number"] for item in listed] == list(range(1, len(DEFAULT_LEVELS) + 1))


class TestEvents:
    """Event serialization."""

    def test_board_event_to_dict(self):
        """Test board event serialization."""
        data = TileStateChanged(1, 2, TilePhase.EXPLODING, 3).to_dict()
        assert data == {"x": 1, "y": 2, "phase": "exploding", "value": 3, "event": "TileStateChanged"}

    def test_effect_burst_to_dict(self):
        """Test effect burst serialization."""
        data = EffectBurst(0, 0, "hint", 12).to_dict()
        assert data["effect"] == "hint"
        assert data["magnitude"] == 12

    def test_snapshot_to_dict(self):
        """Test snapshot serialization."""
        snapshot = SessionSnapshot(
            level=1,
            score=2,
            digs_remaining=3,
            rank=Rank.BRONZE,
            hints_remaining=4,
            next_rank_score=5,
            diamonds_remaining=6,
            state=GameState.IN_GAME,
        )
        assert snapshot.to_dict()["rank"] == "bronze"
        assert snapshot.to_dict()["state"] == "in_game"
