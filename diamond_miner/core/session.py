"""Game flow controller: session state, scoring and level outcome."""
import logging
import uuid
import random
from collections import OrderedDict, deque
from typing import Any, Callable, Deque, Dict, List, Optional, Tuple

from ..config import Settings, get_settings
from ..models.catalogue import LevelCatalogue, get_catalogue
from ..models.events import (
    BoardEvent,
    DiamondsRemoved,
    GameState,
    SessionSnapshot,
    TilePhase,
    TileStateChanged,
)
from ..models.level import LevelSpec, Rank
from .board import Board, DigOutcome
from .generator import LevelGenerator, get_generator
from .pool import ObjectPool, create_board_pool
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[SessionSnapshot], Any]


class GameSession:
    """Owns one player's session and the board it plays on.

    Every command that changes session state pushes a ``SessionSnapshot`` to
    subscribers. Commands that are not allowed in the current state are
    ignored and report that through their return value.
    """

    def __init__(
        self,
        catalogue: Optional[LevelCatalogue] = None,
        settings: Optional[Settings] = None,
        pool: Optional[ObjectPool] = None,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
        generator: Optional[LevelGenerator] = None,
    ):
        settings = settings or get_settings()
        self.catalogue = catalogue or get_catalogue()
        self.pool = pool or create_board_pool(
            settings.tile_pool_size, settings.effect_pool_size
        )
        self.scheduler = scheduler or Scheduler()
        self.rng = rng or random.Random()
        self.generator = generator or get_generator()

        self.hints_per_game = settings.hints_per_game
        self.hint_cooldown = settings.hint_cooldown

        self.board = Board(
            self.pool,
            self.scheduler,
            rng=self.rng,
            explode_delay=settings.explode_delay,
            hint_step=settings.hint_step,
            explosion_lifetime=settings.explosion_lifetime,
        )
        self.board.subscribe(self._on_board_event)

        self.state = GameState.GAME_OVER
        self.current_level = 1
        self.score = 0
        self.digs_used = 0
        self.hints_remaining = self.hints_per_game
        self.hints_used_this_level = 0
        self.diamonds_remaining = 0
        self.hint_timer = 0.0

        # Set when the dig budget runs out while explosions are still in flight
        self._finish_pending = False
        self._listeners: List[SnapshotListener] = []

    # ----- derived state -----

    @property
    def level_spec(self) -> LevelSpec:
        return self.catalogue.get(self.current_level)

    @property
    def rank(self) -> Rank:
        return Rank.from_score(self.score, self.level_spec)

    @property
    def next_rank_score(self) -> int:
        return Rank.next_rank_score(self.score, self.level_spec)

    @property
    def digs_remaining(self) -> int:
        return self.level_spec.num_digs - self.digs_used

    @property
    def is_final_level(self) -> bool:
        return self.catalogue.is_last(self.current_level)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            level=self.current_level,
            score=self.score,
            digs_remaining=self.digs_remaining,
            rank=self.rank,
            hints_remaining=self.hints_remaining,
            next_rank_score=self.next_rank_score,
            diamonds_remaining=self.diamonds_remaining,
            state=self.state,
        )

    def subscribe(self, listener: SnapshotListener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

    # ----- level flow -----

    def start_game(self, seed: Optional[int] = None) -> None:
        """Reset the whole session and start level 1."""
        self.hints_remaining = self.hints_per_game
        self.hints_used_this_level = 0
        self.hint_timer = 0.0
        self.start_level(1, seed=seed)

    def start_level(self, number: int, seed: Optional[int] = None) -> None:
        """
        Generate and show a level, then enter play.

        Raises:
            InvalidSpecError: If the level cannot be generated. Session state
                and the current board are left as they were.
        """
        self._load_level(number, seed)
        self._notify()

    def _load_level(self, number: int, seed: Optional[int]) -> None:
        number = self.catalogue.clamp(number)
        spec = self.catalogue.get(number)

        # Generation runs before the old board is torn down
        self.board.build(spec, self.generator, seed=seed)

        self.current_level = number
        self.score = 0
        self.digs_used = 0
        self.hints_used_this_level = 0
        self.diamonds_remaining = spec.num_diamonds
        self._finish_pending = False
        self.state = GameState.IN_GAME

        # Intro sweep, free of charge
        self.board.hint()

        logger.info("Started level %d (%d diamonds)", number, spec.num_diamonds)

    def retry(self, seed: Optional[int] = None) -> bool:
        """Restart the current level, refunding hints spent on it."""
        if self.state not in (GameState.IN_GAME, GameState.LEVEL_FAILED):
            return False
        self._restart(self.current_level, self.hints_used_this_level, seed)
        return True

    def next_level(self, seed: Optional[int] = None) -> bool:
        """
        Advance after a completed level, wrapping to level 1 after the last.

        Raises:
            InvalidSpecError: If the next level cannot be generated. The
                session stays on the completed level.
        """
        if self.state != GameState.LEVEL_COMPLETED:
            return False
        self._restart(self.catalogue.next_number(self.current_level), 0, seed)
        return True

    def _restart(self, number: int, refund: int, seed: Optional[int]) -> None:
        # Nothing is committed unless the level loads
        self._load_level(number, seed)
        self.hints_remaining += refund
        self._notify()

    def close(self) -> None:
        """Tear down the board and end the session."""
        self.board.recycle_all()
        self._finish_pending = False
        self.state = GameState.GAME_OVER
        self._notify()

    # ----- gameplay -----

    def dig(self, x: int, y: int) -> DigOutcome:
        """Dig a tile; a dig is only spent when the board accepts it."""
        if self.state != GameState.IN_GAME:
            return DigOutcome.NOT_IN_GAME
        if self._finish_pending or self.digs_remaining <= 0:
            return DigOutcome.NO_DIGS_LEFT

        outcome = self.board.dig(x, y)
        if outcome == DigOutcome.ACCEPTED:
            self.use_dig()
        return outcome

    def use_dig(self) -> None:
        self.digs_used += 1
        self._notify()

        if self.digs_used >= self.level_spec.num_digs:
            if self.board.pending_explosions:
                # Let dug tiles land before ranking the level
                self._finish_pending = True
            else:
                self.finish_level()

    def register_diamonds(self, diamonds: int, collected: bool = True) -> None:
        """
        Account for diamonds leaving the board.

        Args:
            diamonds: Number of diamonds removed.
            collected: Whether they count towards the score.
        """
        if self.state != GameState.IN_GAME:
            return

        self.diamonds_remaining -= diamonds
        if collected:
            self.score += diamonds
        self._notify()

        # End level if there are no more diamonds
        if self.diamonds_remaining <= 0:
            self.finish_level()

    def finish_level(self) -> None:
        """Rank the level: Bronze or better completes it, otherwise it fails."""
        if self.state != GameState.IN_GAME:
            return

        self._finish_pending = False
        rank = self.rank
        if rank != Rank.UNRANKED:
            self.state = GameState.LEVEL_COMPLETED
        else:
            self.state = GameState.LEVEL_FAILED

        logger.info(
            "Level %d finished: score=%d rank=%s state=%s",
            self.current_level, self.score, rank.value, self.state.value,
        )
        self._notify()

    def hint(self) -> bool:
        """Play the hint sweep if a hint is available and off cooldown."""
        if (
            self.state != GameState.IN_GAME
            or self.hints_remaining <= 0
            or self.hint_timer > 0.0
        ):
            return False

        self.board.hint()
        self.hints_remaining -= 1
        self.hints_used_this_level += 1
        self.hint_timer = self.hint_cooldown
        self._notify()
        return True

    def tick(self, elapsed: float) -> int:
        """Advance time: hint cooldown and scheduled board work."""
        elapsed = max(0.0, elapsed)
        if self.hint_timer > 0.0:
            self.hint_timer = max(0.0, self.hint_timer - elapsed)
        return self.scheduler.tick(elapsed)

    def _on_board_event(self, event: BoardEvent) -> None:
        if isinstance(event, DiamondsRemoved):
            self.register_diamonds(event.diamonds, collected=True)
        elif (
            isinstance(event, TileStateChanged)
            and event.phase == TilePhase.RECYCLED
            and self._finish_pending
            and self.board.pending_explosions == 0
        ):
            self.finish_level()


class SessionRegistry:
    """Live sessions served over the API, keyed by id.

    At most ``max_sessions`` are kept. Creating one more evicts the least
    recently used session and returns its handles to the pool.
    """

    # Board events kept per session between polls
    MAX_BUFFERED_EVENTS = 1000

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.max_sessions = self.settings.max_sessions
        self._sessions: "OrderedDict[str, GameSession]" = OrderedDict()
        self._events: Dict[str, Deque[BoardEvent]] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> Tuple[str, GameSession]:
        while len(self._sessions) >= self.max_sessions:
            oldest_id = next(iter(self._sessions))
            logger.info("Evicting idle session %s", oldest_id)
            self.remove(oldest_id)

        session_id = uuid.uuid4().hex
        session = GameSession(settings=self.settings)
        events: Deque[BoardEvent] = deque(maxlen=self.MAX_BUFFERED_EVENTS)
        session.board.subscribe(events.append)

        self._sessions[session_id] = session
        self._events[session_id] = events
        return session_id, session

    def get(self, session_id: str) -> Optional[GameSession]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def drain_events(self, session_id: str) -> List[BoardEvent]:
        events = self._events.get(session_id)
        if not events:
            return []
        drained = list(events)
        events.clear()
        return drained

    def remove(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        self._events.pop(session_id, None)
        if session is None:
            return False
        session.close()
        return True


# Singleton instance
_registry = None


def get_session_registry() -> SessionRegistry:
    """Get or create session registry singleton instance."""
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry
