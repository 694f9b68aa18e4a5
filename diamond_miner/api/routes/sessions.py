"""Interactive game session API routes.

All handlers are ``async def`` so every session mutation runs on the event
loop thread; sessions are never touched concurrently.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ...models.schemas import (
    SessionResponse,
    SnapshotModel,
    StartLevelRequest,
    SeedRequest,
    DigRequest,
    TickRequest,
    ErrorResponse,
)
from ...core.board import DigOutcome
from ...core.generator import InvalidSpecError
from ...core.session import GameSession, SessionRegistry
from ..deps import get_sessions

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _require_session(registry: SessionRegistry, session_id: str) -> GameSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


def _respond(
    registry: SessionRegistry,
    session_id: str,
    session: GameSession,
    accepted: bool = True,
    outcome: Optional[str] = None,
    include_board: bool = False,
    reveal: bool = False,
) -> SessionResponse:
    return SessionResponse(
        session_id=session_id,
        snapshot=SnapshotModel(**session.snapshot().to_dict()),
        accepted=accepted,
        outcome=outcome,
        events=[event.to_dict() for event in registry.drain_events(session_id)],
        board=session.board.to_view(reveal) if include_board else None,
    )


@router.post("", response_model=SessionResponse)
async def create_session(
    request: Optional[SeedRequest] = None,
    registry: SessionRegistry = Depends(get_sessions),
) -> SessionResponse:
    """Create a session and start level 1."""
    session_id, session = registry.create()
    try:
        session.start_game(seed=request.seed if request else None)
    except InvalidSpecError as e:
        registry.remove(session_id)
        raise HTTPException(status_code=400, detail=f"Level start failed: {str(e)}")
    return _respond(registry, session_id, session, include_board=True)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    reveal: bool = False,
    registry: SessionRegistry = Depends(get_sessions),
) -> SessionResponse:
    """Current snapshot and board view. ``reveal`` shows hidden tile values."""
    session = _require_session(registry, session_id)
    return _respond(registry, session_id, session, include_board=True, reveal=reveal)


@router.delete("/{session_id}")
async def delete_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_sessions),
):
    """Tear down a session and return its handles to the pool."""
    if not registry.remove(session_id):
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return {"deleted": session_id}


@router.post(
    "/{session_id}/start",
    response_model=SessionResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def start_level(
    session_id: str,
    request: StartLevelRequest,
    registry: SessionRegistry = Depends(get_sessions),
) -> SessionResponse:
    """Start (or restart) a specific level."""
    session = _require_session(registry, session_id)
    try:
        session.start_level(request.level, seed=request.seed)
    except InvalidSpecError as e:
        raise HTTPException(status_code=400, detail=f"Level start failed: {str(e)}")
    return _respond(registry, session_id, session, include_board=True)


@router.post("/{session_id}/retry", response_model=SessionResponse)
async def retry_level(
    session_id: str,
    request: Optional[SeedRequest] = None,
    registry: SessionRegistry = Depends(get_sessions),
) -> SessionResponse:
    """Retry the current level (allowed in game or after failing)."""
    session = _require_session(registry, session_id)
    accepted = session.retry(seed=request.seed if request else None)
    return _respond(registry, session_id, session, accepted=accepted, include_board=accepted)


@router.post("/{session_id}/next", response_model=SessionResponse)
async def next_level(
    session_id: str,
    request: Optional[SeedRequest] = None,
    registry: SessionRegistry = Depends(get_sessions),
) -> SessionResponse:
    """Move on after completing a level."""
    session = _require_session(registry, session_id)
    accepted = session.next_level(seed=request.seed if request else None)
    return _respond(registry, session_id, session, accepted=accepted, include_board=accepted)


@router.post("/{session_id}/dig", response_model=SessionResponse)
async def dig_tile(
    session_id: str,
    request: DigRequest,
    registry: SessionRegistry = Depends(get_sessions),
) -> SessionResponse:
    """Dig a tile. The explosion lands on a later tick."""
    session = _require_session(registry, session_id)
    outcome = session.dig(request.x, request.y)
    return _respond(
        registry,
        session_id,
        session,
        accepted=outcome == DigOutcome.ACCEPTED,
        outcome=outcome.value,
    )


@router.post("/{session_id}/hint", response_model=SessionResponse)
async def use_hint(
    session_id: str,
    registry: SessionRegistry = Depends(get_sessions),
) -> SessionResponse:
    """Play the hint sweep if a hint is available and off cooldown."""
    session = _require_session(registry, session_id)
    accepted = session.hint()
    return _respond(registry, session_id, session, accepted=accepted)


@router.post("/{session_id}/tick", response_model=SessionResponse)
async def tick_session(
    session_id: str,
    request: TickRequest,
    registry: SessionRegistry = Depends(get_sessions),
) -> SessionResponse:
    """Advance simulation time, running due explosions and hint animations."""
    session = _require_session(registry, session_id)
    session.tick(request.elapsed)
    return _respond(registry, session_id, session, include_board=True)
