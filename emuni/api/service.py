"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions and their game loops
3. Formats responses for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.).
Methods return either the response model or an ErrorResponse.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field

from ..engine_core.cards import Position
from ..engine_core.rules import legal_moves
from ..engine_core.snapshot import snapshot
from ..engine_core.state import GameState, TurnPhase
from ..exceptions import SessionNotFoundError, UnknownBotError
from ..session import GameLoop, Session, SessionManager, TurnResult
from .schemas import (
    ActionResponse,
    CreateSessionRequest,
    DiscardRequest,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
    MoveInfo,
    MovesResponse,
    PlayRequest,
    PositionName,
    SessionResponse,
    SessionStatus,
    UnifyRequest,
)

logger = logging.getLogger(__name__)

# Snapshot keys copied straight into GameStateResponse
STATE_FIELDS = (
    "phase",
    "current_player",
    "turn_count",
    "consecutive_passes",
    "locked_end",
    "discards_required",
    "deck_size",
    "chain",
    "ai_hand_size",
    "discard_pile_size",
    "winner",
    "result",
    "stats",
)


def _not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
    )


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest(seed=7))
        state = service.get_state(session.session_id)
        result = service.play(session.session_id, PlayRequest(card_id=..., position="left"))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, request: CreateSessionRequest) -> SessionResponse | ErrorResponse:
        """Start a new game and return its session."""
        try:
            session = self.session_manager.create_session(seed=request.seed, bot=request.bot)
        except UnknownBotError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.UNKNOWN_BOT)

        self._game_loops[session.session_id] = GameLoop(session)
        return self._session_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        """Get session metadata."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._session_response(session)

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        """End a session."""
        self._game_loops.pop(session_id, None)
        return self.session_manager.end_session(session_id, reason)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active_sessions()

    # =========================================================================
    # Game state
    # =========================================================================

    def get_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        """Get the current game state."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)
        return self._state_response(session)

    def get_moves(self, session_id: str) -> MovesResponse | ErrorResponse:
        """List the human's legal moves (empty unless it is their play phase)."""
        session = self.session_manager.get_session(session_id)
        if not session:
            return _not_found(session_id)

        state = session.game_state
        if state.phase != TurnPhase.AWAITING_HUMAN_PLAY:
            return MovesResponse(session_id=session_id, moves=[], can_pass=False)

        moves = [
            MoveInfo(card_id=m.card.card_id, position=PositionName(m.position.value))
            for m in legal_moves(state.player_hand, state.chain, state.locked_end)
        ]
        return MovesResponse(session_id=session_id, moves=moves, can_pass=True)

    # =========================================================================
    # Human actions
    # =========================================================================

    def play(self, session_id: str, request: PlayRequest) -> ActionResponse | ErrorResponse:
        """Play a card from the human's hand."""
        try:
            loop = self._get_loop(session_id)
        except SessionNotFoundError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.SESSION_NOT_FOUND)
        result = loop.play(request.card_id, Position(request.position.value))
        return self._action_response(loop.session, result)

    def resolve_unify(self, session_id: str, request: UnifyRequest) -> ActionResponse | ErrorResponse:
        """Accept or decline a UNIFY offer."""
        try:
            loop = self._get_loop(session_id)
        except SessionNotFoundError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.SESSION_NOT_FOUND)
        result = loop.resolve_unify(request.accept)
        return self._action_response(loop.session, result)

    def pass_turn(self, session_id: str) -> ActionResponse | ErrorResponse:
        """Pass the human's turn."""
        try:
            loop = self._get_loop(session_id)
        except SessionNotFoundError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.SESSION_NOT_FOUND)
        result = loop.pass_turn()
        return self._action_response(loop.session, result)

    def discard(self, session_id: str, request: DiscardRequest) -> ActionResponse | ErrorResponse:
        """Discard down to the hand limit."""
        try:
            loop = self._get_loop(session_id)
        except SessionNotFoundError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.SESSION_NOT_FOUND)
        result = loop.discard(request.card_ids)
        return self._action_response(loop.session, result)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get_loop(self, session_id: str) -> GameLoop:
        session = self.session_manager.require_session(session_id)
        loop = self._game_loops.get(session_id)
        if loop is None:
            loop = GameLoop(session)
            self._game_loops[session_id] = loop
        return loop

    def _status(self, state: GameState) -> SessionStatus:
        from ..session.game_loop import PHASE_TO_LOOP_STATE
        return SessionStatus(PHASE_TO_LOOP_STATE[state.phase].value)

    def _session_response(self, session: Session) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            status=self._status(session.game_state),
            seed=session.seed,
            bot=session.bot_name,
            created_at=session.created_at,
            turn_count=session.game_state.turn_count,
        )

    def _state_response(self, session: Session) -> GameStateResponse:
        state = session.game_state
        view = snapshot(state)
        return GameStateResponse(
            session_id=session.session_id,
            status=self._status(state),
            hand=view["player_hand"],
            **{key: view[key] for key in STATE_FIELDS},
        )

    def _action_response(self, session: Session, result: TurnResult) -> ActionResponse | ErrorResponse:
        if not result.success:
            code = ErrorCode(result.error_code.value) if result.error_code else ErrorCode.INTERNAL_ERROR
            logger.warning("Session %s: %s", session.session_id, "; ".join(result.errors))
            return ErrorResponse(
                error="; ".join(result.errors) or "Action rejected",
                error_code=code,
                details={"status": result.loop_state.value},
            )

        return ActionResponse(
            success=True,
            status=SessionStatus(result.loop_state.value),
            outcome=result.outcome.value if result.outcome else None,
            state_changes=result.state_changes,
            ai_actions=result.ai_actions,
            winner=result.winner.value if result.winner else None,
            deadlocked=result.deadlocked,
            game_state=self._state_response(session),
        )
