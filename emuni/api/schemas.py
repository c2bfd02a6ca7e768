"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a client (web or mobile UI) and
the engine. Card and chain data are always sent in full; the AI's hand is
only ever sent as a count.

Error Codes:
- ILLEGAL_MOVE: Card cannot connect at that end (or the end is locked)
- CARD_NOT_IN_HAND: Card is not in the player's hand
- OUT_OF_TURN: Not the player's turn, or an AI turn is in flight
- WRONG_PHASE: Action does not fit the current phase (e.g. UNIFY pending)
- GAME_OVER: Game already ended
- INVALID_DISCARD: Wrong number of cards, or cards not in hand
- SESSION_NOT_FOUND: Session does not exist or has ended
- UNKNOWN_BOT: Bot name is not registered
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    YOUR_TURN = "your_turn"
    WAITING_UNIFY = "waiting_unify"
    WAITING_DISCARD = "waiting_discard"
    AI_THINKING = "ai_thinking"
    GAME_OVER = "game_over"


class PositionName(str, Enum):
    """Chain ends."""
    LEFT = "left"
    RIGHT = "right"


class ErrorCode(str, Enum):
    """Structured error codes."""
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    OUT_OF_TURN = "OUT_OF_TURN"
    WRONG_PHASE = "WRONG_PHASE"
    GAME_OVER = "GAME_OVER"
    INVALID_DISCARD = "INVALID_DISCARD"
    NO_HANDLER = "NO_HANDLER"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    UNKNOWN_BOT = "UNKNOWN_BOT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CardInfo(BaseModel):
    """Card information for display."""
    card_id: str
    type: str = Field(description="gravity, force, wiggle, chaos")
    name: str
    variant: Optional[int] = None
    color: Optional[str] = None
    chaos_type: Optional[str] = None


class MoveInfo(BaseModel):
    """A legal move for the player."""
    card_id: str
    position: PositionName


class SideStatsInfo(BaseModel):
    """Counters for one side."""
    plays: int = 0
    passes: int = 0
    draws: int = 0
    unify_accepted: int = 0
    unify_declined: int = 0


class StatsInfo(BaseModel):
    """Counters for both sides."""
    player: SideStatsInfo = Field(default_factory=SideStatsInfo)
    ai: SideStatsInfo = Field(default_factory=SideStatsInfo)


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to start a new game."""
    seed: Optional[int] = Field(None, description="Seed for shuffle and bot; random if omitted")
    bot: Optional[str] = Field(None, description="Bot policy: first, random, medium")


class PlayRequest(BaseModel):
    """Request to play a card."""
    card_id: str
    position: PositionName


class UnifyRequest(BaseModel):
    """Answer to a UNIFY offer."""
    accept: bool


class DiscardRequest(BaseModel):
    """Cards to discard down to the hand limit."""
    card_ids: list[str] = Field(..., min_length=1)


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Full game state as the human may see it."""
    session_id: str
    status: SessionStatus
    phase: str
    current_player: str
    turn_count: int
    consecutive_passes: int
    locked_end: Optional[PositionName] = None
    discards_required: int = 0
    deck_size: int
    chain: list[CardInfo] = Field(default_factory=list)
    hand: list[CardInfo] = Field(default_factory=list)
    ai_hand_size: int
    discard_pile_size: int = 0
    winner: Optional[str] = None
    result: Optional[str] = Field(None, description="win or deadlock once the game is over")
    stats: StatsInfo = Field(default_factory=StatsInfo)


class SessionResponse(BaseModel):
    """Session metadata."""
    session_id: str
    status: SessionStatus
    seed: int
    bot: str
    created_at: float
    turn_count: int


class ActionResponse(BaseModel):
    """Result of a human action, including the AI's reply."""
    success: bool
    status: SessionStatus
    outcome: Optional[str] = Field(
        None, description="played, played_and_unify_offered, hand_empty_win, discard_required",
    )
    state_changes: list[str] = Field(default_factory=list)
    ai_actions: list[str] = Field(default_factory=list)
    winner: Optional[str] = None
    deadlocked: bool = False
    game_state: GameStateResponse


class MovesResponse(BaseModel):
    """Legal moves for the human right now."""
    session_id: str
    moves: list[MoveInfo] = Field(default_factory=list)
    can_pass: bool


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
