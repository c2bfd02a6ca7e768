"""
Action System - Actions, outcomes and results.

Actions represent everything a side can do on its turn:
1. Play a card to a chain end
2. Pass
3. Accept or decline a UNIFY bonus
4. Discard down to the hand limit
5. Let the AI take its whole turn

All state changes flow through actions applied by the reducer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .cards import Position
from .state import Side


class ActionType(Enum):
    """Types of actions in the system."""
    PLAY = "play"
    PASS = "pass"
    RESOLVE_UNIFY = "resolve_unify"
    DISCARD = "discard"
    AI_TURN = "ai_turn"


class PlayOutcome(Enum):
    """What happened when a card play was attempted."""
    PLAYED = "played"
    PLAYED_AND_UNIFY_OFFERED = "played_and_unify_offered"
    ILLEGAL = "illegal"
    HAND_EMPTY_WIN = "hand_empty_win"
    # The human is over the hand limit and must discard before handoff
    DISCARD_REQUIRED = "discard_required"


class ErrorCode(Enum):
    """Why an action was rejected. Rejections never change state."""
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    OUT_OF_TURN = "OUT_OF_TURN"
    WRONG_PHASE = "WRONG_PHASE"
    GAME_OVER = "GAME_OVER"
    INVALID_DISCARD = "INVALID_DISCARD"
    NO_HANDLER = "NO_HANDLER"


@dataclass(frozen=True)
class Action:
    """
    A complete action to be applied to the game state.

    Only the fields relevant to the action type are set.
    """
    action_type: ActionType
    side: Side
    card_id: str | None = None
    position: Position | None = None
    accept: bool | None = None
    card_ids: tuple[str, ...] = ()

    @classmethod
    def play(cls, side: Side, card_id: str, position: Position) -> Action:
        """Factory for play action."""
        return cls(action_type=ActionType.PLAY, side=side, card_id=card_id, position=position)

    @classmethod
    def pass_turn(cls, side: Side) -> Action:
        """Factory for pass action."""
        return cls(action_type=ActionType.PASS, side=side)

    @classmethod
    def resolve_unify(cls, side: Side, accept: bool) -> Action:
        """Factory for a UNIFY decision."""
        return cls(action_type=ActionType.RESOLVE_UNIFY, side=side, accept=accept)

    @classmethod
    def discard(cls, side: Side, card_ids: list[str] | tuple[str, ...]) -> Action:
        """Factory for hand-limit discard."""
        return cls(action_type=ActionType.DISCARD, side=side, card_ids=tuple(card_ids))

    @classmethod
    def ai_turn(cls) -> Action:
        """Factory for a full AI turn."""
        return cls(action_type=ActionType.AI_TURN, side=Side.AI)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New state (if succeeded)
    - Errors (if failed)
    - Human-readable changes (for UI)
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: ErrorCode | None = None

    outcome: PlayOutcome | None = None
    deadlocked: bool = False

    # For UI/presentation
    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode | None = None) -> ActionResult:
        """Create a failure result."""
        outcome = PlayOutcome.ILLEGAL if error_code in (
            ErrorCode.ILLEGAL_MOVE, ErrorCode.CARD_NOT_IN_HAND,
        ) else None
        return cls(success=False, error=error, error_code=error_code, outcome=outcome)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        outcome: PlayOutcome | None = None,
        deadlocked: bool = False,
    ) -> ActionResult:
        """Create a success result with new state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            outcome=outcome,
            deadlocked=deadlocked,
        )
