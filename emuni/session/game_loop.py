"""
Game Loop - Drives one session between human input and AI turns.

The loop:
1. Human submits an action (play, pass, UNIFY answer, discard)
2. Reducer validates and applies it
3. If the turn passed to the AI, the loop runs the AI turn
   (after an optional pacing delay)
4. Result reports what changed and whose move it is now
5. Repeat until the game ends

Only one action per session is processed at a time. An action arriving
while another (including an AI turn) is in flight is rejected.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Sequence

from ..engine_core.action import Action, ActionResult, ErrorCode, PlayOutcome
from ..engine_core.cards import Position
from ..engine_core.state import GameResult, Side, TurnPhase

if TYPE_CHECKING:
    from .manager import Session

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """What the loop is waiting for."""
    YOUR_TURN = "your_turn"
    WAITING_UNIFY = "waiting_unify"
    WAITING_DISCARD = "waiting_discard"
    AI_THINKING = "ai_thinking"
    GAME_OVER = "game_over"


PHASE_TO_LOOP_STATE = {
    TurnPhase.AWAITING_HUMAN_PLAY: LoopState.YOUR_TURN,
    TurnPhase.RESOLVING_UNIFY: LoopState.WAITING_UNIFY,
    TurnPhase.AWAITING_DISCARD: LoopState.WAITING_DISCARD,
    TurnPhase.EXECUTING_AI_TURN: LoopState.AI_THINKING,
    TurnPhase.GAME_ENDED: LoopState.GAME_OVER,
}


@dataclass
class TurnResult:
    """
    Result of processing one human action.

    Contains what the human's action did, what the AI did in reply,
    and how the game stands afterwards.
    """
    success: bool
    loop_state: LoopState

    outcome: PlayOutcome | None = None

    # Changes caused by the human's action
    state_changes: list[str] = field(default_factory=list)

    # Changes caused by AI turns that followed
    ai_actions: list[str] = field(default_factory=list)

    errors: list[str] = field(default_factory=list)
    error_code: ErrorCode | None = None

    # Game over info
    winner: Side | None = None
    deadlocked: bool = False


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(session)

        result = loop.play("card_12", Position.RIGHT)
        if result.loop_state == LoopState.WAITING_UNIFY:
            result = loop.resolve_unify(accept=True)

        show(result.state_changes, result.ai_actions)
    """

    def __init__(self, session: Session):
        self.session = session

    @property
    def state(self) -> LoopState:
        return PHASE_TO_LOOP_STATE[self.session.game_state.phase]

    def play(self, card_id: str, position: Position) -> TurnResult:
        """Play a card from the human's hand."""
        return self.submit(Action.play(Side.PLAYER, card_id, position))

    def pass_turn(self) -> TurnResult:
        """Pass the human's turn."""
        return self.submit(Action.pass_turn(Side.PLAYER))

    def resolve_unify(self, accept: bool) -> TurnResult:
        """Answer a pending UNIFY offer."""
        return self.submit(Action.resolve_unify(Side.PLAYER, accept))

    def discard(self, card_ids: Sequence[str]) -> TurnResult:
        """Discard down to the hand limit."""
        return self.submit(Action.discard(Side.PLAYER, tuple(card_ids)))

    def submit(self, action: Action) -> TurnResult:
        """
        Apply a human action, then run any AI turns it hands over to.

        Rejected without effect if another action is still being processed.
        """
        if not self.session.lock.acquire(blocking=False):
            return TurnResult(
                success=False,
                loop_state=LoopState.AI_THINKING,
                errors=["Another action is still being processed"],
                error_code=ErrorCode.OUT_OF_TURN,
            )
        try:
            return self._submit_locked(action)
        finally:
            self.session.lock.release()

    def _submit_locked(self, action: Action) -> TurnResult:
        from .manager import SessionState

        result = self.session.reducer.apply(self.session.game_state, action)
        if not result.success:
            return TurnResult(
                success=False,
                loop_state=self.state,
                outcome=result.outcome,
                errors=[result.error or "Action rejected"],
                error_code=result.error_code,
            )

        self.session.game_state = result.new_state
        turn = TurnResult(
            success=True,
            loop_state=self.state,
            outcome=result.outcome,
            state_changes=list(result.state_changes),
            deadlocked=result.deadlocked,
        )

        self.session.state = SessionState.AI_TURN
        try:
            self._run_ai_turns(turn)
        finally:
            self.session.state = (
                SessionState.GAME_OVER if self.session.game_state.is_over
                else SessionState.ACTIVE
            )

        turn.loop_state = self.state
        turn.winner = self.session.game_state.winner
        turn.deadlocked = self.session.game_state.result == GameResult.DEADLOCK
        return turn

    def _run_ai_turns(self, turn: TurnResult) -> None:
        """Run AI turns until control returns to the human or the game ends."""
        while self.session.game_state.phase == TurnPhase.EXECUTING_AI_TURN:
            if self.session.ai_delay > 0:
                time.sleep(self.session.ai_delay)

            result: ActionResult = self.session.reducer.apply(
                self.session.game_state, Action.ai_turn(),
            )
            if not result.success:
                # A policy proposing an illegal move is a bot bug; stop rather than spin.
                logger.error("AI turn rejected: %s", result.error)
                turn.errors.append(f"AI turn failed: {result.error}")
                return

            self.session.game_state = result.new_state
            turn.ai_actions.extend(result.state_changes)
