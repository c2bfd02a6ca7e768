"""
Reducer - Turn controller for EmUni.

The reducer is the single point of turn-level state change.
All plays, passes, UNIFY decisions and discards go through Reducer.apply().

Design principles:
- Pure function: (state, action) -> ActionResult carrying the new state
- Validates before applying; a rejected action leaves the state untouched
- Runs a turn to completion: play/pass -> bonus -> hand limit -> win
  check -> handoff (with the incoming side's draw)
- Pauses only where the human must decide (UNIFY offer, discards)

Module-level helpers (new_game, attempt_play, resolve_unify, pass_turn,
discard_cards, ai_turn) wrap the reducer for callers that only want states
and outcomes back.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Sequence

from ..exceptions import InvalidDeckError
from .action import Action, ActionResult, ActionType, ErrorCode, PlayOutcome
from .cards import Card, Position
from .chaos import ChaosResolver, UnimplementedChaosResolver
from .constants import DECK_SIZE, STARTING_HAND, UNIFY_DRAW
from .rules import can_play_at, chain_end, is_adjacent_to_wiggle
from .state import (
    GameResult,
    GameState,
    Side,
    TurnPhase,
    check_win,
    discard,
    draw,
    excess_cards,
    play,
    record_pass,
    truncate_hand,
)

if TYPE_CHECKING:
    from ..bots import BotPolicy

logger = logging.getLogger(__name__)

SIDE_LABELS = {Side.PLAYER: "Player", Side.AI: "AI"}

# Phases in which each action type may be applied
ALLOWED_PHASES = {
    ActionType.PLAY: {TurnPhase.AWAITING_HUMAN_PLAY, TurnPhase.EXECUTING_AI_TURN},
    ActionType.PASS: {TurnPhase.AWAITING_HUMAN_PLAY, TurnPhase.EXECUTING_AI_TURN},
    ActionType.RESOLVE_UNIFY: {TurnPhase.RESOLVING_UNIFY},
    ActionType.DISCARD: {TurnPhase.AWAITING_DISCARD},
    ActionType.AI_TURN: {TurnPhase.EXECUTING_AI_TURN},
}


def _default_policy() -> BotPolicy:
    from ..bots import WigglePreferringPolicy
    return WigglePreferringPolicy()


@dataclass
class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all game state is in GameState.
    The policy is the AI collaborator, consulted for AI turns and for
    the AI's UNIFY decisions. The chaos resolver handles Chaos plays.
    """
    policy: BotPolicy | None = None
    chaos_resolver: ChaosResolver = field(default_factory=UnimplementedChaosResolver)

    def __post_init__(self):
        if self.policy is None:
            self.policy = _default_policy()

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with new state or error.
        """
        rejection = self._validate_action(state, action)
        if rejection:
            message, code = rejection
            logger.debug("Rejected %s by %s: %s", action.action_type.value, action.side.value, message)
            return ActionResult.failure(message, error_code=code)

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code=ErrorCode.NO_HANDLER,
            )

        result = handler(state, action)
        if result.success and result.new_state is not None:
            result.new_state = result.new_state._copy_with(
                history=result.new_state.history + (action,),
            )
        return result

    def _validate_action(self, state: GameState, action: Action) -> tuple[str, ErrorCode] | None:
        """
        Validate that an action may be applied in the current state.

        Returns (message, code) if invalid, None if valid.
        """
        if state.is_over:
            return "Game is over - no actions allowed", ErrorCode.GAME_OVER

        if action.side != state.current_player:
            return f"Not {action.side.value}'s turn", ErrorCode.OUT_OF_TURN

        if state.phase not in ALLOWED_PHASES.get(action.action_type, set()):
            return (
                f"Cannot {action.action_type.value} during {state.phase.value}",
                ErrorCode.WRONG_PHASE,
            )

        # AI turns are driven by the policy, never by a human request
        if action.action_type in (ActionType.PLAY, ActionType.PASS):
            expected = (
                TurnPhase.AWAITING_HUMAN_PLAY if action.side == Side.PLAYER
                else TurnPhase.EXECUTING_AI_TURN
            )
            if state.phase != expected:
                return (
                    f"Cannot {action.action_type.value} during {state.phase.value}",
                    ErrorCode.WRONG_PHASE,
                )

        return None

    def _get_handler(self, action_type: ActionType) -> Callable[[GameState, Action], ActionResult] | None:
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLAY: self._handle_play,
            ActionType.PASS: self._handle_pass,
            ActionType.RESOLVE_UNIFY: self._handle_resolve_unify,
            ActionType.DISCARD: self._handle_discard,
            ActionType.AI_TURN: self._handle_ai_turn,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_play(self, state: GameState, action: Action) -> ActionResult:
        """Handle a card play: legality, placement, chaos, UNIFY, then finish."""
        side = action.side
        position = action.position
        label = SIDE_LABELS[side]

        if position is None:
            return ActionResult.failure(
                "A play must name the chain end",
                error_code=ErrorCode.ILLEGAL_MOVE,
            )

        card = state.find_in_hand(side, action.card_id or "")
        if card is None:
            return ActionResult.failure(
                f"Card {action.card_id} not in {side.value}'s hand",
                error_code=ErrorCode.CARD_NOT_IN_HAND,
            )

        if state.locked_end == position:
            return ActionResult.failure(
                f"The {position.value} end is locked",
                error_code=ErrorCode.ILLEGAL_MOVE,
            )

        if not can_play_at(state.chain, card, position):
            end_card = chain_end(state.chain, position)
            return ActionResult.failure(
                f"{card.name} cannot connect to {end_card.name} on the {position.value} end",
                error_code=ErrorCode.ILLEGAL_MOVE,
            )

        new_state, _ = play(state, card.card_id, position, side)
        changes = [f"{label} played {card.name} to the {position.value} end"]
        unify = is_adjacent_to_wiggle(new_state.chain, position, card)

        if card.is_chaos:
            resolution = self.chaos_resolver.resolve(new_state, card, position)
            new_state = resolution.state
            changes.append(resolution.description)

        # Emptying the hand wins on the spot, before any bonus
        if check_win(new_state, side):
            return self._end_with_winner(new_state, side, changes)

        if unify:
            if side == Side.PLAYER:
                changes.append("UNIFY bonus offered")
                return ActionResult.success_with_state(
                    new_state._copy_with(phase=TurnPhase.RESOLVING_UNIFY),
                    changes=changes,
                    outcome=PlayOutcome.PLAYED_AND_UNIFY_OFFERED,
                )
            # Decided on the hand held before the play
            accept = self.policy.accept_unify(state.ai_hand)
            new_state, unify_changes = self._apply_unify(new_state, side, accept)
            changes.extend(unify_changes)

        return self._finish_turn(new_state, side, changes, PlayOutcome.PLAYED)

    def _handle_pass(self, state: GameState, action: Action) -> ActionResult:
        """Handle a pass: two in a row without a play deadlocks the game."""
        side = action.side
        new_state, deadlocked = record_pass(state, side)
        changes = [f"{SIDE_LABELS[side]} passed"]

        if deadlocked:
            logger.info("Game deadlocked on turn %d", new_state.turn_count)
            changes.append("Both sides passed - deadlock")
            return ActionResult.success_with_state(
                new_state._copy_with(
                    phase=TurnPhase.GAME_ENDED,
                    result=GameResult.DEADLOCK,
                    winner=None,
                ),
                changes=changes,
                deadlocked=True,
            )

        new_state, handoff_changes = self._handoff(new_state)
        changes.extend(handoff_changes)
        return ActionResult.success_with_state(new_state, changes=changes)

    def _handle_resolve_unify(self, state: GameState, action: Action) -> ActionResult:
        """Handle the human's answer to a UNIFY offer."""
        side = action.side
        new_state, changes = self._apply_unify(state, side, bool(action.accept))
        return self._finish_turn(new_state, side, changes, PlayOutcome.PLAYED)

    def _handle_discard(self, state: GameState, action: Action) -> ActionResult:
        """Handle the human's hand-limit discard."""
        side = action.side
        required = state.discards_required
        if len(action.card_ids) != required:
            return ActionResult.failure(
                f"Must discard exactly {required} card(s), got {len(action.card_ids)}",
                error_code=ErrorCode.INVALID_DISCARD,
            )

        new_state, ok = discard(state, side, action.card_ids)
        if not ok:
            return ActionResult.failure(
                "Discarded cards must be distinct cards from your hand",
                error_code=ErrorCode.INVALID_DISCARD,
            )

        new_state = new_state._copy_with(discards_required=0)
        changes = [f"{SIDE_LABELS[side]} discarded {required} card(s)"]
        return self._finish_turn(new_state, side, changes, PlayOutcome.PLAYED)

    def _handle_ai_turn(self, state: GameState, action: Action) -> ActionResult:
        """Let the policy pick the AI's move and apply it."""
        decision = self.policy.select_move(state.ai_hand, state.chain, state.locked_end)
        if decision is None:
            result = self._handle_pass(state, Action.pass_turn(Side.AI))
            result.state_changes.insert(0, "AI has no legal move")
            return result

        move = decision.move
        return self._handle_play(state, Action.play(Side.AI, move.card.card_id, move.position))

    # =========================================================================
    # Turn phases
    # =========================================================================

    def _apply_unify(self, state: GameState, side: Side, accept: bool) -> tuple[GameState, list[str]]:
        """Draw the UNIFY cards (if accepted) and record the decision."""
        label = SIDE_LABELS[side]
        if not accept:
            return (
                state._copy_with(stats=state.stats.bump(side, unify_declined=1)),
                [f"{label} declined UNIFY"],
            )

        drawn = 0
        for _ in range(UNIFY_DRAW):
            state, card = draw(state, side)
            if card is None:
                break
            drawn += 1
        state = state._copy_with(stats=state.stats.bump(side, unify_accepted=1))
        return state, [f"{label} accepted UNIFY and drew {drawn} card(s)"]

    def _finish_turn(
        self,
        state: GameState,
        side: Side,
        changes: list[str],
        outcome: PlayOutcome,
    ) -> ActionResult:
        """Hand limit, win check and handoff after a completed play."""
        excess = excess_cards(state, side)
        if excess:
            if side == Side.PLAYER:
                changes.append(f"Player has {len(state.hand(side))} cards and must discard {excess}")
                return ActionResult.success_with_state(
                    state._copy_with(phase=TurnPhase.AWAITING_DISCARD, discards_required=excess),
                    changes=changes,
                    outcome=PlayOutcome.DISCARD_REQUIRED,
                )
            state = truncate_hand(state, side)
            changes.append(f"AI discarded {excess} card(s) down to the hand limit")

        if check_win(state, side):
            return self._end_with_winner(state, side, changes)

        state, handoff_changes = self._handoff(state)
        changes.extend(handoff_changes)
        return ActionResult.success_with_state(state, changes=changes, outcome=outcome)

    def _end_with_winner(self, state: GameState, side: Side, changes: list[str]) -> ActionResult:
        logger.info("%s wins on turn %d", SIDE_LABELS[side], state.turn_count)
        changes.append(f"{SIDE_LABELS[side]} emptied their hand and wins")
        return ActionResult.success_with_state(
            state._copy_with(
                phase=TurnPhase.GAME_ENDED,
                result=GameResult.WIN,
                winner=side,
            ),
            changes=changes,
            outcome=PlayOutcome.HAND_EMPTY_WIN,
        )

    def _handoff(self, state: GameState) -> tuple[GameState, list[str]]:
        """Pass the turn to the other side and run its draw phase."""
        incoming = state.current_player.opponent
        phase = (
            TurnPhase.AWAITING_HUMAN_PLAY if incoming == Side.PLAYER
            else TurnPhase.EXECUTING_AI_TURN
        )
        state = state._copy_with(
            current_player=incoming,
            turn_count=state.turn_count + 1,
            phase=phase,
        )
        logger.debug("Turn %d: %s to move", state.turn_count, incoming.value)

        state, card = draw(state, incoming)
        if card is None:
            return state, ["Deck is empty - no draw"]
        return state, [f"{SIDE_LABELS[incoming]} drew a card"]


# =============================================================================
# Functional API
# =============================================================================

def new_game(shuffled_deck: Sequence[Card]) -> GameState:
    """
    Deal a new game from an already-ordered deck.

    The first five cards go to the player, the next five to the AI, and
    the rest form the draw pile. The player moves first and does not
    draw on turn 1.

    Raises:
        InvalidDeckError: if the deck is not 54 unique cards
    """
    cards = tuple(shuffled_deck)
    if len(cards) != DECK_SIZE:
        raise InvalidDeckError(f"Deck must have {DECK_SIZE} cards, got {len(cards)}")
    if len({c.card_id for c in cards}) != len(cards):
        raise InvalidDeckError("Deck contains duplicate card ids")

    return GameState(
        player_hand=cards[:STARTING_HAND],
        ai_hand=cards[STARTING_HAND:2 * STARTING_HAND],
        deck=cards[2 * STARTING_HAND:],
    )


def apply_action(state: GameState, action: Action, policy: BotPolicy | None = None) -> ActionResult:
    """Convenience function to apply a single action."""
    return Reducer(policy=policy).apply(state, action)


def attempt_play(
    state: GameState,
    card_id: str,
    position: Position,
    side: Side | None = None,
    policy: BotPolicy | None = None,
) -> tuple[GameState, PlayOutcome]:
    """
    Try to play a card for side (defaults to the side to move).

    Any rejection (illegal connection, card not held, out of turn,
    wrong phase) comes back as (state unchanged, ILLEGAL).
    """
    side = side or state.current_player
    result = apply_action(state, Action.play(side, card_id, position), policy)
    if not result.success:
        return state, PlayOutcome.ILLEGAL
    return result.new_state, result.outcome


def resolve_unify(state: GameState, accept: bool, policy: BotPolicy | None = None) -> GameState:
    """Answer a pending UNIFY offer. Returns the state unchanged if none is pending."""
    result = apply_action(state, Action.resolve_unify(state.current_player, accept), policy)
    return result.new_state if result.success else state


def pass_turn(
    state: GameState,
    side: Side | None = None,
    policy: BotPolicy | None = None,
) -> tuple[GameState, bool]:
    """Pass for side (defaults to the side to move). Returns (state, deadlocked)."""
    side = side or state.current_player
    result = apply_action(state, Action.pass_turn(side), policy)
    if not result.success:
        return state, False
    return result.new_state, result.deadlocked


def discard_cards(state: GameState, card_ids: Sequence[str], policy: BotPolicy | None = None) -> GameState:
    """Discard down to the hand limit. Returns the state unchanged if rejected."""
    result = apply_action(state, Action.discard(state.current_player, tuple(card_ids)), policy)
    return result.new_state if result.success else state


def ai_turn(state: GameState, policy: BotPolicy | None = None) -> GameState:
    """Run the AI's turn with the given policy. Returns the state unchanged if it is not the AI's turn."""
    result = apply_action(state, Action.ai_turn(), policy)
    return result.new_state if result.success else state
