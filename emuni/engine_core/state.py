"""
Game State - Immutable snapshot of an EmUni game plus the primitive
operations that move cards between zones.

Design principles:
- Immutable: every operation returns a new GameState
- All-or-nothing: a rejected operation returns the state it was given
- Partitioned: a card lives in exactly one of deck, hands, chain, discard pile
- Serializable: see snapshot.py for the JSON view

The primitives here (draw, play, record_pass, discard, truncate_hand) know
nothing about turn order or legality. The turn controller in reducer.py
decides when they may be used.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Sequence

from .cards import Card, Position
from .constants import DEADLOCK_PASSES, HAND_LIMIT


class Side(Enum):
    """The two seats at the table."""
    PLAYER = "player"
    AI = "ai"

    @property
    def opponent(self) -> Side:
        return Side.AI if self == Side.PLAYER else Side.PLAYER


class TurnPhase(Enum):
    """Turn controller states."""
    AWAITING_HUMAN_PLAY = "awaiting_human_play"
    RESOLVING_UNIFY = "resolving_unify"
    AWAITING_DISCARD = "awaiting_discard"
    EXECUTING_AI_TURN = "executing_ai_turn"
    GAME_ENDED = "game_ended"


class GameResult(Enum):
    """How a finished game ended."""
    WIN = "win"
    DEADLOCK = "deadlock"


@dataclass(frozen=True)
class SideStats:
    """Per-side counters."""
    plays: int = 0
    passes: int = 0
    draws: int = 0
    unify_accepted: int = 0
    unify_declined: int = 0

    def bump(self, **deltas: int) -> SideStats:
        """Return new stats with the named counters incremented."""
        return replace(self, **{k: getattr(self, k) + v for k, v in deltas.items()})


@dataclass(frozen=True)
class GameStats:
    """Counters for both sides."""
    player: SideStats = field(default_factory=SideStats)
    ai: SideStats = field(default_factory=SideStats)

    def for_side(self, side: Side) -> SideStats:
        return self.player if side == Side.PLAYER else self.ai

    def bump(self, side: Side, **deltas: int) -> GameStats:
        if side == Side.PLAYER:
            return replace(self, player=self.player.bump(**deltas))
        return replace(self, ai=self.ai.bump(**deltas))


@dataclass(frozen=True)
class GameState:
    """
    Complete game state at a point in time.

    This is the canonical state the engine operates on.
    All turn-level changes go through the reducer.
    """
    # Zones
    deck: tuple[Card, ...] = ()
    player_hand: tuple[Card, ...] = ()
    ai_hand: tuple[Card, ...] = ()
    chain: tuple[Card, ...] = ()
    discard_pile: tuple[Card, ...] = ()

    # Turn tracking
    current_player: Side = Side.PLAYER
    turn_count: int = 1
    consecutive_passes: int = 0
    phase: TurnPhase = TurnPhase.AWAITING_HUMAN_PLAY

    # Set by chaos resolvers; a locked end accepts no plays
    locked_end: Position | None = None

    # Pending hand-limit discards for the human
    discards_required: int = 0

    # Outcome
    winner: Side | None = None
    result: GameResult | None = None

    stats: GameStats = field(default_factory=GameStats)

    # Applied actions, oldest first (for replay and logging)
    history: tuple[Any, ...] = ()

    @property
    def is_over(self) -> bool:
        return self.phase == TurnPhase.GAME_ENDED

    @property
    def deck_size(self) -> int:
        return len(self.deck)

    def hand(self, side: Side) -> tuple[Card, ...]:
        """Get the hand owned by side."""
        return self.player_hand if side == Side.PLAYER else self.ai_hand

    def with_hand(self, side: Side, cards: Sequence[Card]) -> GameState:
        """Return new state with side's hand replaced."""
        if side == Side.PLAYER:
            return self._copy_with(player_hand=tuple(cards))
        return self._copy_with(ai_hand=tuple(cards))

    def find_in_hand(self, side: Side, card_id: str) -> Card | None:
        """Find a card in side's hand by id."""
        for card in self.hand(side):
            if card.card_id == card_id:
                return card
        return None

    def all_cards(self) -> list[Card]:
        """Every card in every zone (used to check the partition invariant)."""
        return [
            *self.deck, *self.player_hand, *self.ai_hand,
            *self.chain, *self.discard_pile,
        ]

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)


# =============================================================================
# Zone primitives
# =============================================================================

def draw(state: GameState, who: Side) -> tuple[GameState, Card | None]:
    """
    Move the front card of the deck into who's hand.

    Returns (new state, drawn card). An empty deck is not an error:
    the state comes back unchanged with None.
    """
    if not state.deck:
        return state, None

    card = state.deck[0]
    new_state = state.with_hand(who, state.hand(who) + (card,))
    new_state = new_state._copy_with(
        deck=state.deck[1:],
        stats=state.stats.bump(who, draws=1),
    )
    return new_state, card


def play(state: GameState, card_id: str, position: Position, who: Side) -> tuple[GameState, bool]:
    """
    Move a card from who's hand onto the given chain end.

    Does not check connection legality. Returns (state, False) unchanged
    if the card is not in who's hand. On success the consecutive pass
    counter resets to 0.
    """
    card = state.find_in_hand(who, card_id)
    if card is None:
        return state, False

    new_hand = tuple(c for c in state.hand(who) if c.card_id != card_id)
    if position == Position.LEFT:
        new_chain = (card,) + state.chain
    else:
        new_chain = state.chain + (card,)

    new_state = state.with_hand(who, new_hand)._copy_with(
        chain=new_chain,
        consecutive_passes=0,
        stats=state.stats.bump(who, plays=1),
    )
    return new_state, True


def record_pass(state: GameState, who: Side) -> tuple[GameState, bool]:
    """
    Count a pass by who.

    Returns (new state, deadlocked). Deadlock is signalled once both sides
    have passed back to back without a play in between.
    """
    passes = state.consecutive_passes + 1
    new_state = state._copy_with(
        consecutive_passes=passes,
        stats=state.stats.bump(who, passes=1),
    )
    return new_state, passes >= DEADLOCK_PASSES


def check_win(state: GameState, who: Side) -> bool:
    """A side wins as soon as its hand is empty."""
    return len(state.hand(who)) == 0


def discard(state: GameState, who: Side, card_ids: Sequence[str]) -> tuple[GameState, bool]:
    """
    Move the given cards from who's hand to the discard pile.

    All ids must be distinct and present in the hand, otherwise nothing
    moves and (state, False) is returned.
    """
    ids = list(card_ids)
    if len(set(ids)) != len(ids):
        return state, False
    hand = state.hand(who)
    held = {c.card_id for c in hand}
    if any(card_id not in held for card_id in ids):
        return state, False

    wanted = set(ids)
    kept = tuple(c for c in hand if c.card_id not in wanted)
    dropped = tuple(c for c in hand if c.card_id in wanted)
    new_state = state.with_hand(who, kept)._copy_with(
        discard_pile=state.discard_pile + dropped,
    )
    return new_state, True


def excess_cards(state: GameState, who: Side, limit: int = HAND_LIMIT) -> int:
    """How many cards who holds above the hand limit."""
    return max(0, len(state.hand(who)) - limit)


def truncate_hand(state: GameState, who: Side, limit: int = HAND_LIMIT) -> GameState:
    """
    Discard from the front of who's hand (oldest cards first) down to limit.

    This is the AI's fixed hand-limit policy.
    """
    excess = excess_cards(state, who, limit)
    if excess == 0:
        return state
    oldest = [c.card_id for c in state.hand(who)[:excess]]
    new_state, _ = discard(state, who, oldest)
    return new_state
