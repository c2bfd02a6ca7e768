"""
Engine Core - Deterministic EmUni rules and turn state machine.

The engine is the runtime that:
1. Builds the 54-card deck
2. Deals a GameState from an externally ordered deck
3. Decides which plays are legal
4. Applies actions via the reducer, one immutable state per transition
5. Hands Chaos plays to a pluggable resolver
"""

from .cards import Card, CardType, ChaosType, ForceColor, Position, build_deck, shuffle_deck
from .rules import (
    Move,
    can_connect,
    consecutive_forces,
    is_adjacent_to_wiggle,
    legal_moves,
    validate_chain,
)
from .state import GameResult, GameState, GameStats, Side, SideStats, TurnPhase
from .action import Action, ActionResult, ActionType, ErrorCode, PlayOutcome
from .chaos import ChaosResolution, ChaosResolver, UnimplementedChaosResolver
from .reducer import (
    Reducer,
    ai_turn,
    apply_action,
    attempt_play,
    discard_cards,
    new_game,
    pass_turn,
    resolve_unify,
)
from .snapshot import snapshot

__all__ = [
    "Card",
    "CardType",
    "ChaosType",
    "ForceColor",
    "Position",
    "build_deck",
    "shuffle_deck",
    "Move",
    "can_connect",
    "consecutive_forces",
    "is_adjacent_to_wiggle",
    "legal_moves",
    "validate_chain",
    "GameResult",
    "GameState",
    "GameStats",
    "Side",
    "SideStats",
    "TurnPhase",
    "Action",
    "ActionResult",
    "ActionType",
    "ErrorCode",
    "PlayOutcome",
    "ChaosResolution",
    "ChaosResolver",
    "UnimplementedChaosResolver",
    "Reducer",
    "ai_turn",
    "apply_action",
    "attempt_play",
    "discard_cards",
    "new_game",
    "pass_turn",
    "resolve_unify",
    "snapshot",
]
