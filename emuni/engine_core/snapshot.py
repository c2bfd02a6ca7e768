"""
Snapshot - JSON-ready views of cards, actions and game state.

The AI hand is hidden by default; presentation layers showing the game to
the human should only see its size.
"""

from __future__ import annotations

from .action import Action
from .cards import Card
from .state import GameState, SideStats


def card_to_dict(card: Card) -> dict[str, object]:
    return {
        "card_id": card.card_id,
        "type": card.card_type.value,
        "name": card.name,
        "variant": card.variant,
        "color": card.color.value if card.color else None,
        "chaos_type": card.chaos_type.value if card.chaos_type else None,
    }


def action_to_dict(action: Action) -> dict[str, object]:
    return {
        "type": action.action_type.value,
        "side": action.side.value,
        "card_id": action.card_id,
        "position": action.position.value if action.position else None,
        "accept": action.accept,
        "card_ids": list(action.card_ids),
    }


def _stats_to_dict(stats: SideStats) -> dict[str, int]:
    return {
        "plays": stats.plays,
        "passes": stats.passes,
        "draws": stats.draws,
        "unify_accepted": stats.unify_accepted,
        "unify_declined": stats.unify_declined,
    }


def snapshot(state: GameState, reveal_ai_hand: bool = False) -> dict[str, object]:
    """Return a JSON-serializable view of the game state."""
    return {
        "phase": state.phase.value,
        "current_player": state.current_player.value,
        "turn_count": state.turn_count,
        "consecutive_passes": state.consecutive_passes,
        "locked_end": state.locked_end.value if state.locked_end else None,
        "discards_required": state.discards_required,
        "winner": state.winner.value if state.winner else None,
        "result": state.result.value if state.result else None,
        "deck_size": state.deck_size,
        "chain": [card_to_dict(c) for c in state.chain],
        "player_hand": [card_to_dict(c) for c in state.player_hand],
        "ai_hand": [card_to_dict(c) for c in state.ai_hand] if reveal_ai_hand else None,
        "ai_hand_size": len(state.ai_hand),
        "discard_pile_size": len(state.discard_pile),
        "stats": {
            "player": _stats_to_dict(state.stats.player),
            "ai": _stats_to_dict(state.stats.ai),
        },
        "history": [action_to_dict(a) for a in state.history],
    }
