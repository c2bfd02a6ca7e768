"""
Rules - Connection legality and bonus triggers.

Pure, stateless predicates. Nothing here mutates game state, so bots and
UIs can call these freely on hypothetical chains while enumerating moves.

Connection rules (candidate card attached next to a chain end):
- Empty chain: anything goes
- Wiggle end: anything goes (universal acceptor)
- Gravity end: Gravity, Wiggle, Chaos
- Force end: Force (only while the run of Forces is under 2), Wiggle, Chaos
- Chaos end: anything goes (not reachable in normal play)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from .cards import Card, CardType, Position
from .constants import MAX_CONSECUTIVE_FORCES


@dataclass(frozen=True)
class Move:
    """A candidate play: a card from hand and the chain end it goes to."""
    card: Card
    position: Position


def can_connect(candidate: Card, chain_end: Card | None, consecutive_forces_at_end: int) -> bool:
    """
    Check whether candidate may be attached next to chain_end.

    Args:
        candidate: Card being played
        chain_end: Card currently at that end, or None for an empty chain
        consecutive_forces_at_end: Length of the Force run at that end

    Returns:
        True if the connection is legal
    """
    if chain_end is None:
        return True

    end_type = chain_end.card_type

    if end_type == CardType.WIGGLE:
        return True

    if end_type == CardType.GRAVITY:
        return candidate.card_type in (CardType.GRAVITY, CardType.WIGGLE, CardType.CHAOS)

    if end_type == CardType.FORCE:
        if candidate.card_type == CardType.GRAVITY:
            return False
        if candidate.card_type == CardType.FORCE:
            return consecutive_forces_at_end < MAX_CONSECUTIVE_FORCES
        return True

    # Chaos cards resolve as they are played; an exposed Chaos end accepts anything.
    return True


def chain_end(chain: Sequence[Card], end: Position) -> Card | None:
    """Card at the given end of the chain, or None if empty."""
    if not chain:
        return None
    return chain[0] if end == Position.LEFT else chain[-1]


def consecutive_forces(chain: Sequence[Card], end: Position) -> int:
    """Count Force cards from the given end, stopping at the first non-Force."""
    cards = chain if end == Position.LEFT else reversed(chain)
    count = 0
    for card in cards:
        if card.card_type != CardType.FORCE:
            break
        count += 1
    return count


def is_adjacent_to_wiggle(chain: Sequence[Card], end: Position, played_card: Card) -> bool:
    """
    Check whether a just-played card earns the UNIFY bonus.

    chain is the chain *after* played_card was inserted at end. The bonus
    triggers when the card one step inward from that end (the previous end
    card) is a Wiggle. Wiggle and Chaos plays never trigger their own bonus.
    """
    if len(chain) < 2:
        return False

    if played_card.card_type in (CardType.WIGGLE, CardType.CHAOS):
        return False

    neighbour = chain[1] if end == Position.LEFT else chain[-2]
    return neighbour.card_type == CardType.WIGGLE


def can_play_at(chain: Sequence[Card], card: Card, end: Position) -> bool:
    """Check whether card can be attached at the given end of chain."""
    return can_connect(card, chain_end(chain, end), consecutive_forces(chain, end))


def legal_moves(
    hand: Sequence[Card],
    chain: Sequence[Card],
    locked_end: Position | None = None,
) -> list[Move]:
    """
    Enumerate every legal (card, end) pair for a hand.

    Moves are ordered by hand order, LEFT before RIGHT.
    """
    moves = []
    for card in hand:
        for end in Position:
            if end == locked_end:
                continue
            if can_play_at(chain, card, end):
                moves.append(Move(card=card, position=end))
    return moves


def validate_chain(chain: Sequence[Card]) -> list[int]:
    """
    Replay the chain left to right and report links a naive check rejects.

    Returns indices i where chain[i] could not have been appended after
    chain[:i]. Chains are only checked at play time, so removals by chaos
    effects can legitimately leave such links behind; this is diagnostics.
    """
    bad = []
    for i in range(1, len(chain)):
        prefix = chain[:i]
        if not can_connect(chain[i], prefix[-1], consecutive_forces(prefix, Position.RIGHT)):
            bad.append(i)
    return bad
