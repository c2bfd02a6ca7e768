"""
Bot Policy - Interface for the AI opponent's decisions.

A BotPolicy looks at its hand and the chain and returns a decision.
Decisions include:
- Which card to play and to which end (or None to pass)
- Whether to take a UNIFY bonus

Policies only read the rules module; they never touch game state.
"""

from __future__ import annotations
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from ..engine_core.cards import Card, Position
from ..engine_core.constants import AI_UNIFY_THRESHOLD
from ..engine_core.rules import Move, legal_moves
from ..exceptions import UnknownBotError


@dataclass
class BotDecision:
    """
    A move chosen by a bot.

    Contains:
    - The move to make
    - Explanation (for UI/debugging)
    - How many legal moves were considered
    """
    move: Move
    explanation: str = ""
    evaluated_moves: int = 0


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how the AI selects moves. The engine calls
    select_move once per AI turn and accept_unify when an AI play
    earns the bonus.
    """

    @abstractmethod
    def select_move(
        self,
        hand: Sequence[Card],
        chain: Sequence[Card],
        locked_end: Position | None = None,
    ) -> BotDecision | None:
        """
        Select a move from the legal moves.

        Args:
            hand: The AI's hand
            chain: Current chain
            locked_end: Chain end that accepts no plays, if any

        Returns:
            BotDecision, or None to pass
        """
        pass

    def accept_unify(self, hand: Sequence[Card]) -> bool:
        """Take the UNIFY draw only while the hand is small."""
        return len(hand) < AI_UNIFY_THRESHOLD

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always plays the first legal move.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def select_move(self, hand, chain, locked_end=None):
        moves = legal_moves(hand, chain, locked_end)
        if not moves:
            return None
        return BotDecision(
            move=moves[0],
            explanation="Selected first legal move",
            evaluated_moves=len(moves),
        )


class RandomPolicy(BotPolicy):
    """
    Random policy - picks uniformly among legal moves.

    Seeded so games stay reproducible.
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_move(self, hand, chain, locked_end=None):
        moves = legal_moves(hand, chain, locked_end)
        if not moves:
            return None
        return BotDecision(
            move=self.rng.choice(moves),
            explanation="Selected randomly",
            evaluated_moves=len(moves),
        )


class WigglePreferringPolicy(BotPolicy):
    """
    The standard opponent.

    Plays a Wiggle most of the time when one fits, otherwise leans
    towards the right end, otherwise anything legal.
    """

    def __init__(
        self,
        seed: int | None = None,
        wiggle_bias: float = 0.7,
        right_bias: float = 0.5,
    ):
        self.rng = random.Random(seed)
        self.wiggle_bias = wiggle_bias
        self.right_bias = right_bias

    def select_move(self, hand, chain, locked_end=None):
        moves = legal_moves(hand, chain, locked_end)
        if not moves:
            return None

        wiggle_moves = [m for m in moves if m.card.is_wiggle]
        right_moves = [m for m in moves if m.position == Position.RIGHT]

        if wiggle_moves and self.rng.random() < self.wiggle_bias:
            move, why = self.rng.choice(wiggle_moves), "Preferred a Wiggle"
        elif right_moves and self.rng.random() < self.right_bias:
            move, why = self.rng.choice(right_moves), "Preferred the right end"
        else:
            move, why = self.rng.choice(moves), "Selected randomly"

        return BotDecision(move=move, explanation=why, evaluated_moves=len(moves))


POLICIES: dict[str, type[BotPolicy]] = {
    "first": FirstLegalPolicy,
    "random": RandomPolicy,
    "medium": WigglePreferringPolicy,
}


def create_policy(name: str, seed: int | None = None) -> BotPolicy:
    """
    Create a policy by registry name.

    Raises:
        UnknownBotError: if name is not registered
    """
    policy_cls = POLICIES.get(name)
    if policy_cls is None:
        raise UnknownBotError(f"Unknown bot '{name}'. Choose from: {', '.join(sorted(POLICIES))}")
    if policy_cls is FirstLegalPolicy:
        return policy_cls()
    return policy_cls(seed=seed)
