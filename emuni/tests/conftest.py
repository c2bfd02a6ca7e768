"""
Pytest fixtures for EmUni tests.
"""

import pytest

from ..bots import FirstLegalPolicy
from ..engine_core.cards import Card, ChaosType, ForceColor, build_deck, shuffle_deck
from ..engine_core.reducer import Reducer, new_game
from ..engine_core.state import GameState


class CardFactory:
    """Builds loose cards with unique ids for hand-made scenarios."""

    def __init__(self):
        self._count = 0

    def _next_id(self, prefix: str) -> str:
        self._count += 1
        return f"{prefix}_{self._count}"

    def gravity(self, variant: int = 1) -> Card:
        return Card.gravity(self._next_id("g"), variant)

    def force(self, color: ForceColor = ForceColor.RED) -> Card:
        return Card.force(self._next_id("f"), color)

    def wiggle(self, variant: int = 1) -> Card:
        return Card.wiggle(self._next_id("w"), variant)

    def chaos(self, chaos_type: ChaosType = ChaosType.SQUISH) -> Card:
        return Card.chaos(self._next_id("c"), chaos_type)

    def many(self, count: int, kind: str = "gravity") -> tuple[Card, ...]:
        return tuple(getattr(self, kind)() for _ in range(count))


@pytest.fixture
def cards() -> CardFactory:
    """Fresh card factory."""
    return CardFactory()


@pytest.fixture
def full_deck():
    """The unshuffled 54-card deck."""
    return build_deck()


@pytest.fixture
def dealt_game() -> GameState:
    """A game dealt from a seeded shuffle, player to move."""
    return new_game(shuffle_deck(build_deck(), seed=42))


@pytest.fixture
def first_policy() -> FirstLegalPolicy:
    return FirstLegalPolicy()


@pytest.fixture
def reducer(first_policy) -> Reducer:
    """Reducer with a deterministic AI."""
    return Reducer(policy=first_policy)
