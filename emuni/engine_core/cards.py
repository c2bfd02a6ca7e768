"""
Cards - Card types and the deck builder.

The EmUni deck has a fixed composition of 54 cards:
- 18 Gravity (6 each of Ball-1, Ball-2, Ball-3)
- 12 Force (3 each of red, blue, yellow, green)
- 18 Wiggle (6 each of Wave-1, Wave-2, Wave-3)
- 6 Chaos (2 each of Squish!, Gauge-Break!, Big Bang!)

Cards are immutable. A card's identity is its card_id, which stays the same
whether the card sits in the deck, a hand, the chain or the discard pile.
"""

from __future__ import annotations
import random
from dataclasses import dataclass
from enum import Enum
from typing import Sequence


class CardType(Enum):
    """The four card categories."""
    GRAVITY = "gravity"
    FORCE = "force"
    WIGGLE = "wiggle"
    CHAOS = "chaos"


class ForceColor(Enum):
    """Force card colors."""
    RED = "red"
    BLUE = "blue"
    YELLOW = "yellow"
    GREEN = "green"


class ChaosType(Enum):
    """Chaos card kinds."""
    SQUISH = "squish"
    GAUGE_BREAK = "gauge-break"
    BIG_BANG = "big-bang"


class Position(Enum):
    """The two addressable ends of the chain."""
    LEFT = "left"
    RIGHT = "right"


CHAOS_NAMES = {
    ChaosType.SQUISH: "Squish!",
    ChaosType.GAUGE_BREAK: "Gauge-Break!",
    ChaosType.BIG_BANG: "Big Bang!",
}

# Cards per sub-category
GRAVITY_PER_VARIANT = 6
FORCE_PER_COLOR = 3
WIGGLE_PER_VARIANT = 6
CHAOS_PER_TYPE = 2
VARIANTS = (1, 2, 3)


@dataclass(frozen=True)
class Card:
    """
    A single EmUni card.

    Only the attribute matching the card type is set:
    variant for Gravity/Wiggle, color for Force, chaos_type for Chaos.
    """
    card_id: str
    card_type: CardType
    name: str
    variant: int | None = None
    color: ForceColor | None = None
    chaos_type: ChaosType | None = None

    def __hash__(self):
        return hash(self.card_id)

    def __eq__(self, other):
        if not isinstance(other, Card):
            return False
        return self.card_id == other.card_id

    @property
    def is_gravity(self) -> bool:
        return self.card_type == CardType.GRAVITY

    @property
    def is_force(self) -> bool:
        return self.card_type == CardType.FORCE

    @property
    def is_wiggle(self) -> bool:
        return self.card_type == CardType.WIGGLE

    @property
    def is_chaos(self) -> bool:
        return self.card_type == CardType.CHAOS

    # Factories

    @classmethod
    def gravity(cls, card_id: str, variant: int) -> Card:
        return cls(card_id=card_id, card_type=CardType.GRAVITY,
                   name=f"Ball-{variant}", variant=variant)

    @classmethod
    def force(cls, card_id: str, color: ForceColor) -> Card:
        return cls(card_id=card_id, card_type=CardType.FORCE,
                   name=f"{color.value.capitalize()} Force", color=color)

    @classmethod
    def wiggle(cls, card_id: str, variant: int) -> Card:
        return cls(card_id=card_id, card_type=CardType.WIGGLE,
                   name=f"Wave-{variant}", variant=variant)

    @classmethod
    def chaos(cls, card_id: str, chaos_type: ChaosType) -> Card:
        return cls(card_id=card_id, card_type=CardType.CHAOS,
                   name=CHAOS_NAMES[chaos_type], chaos_type=chaos_type)


def build_deck() -> tuple[Card, ...]:
    """
    Build the fixed 54-card deck.

    Ids are assigned in build order (card_0 .. card_53). The order itself
    carries no meaning; shuffling is the caller's business.
    """
    cards: list[Card] = []

    def next_id() -> str:
        return f"card_{len(cards)}"

    for variant in VARIANTS:
        for _ in range(GRAVITY_PER_VARIANT):
            cards.append(Card.gravity(next_id(), variant))

    for color in ForceColor:
        for _ in range(FORCE_PER_COLOR):
            cards.append(Card.force(next_id(), color))

    for variant in VARIANTS:
        for _ in range(WIGGLE_PER_VARIANT):
            cards.append(Card.wiggle(next_id(), variant))

    for chaos_type in ChaosType:
        for _ in range(CHAOS_PER_TYPE):
            cards.append(Card.chaos(next_id(), chaos_type))

    return tuple(cards)


def shuffle_deck(deck: Sequence[Card], seed: int | None = None) -> tuple[Card, ...]:
    """Return a shuffled copy of the deck. Seeded for reproducible games."""
    rng = random.Random(seed)
    shuffled = list(deck)
    rng.shuffle(shuffled)
    return tuple(shuffled)


def deck_composition(cards: Sequence[Card]) -> dict[str, int]:
    """Count cards per type and per sub-category (e.g. "gravity", "gravity:1", "force:red")."""
    counts: dict[str, int] = {}
    for card in cards:
        keys = [card.card_type.value]
        if card.variant is not None:
            keys.append(f"{card.card_type.value}:{card.variant}")
        if card.color is not None:
            keys.append(f"{card.card_type.value}:{card.color.value}")
        if card.chaos_type is not None:
            keys.append(f"{card.card_type.value}:{card.chaos_type.value}")
        for key in keys:
            counts[key] = counts.get(key, 0) + 1
    return counts
