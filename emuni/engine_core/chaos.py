"""
Chaos Resolution - Extension point for Chaos card effects.

Chaos cards (Squish!, Gauge-Break!, Big Bang!) are meant to remove cards or
lock a chain end when played. Their exact mechanics are not settled, so the
engine places the card on the chain like any other and then hands the state
to a ChaosResolver. The default resolver does nothing and says so.

A custom resolver may return a state with chain cards moved to the discard
pile or locked_end set; the reducer honours locked_end on later plays.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .cards import Card, Position
from .state import GameState

logger = logging.getLogger(__name__)


@dataclass
class ChaosResolution:
    """What a resolver did with a freshly played Chaos card."""
    state: GameState
    implemented: bool
    description: str


class ChaosResolver(ABC):
    """Resolves the effect of a Chaos card right after it joins the chain."""

    @abstractmethod
    def resolve(self, state: GameState, card: Card, position: Position) -> ChaosResolution:
        """
        Apply the card's effect.

        Args:
            state: State with the Chaos card already on the chain
            card: The Chaos card that was played
            position: Chain end it was played to

        Returns:
            ChaosResolution with the resulting state
        """


class UnimplementedChaosResolver(ChaosResolver):
    """Leaves the state untouched and reports the effect as unimplemented."""

    def resolve(self, state: GameState, card: Card, position: Position) -> ChaosResolution:
        logger.info("Chaos effect %s not implemented; card stays on the chain", card.name)
        return ChaosResolution(
            state=state,
            implemented=False,
            description=f"{card.name} effect not implemented",
        )
