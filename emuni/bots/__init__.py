"""
Bots module - AI opponent implementations.

Provides:
- BotPolicy: Interface for bot decision-making
- FirstLegalPolicy: Deterministic baseline
- RandomPolicy: Uniform random legal moves
- WigglePreferringPolicy: The standard opponent
"""

from .policy import (
    POLICIES,
    BotDecision,
    BotPolicy,
    FirstLegalPolicy,
    RandomPolicy,
    WigglePreferringPolicy,
    create_policy,
)

__all__ = [
    "POLICIES",
    "BotDecision",
    "BotPolicy",
    "FirstLegalPolicy",
    "RandomPolicy",
    "WigglePreferringPolicy",
    "create_policy",
]
