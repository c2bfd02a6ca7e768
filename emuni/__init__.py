"""
EmUni - Card game rules engine

A deterministic rules engine for EmUni, a two-player (human vs. AI) card game
where players empty their hand by attaching cards to either end of a shared
chain. The package provides:
- Deck construction
- Connection legality rules
- An immutable, per-transition game state and turn controller
- Bot policies for the AI opponent
- Session management, a REST API and a terminal front-end
"""

__version__ = "0.1.0"
