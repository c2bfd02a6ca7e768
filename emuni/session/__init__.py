"""
Session Module - Manages ephemeral game sessions.

A session represents one play-through of a game:
- Created when the user starts a game
- Holds the current game state and the AI policy
- Runs AI turns after each human action
- Destroyed when the game ends or the user quits

Sessions are EPHEMERAL: nothing is persisted.
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, TurnResult
from .autoplay import SimulationSummary, play_game, simulate

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "TurnResult",
    "SimulationSummary",
    "play_game",
    "simulate",
]
