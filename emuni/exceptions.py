"""Custom exceptions for the EmUni package.

Rule violations during play are not exceptions: the engine reports them as
rejected ActionResults. These exceptions cover bad input at the package
boundary (building a game, looking up a session).
"""
from __future__ import annotations


class EmuniError(Exception):
    """Base exception for all EmUni errors."""
    pass


class InvalidDeckError(EmuniError):
    """Raised when new_game is given a deck that is not 54 unique cards."""
    pass


class SessionNotFoundError(EmuniError):
    """Raised when a session id does not exist or has ended."""
    pass


class UnknownBotError(EmuniError):
    """Raised when a bot policy name is not registered."""
    pass


__all__ = [
    "EmuniError",
    "InvalidDeckError",
    "SessionNotFoundError",
    "UnknownBotError",
]
