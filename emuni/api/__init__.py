"""
API Module - REST interface for game clients.

Exposes the engine via a REST API. A client:
1. Creates a game session
2. Reads the state and legal moves
3. Submits plays, passes, UNIFY answers and discards
4. Receives the AI's reply in the same response

All state is session-scoped. No accounts, no persistence.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    PlayRequest,
    UnifyRequest,
    DiscardRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    ActionResponse,
    MovesResponse,
    ErrorResponse,
    # Shared
    CardInfo,
    MoveInfo,
    ErrorCode,
    SessionStatus,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "PlayRequest",
    "UnifyRequest",
    "DiscardRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "ActionResponse",
    "MovesResponse",
    "ErrorResponse",
    # Shared
    "CardInfo",
    "MoveInfo",
    "ErrorCode",
    "SessionStatus",
    # Service
    "APIService",
    "create_app",
]
