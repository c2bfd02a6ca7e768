"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Client starts a session -> deck built, shuffled (seeded), dealt
2. During the game the client submits the human's actions; the game loop
   runs the AI's turns in between
3. Game ends or client quits -> session removed, all state dropped

PERSISTENCE RULES:
- No database; sessions live in memory only
- A seed plus the action history is enough to replay a game
"""

from __future__ import annotations
import logging
import os
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..bots import BotPolicy, create_policy
from ..engine_core.cards import build_deck, shuffle_deck
from ..engine_core.reducer import Reducer, new_game
from ..engine_core.state import GameState
from ..exceptions import SessionNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_BOT = os.getenv("EMUNI_DEFAULT_BOT", "medium")
DEFAULT_AI_DELAY = float(os.getenv("EMUNI_AI_DELAY", "0"))


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"  # Waiting on the human
    AI_TURN = "ai_turn"  # AI turn in flight
    GAME_OVER = "game_over"  # Game completed
    ABANDONED = "abandoned"  # User quit


@dataclass
class Session:
    """
    An ephemeral game session.

    Contains:
    - The current canonical game state
    - The reducer (with the AI policy plugged in)
    - A lock so only one action is processed at a time
    - Session metadata
    """
    session_id: str
    game_state: GameState
    reducer: Reducer
    created_at: float
    seed: int
    bot_name: str
    ai_delay: float = 0.0

    state: SessionState = SessionState.ACTIVE
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def policy(self) -> BotPolicy:
        return self.reducer.policy

    def is_active(self) -> bool:
        """Check if session is still active."""
        return self.state in {SessionState.ACTIVE, SessionState.AI_TURN}


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with a freshly dealt game
    - Track active sessions
    - Clean up completed sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        seed: int | None = None,
        bot: str | None = None,
        ai_delay: float | None = None,
    ) -> Session:
        """
        Create a new game session.

        Args:
            seed: Shuffle and bot seed (random if not given)
            bot: Bot policy name (see bots.POLICIES)
            ai_delay: Seconds to pause before each AI turn

        Returns:
            New Session with the human to move

        Raises:
            UnknownBotError: if bot is not a registered policy
        """
        if seed is None:
            seed = random.randrange(2**31)
        bot_name = bot or DEFAULT_BOT

        policy = create_policy(bot_name, seed=seed)
        game_state = new_game(shuffle_deck(build_deck(), seed=seed))

        session = Session(
            session_id=str(uuid.uuid4()),
            game_state=game_state,
            reducer=Reducer(policy=policy),
            created_at=time.time(),
            seed=seed,
            bot_name=bot_name,
            ai_delay=DEFAULT_AI_DELAY if ai_delay is None else ai_delay,
        )
        self._sessions[session.session_id] = session
        logger.info("Created session %s (seed=%d, bot=%s)", session.session_id, seed, bot_name)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> Session:
        """
        Get a session by ID.

        Raises:
            SessionNotFoundError: if the session does not exist or has ended
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop it from memory.

        Returns False if the session did not exist.
        """
        session = self._sessions.pop(session_id, None)
        if not session:
            return False
        if reason == "completed":
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Remove finished sessions older than max_age.

        Returns the number of sessions removed.
        """
        current_time = time.time()
        to_remove = [
            session_id for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.is_active()
        ]
        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)
