"""
FastAPI Application - REST API for EmUni clients.

Endpoints:
    GET    /health                               Health check
    POST   /api/v1/sessions                      Start a game
    GET    /api/v1/sessions                      List active sessions
    GET    /api/v1/sessions/{id}                 Get session status
    DELETE /api/v1/sessions/{id}                 End session
    GET    /api/v1/sessions/{id}/state           Get game state
    GET    /api/v1/sessions/{id}/moves           Get the player's legal moves
    POST   /api/v1/sessions/{id}/play            Play a card
    POST   /api/v1/sessions/{id}/unify           Accept/decline UNIFY
    POST   /api/v1/sessions/{id}/pass            Pass
    POST   /api/v1/sessions/{id}/discard         Discard down to the hand limit

AI Turn Flow:
    Every successful human action that ends the human's turn is followed
    by the AI's turn in the same request. The response carries both the
    human's state changes and the AI's (`ai_actions`), and the status
    tells the client what to do next.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Union
import os

from .. import __version__

# Environment configuration
EMUNI_ENV = os.getenv("EMUNI_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

ERROR_STATUS = {
    "SESSION_NOT_FOUND": 404,
    "OUT_OF_TURN": 409,
    "WRONG_PHASE": 409,
    "GAME_OVER": 409,
}


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import APIService
    from .schemas import (
        ActionResponse,
        CreateSessionRequest,
        DiscardRequest,
        EndSessionResponse,
        ErrorResponse,
        GameStateResponse,
        HealthResponse,
        MovesResponse,
        PlayRequest,
        SessionListResponse,
        SessionResponse,
        UnifyRequest,
    )

    app = FastAPI(
        title="EmUni Engine API",
        description="""
EmUni - Bridge the incompatible. Connect Gravity and Forces using Wiggles.

## Turn Flow

1. `POST /sessions` deals a new game; the player moves first.
2. `POST /play` with a card and an end. If the status comes back
   `waiting_unify`, answer with `POST /unify`; if `waiting_discard`,
   send `POST /discard` with the excess cards.
3. The AI replies within the same request (`ai_actions`).
4. Repeat until the status is `game_over` (a win or a deadlock).

## Error Codes

| Code | Description |
|------|-------------|
| `ILLEGAL_MOVE` | Card cannot connect at that end |
| `CARD_NOT_IN_HAND` | Card is not in your hand |
| `OUT_OF_TURN` | Not your turn, or the AI is still moving |
| `WRONG_PHASE` | A UNIFY answer or discard is pending |
| `GAME_OVER` | The game has ended |
| `INVALID_DISCARD` | Wrong cards or count for the discard |
| `SESSION_NOT_FOUND` | Session does not exist |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def respond(response):
        """Turn an ErrorResponse into a JSONResponse with the right status."""
        if isinstance(response, ErrorResponse):
            return JSONResponse(
                status_code=ERROR_STATUS.get(response.error_code.value, 400),
                content=response.model_dump(mode="json"),
            )
        return response

    error_responses = {
        400: {"model": ErrorResponse, "description": "Rejected action"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "Not your turn or wrong phase"},
    }

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Unknown bot"}},
        tags=["Sessions"],
        summary="Start a new game",
    )
    async def create_session(
        body: CreateSessionRequest | None = None,
    ) -> Union[SessionResponse, JSONResponse]:
        """Deal a new game against the chosen bot."""
        return respond(api_service.create_session(body or CreateSessionRequest()))

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """List all active session IDs."""
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> Union[SessionResponse, JSONResponse]:
        """Get the current status of a game session."""
        return respond(api_service.get_session(session_id))

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a game session",
    )
    async def end_session(
        session_id: str,
        reason: str = Query("user_ended", description="Reason for ending"),
    ) -> EndSessionResponse:
        """End a game session and release resources."""
        success = api_service.end_session(session_id, reason)
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================
    # Action endpoints are plain functions: AI pacing sleeps, so they run
    # in the threadpool instead of on the event loop.

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the game state",
    )
    async def get_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        """Chain, your hand, deck size and the AI's hand size."""
        return respond(api_service.get_state(session_id))

    @app.get(
        "/api/v1/sessions/{session_id}/moves",
        response_model=MovesResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="List your legal moves",
    )
    async def get_moves(session_id: str) -> Union[MovesResponse, JSONResponse]:
        return respond(api_service.get_moves(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/play",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Play a card to a chain end",
    )
    def play_card(session_id: str, body: PlayRequest) -> Union[ActionResponse, JSONResponse]:
        """
        Play a card. Illegal plays are rejected and change nothing;
        try another card or end.
        """
        return respond(api_service.play(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/unify",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Accept or decline the UNIFY bonus",
    )
    def resolve_unify(session_id: str, body: UnifyRequest) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.resolve_unify(session_id, body))

    @app.post(
        "/api/v1/sessions/{session_id}/pass",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Pass your turn",
    )
    def pass_turn(session_id: str) -> Union[ActionResponse, JSONResponse]:
        """Two passes in a row end the game in a deadlock."""
        return respond(api_service.pass_turn(session_id))

    @app.post(
        "/api/v1/sessions/{session_id}/discard",
        response_model=ActionResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Discard down to the hand limit",
    )
    def discard(session_id: str, body: DiscardRequest) -> Union[ActionResponse, JSONResponse]:
        return respond(api_service.discard(session_id, body))

    # =========================================================================
    # System Endpoints
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="emuni-engine",
            version=__version__,
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "EmUni Engine API",
            "version": __version__,
            "environment": EMUNI_ENV,
            "docs": "/api/docs",
            "health": "/health",
        }

    return app
