"""
FastAPI Application - REST + WebSocket API for game clients.

Endpoints:
    POST   /api/v1/sessions                Create game session
    GET    /api/v1/sessions                List active sessions
    GET    /api/v1/sessions/{id}           Get session status
    DELETE /api/v1/sessions/{id}           End session
    GET    /api/v1/sessions/{id}/state     Get full game state
    POST   /api/v1/sessions/{id}/actions   Submit an action
    WS     /api/v1/sessions/{id}/ws        WebSocket for state broadcasts
    GET    /health                         Health check

Action Flow:
    1. POST /actions queues the action on the session
    2. The session drains its queue into the engine, one action at a time
    3. Automa seats play until a human seat is up again
    4. The response carries every applied action and the new state;
       WebSocket subscribers get the same state as a state_update

Bodies in both directions are the Pydantic models in schemas.py.
"""

from typing import Optional, Union
import json
import logging
import os

from fastapi import FastAPI, Query, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from .schemas import (
    # Request models
    CreateSessionRequest,
    SubmitActionRequest,
    # Response models
    ActionResponse,
    EndSessionResponse,
    ErrorResponse,
    GameStateResponse,
    HealthResponse,
    SessionListResponse,
    SessionResponse,
    # Enums
    ErrorCode,
)
from .service import APIService

# Settings read once at import
CARAVAN_ENV = os.getenv("CARAVAN_ENV", "development")
CARAVAN_SESSION_TTL = int(os.getenv("CARAVAN_SESSION_TTL", "3600"))
CARAVAN_LOG_LEVEL = os.getenv("CARAVAN_LOG_LEVEL", "INFO").upper()
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)

# HTTP status per engine error code
ERROR_STATUS = {
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.AFFORDABILITY_ERROR: 400,
    ErrorCode.ILLEGAL_MOVE: 409,
    ErrorCode.STATE_ERROR: 409,
    ErrorCode.SESSION_NOT_FOUND: 404,
    ErrorCode.INTERNAL_ERROR: 500,
}


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Build the Caravan app around an APIService.

    Tests pass their own service so they can inspect sessions directly;
    otherwise one is created with CARAVAN_SESSION_TTL.
    """
    logging.getLogger("caravan").setLevel(CARAVAN_LOG_LEVEL)

    app = FastAPI(
        title="Caravan Engine API",
        description="""
Crystal-trading card game engine with automa opponents.

## Action Flow

`POST /actions` applies one action for the current seat. Automa seats
then play until a human seat is up, and the response lists every
applied action together with the resulting state.

## Error Codes

| Code | Description |
|------|-------------|
| `VALIDATION_ERROR` | Bad index, bounds or payload |
| `AFFORDABILITY_ERROR` | Not enough crystals |
| `ILLEGAL_MOVE` | Wrong turn or forbidden move |
| `STATE_ERROR` | Game over or unknown action |
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

    api_service = service or APIService(session_ttl=CARAVAN_SESSION_TTL)

    # session id -> open sockets
    ws_connections: dict[str, list[WebSocket]] = {}

    # =========================================================================
    # Helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Wrap an ErrorResponse with the HTTP status for its code."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    async def broadcast_to_session(session_id: str, message: dict):
        """Send `message` to every subscriber of a session, dropping closed sockets."""
        subscribers = ws_connections.get(session_id, [])
        closed = []
        for subscriber in subscribers:
            try:
                await subscriber.send_json(message)
            except (RuntimeError, WebSocketDisconnect):
                closed.append(subscriber)
        for subscriber in closed:
            subscribers.remove(subscriber)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Create a new game session",
    )
    async def create_session(
        body: CreateSessionRequest,
    ) -> Union[SessionResponse, JSONResponse]:
        """
        Create a new game session.

        Players 1..num_humans are played by clients, the rest by the
        chosen bot policy. Automa seats that come first play right away.
        """
        response = api_service.create_session(body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List active sessions",
    )
    async def list_sessions() -> SessionListResponse:
        """IDs of sessions still in play."""
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
        response = api_service.get_session(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

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
        """Drop a session; WebSocket subscribers get a session_ended message."""
        success = api_service.end_session(session_id, reason)
        if session_id in ws_connections:
            await broadcast_to_session(session_id, {"type": "session_ended"})
        return EndSessionResponse(success=success, session_id=session_id)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the full game state",
    )
    async def get_game_state(session_id: str) -> Union[GameStateResponse, JSONResponse]:
        response = api_service.get_game_state(session_id)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    @app.post(
        "/api/v1/sessions/{session_id}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid or unaffordable action"},
            404: {"model": ErrorResponse, "description": "Session not found"},
            409: {"model": ErrorResponse, "description": "Move not allowed now"},
        },
        tags=["Game"],
        summary="Submit an action for the current player",
    )
    async def submit_action(
        session_id: str,
        body: SubmitActionRequest,
    ) -> Union[ActionResponse, JSONResponse]:
        """
        Submit an action.

        **Request Body:**
        ```json
        {"action": {"kind": "acquire_card", "position": 2,
                    "deposits": {"1": "yellow", "2": "yellow"}}}
        ```
        """
        response = api_service.submit_action(session_id, body)
        if isinstance(response, ErrorResponse):
            return make_error_response(response)

        await broadcast_to_session(session_id, {
            "type": "state_update",
            "payload": response.game_state.model_dump(mode="json"),
        })
        if response.game_state.game_over:
            await broadcast_to_session(session_id, {
                "type": "game_over",
                "payload": {"winner": response.game_state.winner.model_dump()
                            if response.game_state.winner else None},
            })
        return response

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/sessions/{session_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, session_id: str):
        """
        Push channel for one session.

        Messages from server:
        - state_update: Game state changed
        - game_over: Game ended
        - session_ended: Session was deleted
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        subscribers = ws_connections.setdefault(session_id, [])
        subscribers.append(websocket)

        try:
            response = api_service.get_game_state(session_id)
            kind = "error" if isinstance(response, ErrorResponse) else "state_update"
            await websocket.send_json({"type": kind, "payload": response.model_dump(mode="json")})

            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                    if isinstance(message, dict) and message.get("type") == "ping":
                        await websocket.send_json({"type": "pong"})
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })

        except WebSocketDisconnect:
            logger.debug("WebSocket closed for session %s", session_id)
        finally:
            if websocket in subscribers:
                subscribers.remove(websocket)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Liveness probe with the number of active sessions."""
        return HealthResponse(
            status="healthy",
            service="caravan-engine",
            version=__version__,
            sessions=api_service.session_manager.stats()["active"],
        )

    logger.info("Caravan API created (env=%s)", CARAVAN_ENV)
    return app


# For running directly: uvicorn caravan.api.app:app
app = create_app()
