"""
API Module - HTTP and WebSocket interface.

Exposes the engine via a REST API:
1. Create game sessions
2. Submit actions for the current seat
3. Read the full game state
4. Subscribe to state updates over WebSocket

All state is session-scoped. No persistent user accounts required.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    SubmitActionRequest,
    ActionRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    ActionResponse,
    ErrorResponse,
    # Shared
    PlayerInfo,
    CardInfo,
    MarketInfo,
    ResourcesInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "SubmitActionRequest",
    "ActionRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "ActionResponse",
    "ErrorResponse",
    # Shared
    "PlayerInfo",
    "CardInfo",
    "MarketInfo",
    "ResourcesInfo",
    # Service
    "APIService",
    "create_app",
]
