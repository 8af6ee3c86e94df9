"""
Session Module - Manages in-memory game sessions.

A session represents one match:
- Created when a client starts a game
- Holds the authoritative game state
- Serializes incoming actions through a single queue
- Plays the automa seats

Sessions are EPHEMERAL:
- No persistence to database
- Dropped when deleted or stale
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, TurnResult

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "TurnResult",
]
