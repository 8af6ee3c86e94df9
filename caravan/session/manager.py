"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. A client creates a session: seats, seed and automa policy
2. The engine creates the game; automa seats play until a human is up
3. During the game:
   - Clients submit actions to the session queue
   - The queue drains one action at a time into the engine
   - Automa seats play after each human action
4. Game ends or the session is deleted → state dropped

CONCURRENCY:
- Every session owns one FIFO action queue
- Draining is guarded by a lock: at most one action is applied to a
  game at any moment, in submission order
- Sessions are in-memory only, never persisted
"""

from __future__ import annotations
import logging
import secrets
import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..bots import POLICIES, BotPolicy
from ..engine_core.action import Action
from ..engine_core.errors import ValidationError
from ..engine_core.state import GameState, new_game
from .game_loop import GameLoop, TurnResult

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Lifecycle of a session."""
    ACTIVE = "active"  # Game in progress
    GAME_OVER = "game_over"  # Game completed
    ABANDONED = "abandoned"  # Deleted or expired


@dataclass
class Session:
    """
    An in-memory game session.

    Contains:
    - The authoritative GameState
    - Bots for automa seats, by player id
    - The action queue and its drain lock
    """
    session_id: str
    game_state: GameState
    created_at: float

    state: SessionState = SessionState.ACTIVE
    bots: dict[int, BotPolicy] = field(default_factory=dict)
    human_player_ids: list[int] = field(default_factory=list)
    last_activity: float = 0.0

    _queue: deque[Action] = field(default_factory=deque, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    loop: GameLoop | None = field(default=None, repr=False)

    def __post_init__(self):
        if self.loop is None:
            self.loop = GameLoop(self)
        if not self.last_activity:
            self.last_activity = self.created_at

    def is_active(self) -> bool:
        """True until the game ends or the session is dropped."""
        return self.state == SessionState.ACTIVE

    def is_human_turn(self) -> bool:
        return self.game_state.current_player.player_id in self.human_player_ids

    def mark_finished(self) -> None:
        self.state = SessionState.GAME_OVER

    def submit(self, action: Action) -> None:
        """Queue an action; nothing is applied until drain()."""
        self._queue.append(action)

    def drain(self) -> list[TurnResult]:
        """
        Apply queued actions one at a time, in submission order.

        Automa seats play after every successful human action. Only one
        thread drains a session at a time.
        """
        results: list[TurnResult] = []
        with self._lock:
            while self._queue:
                action = self._queue.popleft()
                result = self.loop.process(action)
                results.append(result)
                if result.success:
                    results.extend(self.loop.run_automa_turns())
            self.last_activity = time.time()
        return results

    def execute(self, action: Action) -> list[TurnResult]:
        """Submit one action and drain the queue."""
        self.submit(action)
        return self.drain()

    def run_automa(self, max_steps: int | None = None) -> list[TurnResult]:
        with self._lock:
            return self.loop.run_automa_turns(max_steps)


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with their games and bots
    - Track active sessions
    - Clean up finished and stale sessions

    Sessions live in process memory and vanish on restart.
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create_session(
        self,
        num_players: int = 2,
        num_humans: int = 1,
        seed: int | None = None,
        names: list[str] | None = None,
        bot_policy: str = "greedy",
    ) -> Session:
        """
        Create a new game session.

        Args:
            num_players: Total seats (2-5)
            num_humans: Seats played by clients; players 1..num_humans
            seed: RNG seed; random when omitted
            names: Optional player names, by player id
            bot_policy: Policy name for the automa seats

        Returns:
            New Session, already advanced to the first human turn
        """
        if num_humans < 0 or num_humans > num_players:
            raise ValidationError(f"Invalid number of human players: {num_humans}")
        policy_cls = POLICIES.get(bot_policy)
        if policy_cls is None:
            raise ValidationError(f"Unknown bot policy: {bot_policy}")

        if seed is None:
            seed = secrets.randbelow(2**31)

        ai_ids = list(range(num_humans + 1, num_players + 1))
        game_state = new_game(num_players, seed, names=names, ai_players=ai_ids)

        session = Session(
            session_id=str(uuid.uuid4()),
            game_state=game_state,
            created_at=time.time(),
            bots={pid: policy_cls() for pid in ai_ids},
            human_player_ids=list(range(1, num_humans + 1)),
        )
        with self._lock:
            self._sessions[session.session_id] = session

        logger.info(
            "Created session %s: %d players (%d automa), seed %d",
            session.session_id, num_players, len(ai_ids), seed,
        )
        session.run_automa()
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Look up a session; None when unknown or already ended."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str, reason: str = "completed") -> bool:
        """
        End a session and drop it from memory.

        Returns False if no such session exists.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if not session:
            return False

        if reason == "completed":
            session.state = SessionState.GAME_OVER
        else:
            session.state = SessionState.ABANDONED
        logger.info("Ended session %s (%s)", session_id, reason)
        return True

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Drop sessions idle for longer than max_age.

        Called periodically to free memory. Returns how many were dropped.
        """
        current_time = time.time()
        to_remove = [
            session_id
            for session_id, session in list(self._sessions.items())
            if current_time - session.last_activity > max_age_seconds
        ]

        for session_id in to_remove:
            self.end_session(session_id, reason="stale")
        return len(to_remove)

    def stats(self) -> dict[str, Any]:
        sessions = self.list_sessions()
        return {
            "total": len(sessions),
            "active": sum(1 for s in sessions if s.is_active()),
        }
