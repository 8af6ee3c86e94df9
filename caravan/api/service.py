"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session and engine calls
2. Manages sessions
3. Formats engine snapshots as response models

This layer is framework-agnostic; the FastAPI app only routes to it.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field

from .schemas import (
    # Requests
    CreateSessionRequest,
    SubmitActionRequest,
    # Responses
    ActionResponse,
    ErrorResponse,
    GameStateResponse,
    SessionResponse,
    TurnResultInfo,
    # Enums
    ErrorCode,
    SessionStatus,
)
from ..engine_core.errors import EngineError
from ..session import Session, SessionManager, SessionState, TurnResult

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Create session
        session_response = service.create_session(request)

        # Submit an action
        action_response = service.submit_action(session_id, request)
    """
    session_manager: SessionManager = field(default_factory=SessionManager)
    session_ttl: int = 3600

    def create_session(self, request: CreateSessionRequest) -> SessionResponse | ErrorResponse:
        """Create a new game session; automa seats play up to the first human turn."""
        self.session_manager.cleanup_stale_sessions(self.session_ttl)
        try:
            session = self.session_manager.create_session(
                num_players=request.num_players,
                num_humans=request.num_humans,
                seed=request.random_seed,
                names=request.player_names,
                bot_policy=request.bot_policy,
            )
        except EngineError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode(e.code))

        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._session_to_response(session)

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_active_sessions()

    def end_session(self, session_id: str, reason: str = "user_ended") -> bool:
        return self.session_manager.end_session(session_id, reason)

    def get_game_state(self, session_id: str) -> GameStateResponse | ErrorResponse:
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)
        return self._game_state_to_response(session)

    def submit_action(
        self,
        session_id: str,
        request: SubmitActionRequest,
    ) -> ActionResponse | ErrorResponse:
        """
        Queue one action on the session and drain it.

        A rejected action comes back as an ErrorResponse carrying the
        engine's error code; nothing else runs in that case.
        """
        session = self.session_manager.get_session(session_id)
        if not session:
            return self._not_found(session_id)

        try:
            action = request.action.to_action()
        except EngineError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode(e.code))

        results = session.execute(action)
        first = results[0]
        if not first.success:
            return ErrorResponse(
                error=first.errors[0] if first.errors else "Action rejected",
                error_code=ErrorCode(first.error_code or ErrorCode.STATE_ERROR.value),
                details={"action": first.action},
            )

        return ActionResponse(
            session_id=session_id,
            success=True,
            results=[self._turn_result_to_info(r) for r in results],
            game_state=self._game_state_to_response(session),
        )

    # =========================================================================
    # Converters
    # =========================================================================

    def _not_found(self, session_id: str) -> ErrorResponse:
        return ErrorResponse(
            error=f"Session {session_id} not found",
            error_code=ErrorCode.SESSION_NOT_FOUND,
        )

    def _status(self, session: Session) -> SessionStatus:
        if session.state == SessionState.GAME_OVER or session.game_state.game_over:
            return SessionStatus.GAME_OVER
        if session.state == SessionState.ABANDONED:
            return SessionStatus.ABANDONED
        if session.is_human_turn():
            return SessionStatus.YOUR_TURN
        return SessionStatus.AUTOMA_THINKING

    def _session_to_response(self, session: Session) -> SessionResponse:
        game_state = session.game_state
        return SessionResponse(
            session_id=session.session_id,
            status=self._status(session),
            num_players=game_state.num_players,
            human_player_ids=session.human_player_ids,
            current_player=game_state.current_player.player_id,
            round=game_state.round,
            created_at=session.created_at,
        )

    def _game_state_to_response(self, session: Session) -> GameStateResponse:
        return GameStateResponse(
            session_id=session.session_id,
            status=self._status(session),
            **session.game_state.snapshot(),
        )

    def _turn_result_to_info(self, result: TurnResult) -> TurnResultInfo:
        return TurnResultInfo(
            success=result.success,
            player_id=result.player_id,
            action=result.action,
            automa=result.automa,
            turn_ended=result.turn_ended,
            changes=result.changes,
            errors=result.errors,
            error_code=result.error_code,
            warnings=result.warnings,
        )
