"""
Game Loop - Drives one session's game through the engine.

The loop:
1. A player (or the automa) submits an action
2. Engine validates and applies it
3. Turn-ending actions check for game over, then advance the turn
4. Automa seats play until a human seat is up or the game ends

Deposits, collections and discards are mid-turn moves: the same player
keeps the turn afterwards.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TYPE_CHECKING

from ..engine_core.action import Action, RestAction
from ..engine_core.action_generator import legal_actions

if TYPE_CHECKING:
    from .manager import Session

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """State of the game loop."""
    WAITING_HUMAN_ACTION = "waiting_human_action"
    RUNNING_AUTOMA = "running_automa"
    GAME_OVER = "game_over"


@dataclass
class TurnResult:
    """
    Result of processing one action.

    Contains the engine's change log, or the error that rejected the
    action, and whether the turn moved on.
    """
    success: bool
    loop_state: LoopState
    player_id: int | None = None
    action: dict[str, Any] | None = None
    automa: bool = False
    turn_ended: bool = False

    changes: list[str] = field(default_factory=list)

    # Errors/warnings
    errors: list[str] = field(default_factory=list)
    error_code: str | None = None
    warnings: list[str] = field(default_factory=list)

    # Game over info
    winner: int | None = None


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(session)
        result = loop.process(action)
        if result.success:
            automa_results = loop.run_automa_turns()
    """

    # Safety limit on automa actions per call
    MAX_AUTOMA_STEPS = 500

    def __init__(self, session: Session):
        self.session = session
        self.state = LoopState.WAITING_HUMAN_ACTION

    def process(self, action: Action, automa: bool = False) -> TurnResult:
        """Apply one action for the current seat and settle the turn."""
        game_state = self.session.game_state
        player = game_state.current_player

        result = game_state.execute_action(action)
        if not result.success:
            logger.info(
                "Session %s: %s rejected for player %s: %s",
                self.session.session_id, action.kind, player.player_id, result.error,
            )
            return TurnResult(
                success=False,
                loop_state=self.state,
                player_id=player.player_id,
                action=action.to_dict(),
                automa=automa,
                errors=[result.error or "Action failed"],
                error_code=result.error_code,
            )

        for change in result.state_changes:
            logger.debug("Session %s: %s", self.session.session_id, change)

        turn_ended = self._settle_turn(action)
        return TurnResult(
            success=True,
            loop_state=self.state,
            player_id=player.player_id,
            action=action.to_dict(),
            automa=automa,
            turn_ended=turn_ended,
            changes=result.state_changes,
            winner=game_state.winner,
        )

    def _settle_turn(self, action: Action) -> bool:
        """Check for game over and advance the turn after a turn-ending action."""
        if not action.ends_turn:
            return False

        game_state = self.session.game_state
        game_state.check_game_over()
        if game_state.game_over:
            self.state = LoopState.GAME_OVER
            self.session.mark_finished()
            logger.info(
                "Session %s: game over after round %d, winner player %s",
                self.session.session_id, game_state.round, game_state.winner,
            )
        else:
            game_state.next_turn()
        return True

    def run_automa_turns(self, max_steps: int | None = None) -> list[TurnResult]:
        """
        Run automa seats until a human seat is up or the game ends.

        A failed automa action is replaced by Rest so the game always
        moves on.
        """
        game_state = self.session.game_state
        limit = max_steps if max_steps is not None else self.MAX_AUTOMA_STEPS
        results: list[TurnResult] = []

        while not game_state.game_over and len(results) < limit:
            player = game_state.current_player
            bot = self.session.bots.get(player.player_id)
            if bot is None:
                break

            self.state = LoopState.RUNNING_AUTOMA
            choices = legal_actions(game_state) if bot.needs_legal_actions else []
            decision = bot.select_action(game_state, choices)
            result = self.process(decision.action, automa=True)

            if not result.success:
                logger.warning(
                    "Session %s: automa %s failed %s (%s), resting instead",
                    self.session.session_id, player.player_id,
                    decision.action.kind, result.error_code,
                )
                fallback = self.process(RestAction(player_id=player.player_id), automa=True)
                fallback.warnings.extend(result.errors)
                result = fallback

            results.append(result)

        if not game_state.game_over:
            self.state = LoopState.WAITING_HUMAN_ACTION
        return results
