"""
Bot Policy - How an automa seat picks its move.

A policy reads the state and the generated legal actions and answers
with a BotDecision. Policies never write to the state. The only
randomness they may draw on is the game's own RNG, which keeps a
seeded match replayable.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine_core.action import Action
    from ..engine_core.state import GameState


@dataclass
class BotDecision:
    """
    The move an automa settled on.

    `explanation` feeds the session log; `evaluated_actions` counts the
    candidates the policy looked at.
    """
    action: Action
    explanation: str = ""
    confidence: float = 1.0
    evaluated_actions: int = 0


class BotPolicy(ABC):
    """Strategy interface for automa seats."""

    # Policies that decide on their own skip action generation
    needs_legal_actions = True

    @abstractmethod
    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Choose the current seat's next action.

        Args:
            state: Game state, read only
            legal_actions: Output of the action generator for this state

        Returns:
            BotDecision naming the chosen action
        """

    def get_name(self) -> str:
        return type(self).__name__


def _require_choices(legal_actions: list[Action]) -> None:
    if not legal_actions:
        raise ValueError("No legal actions available")


class RandomPolicy(BotPolicy):
    """Uniform pick among the legal actions, drawn from the game RNG."""

    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        _require_choices(legal_actions)
        choice = state.rng.choice(legal_actions)
        return BotDecision(
            action=choice,
            explanation=f"Random: {choice.kind}",
            confidence=1.0 / len(legal_actions),
            evaluated_actions=len(legal_actions),
        )


class FirstLegalPolicy(BotPolicy):
    """Always the first generated action; handy as a deterministic baseline."""

    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        _require_choices(legal_actions)
        choice = legal_actions[0]
        return BotDecision(
            action=choice,
            explanation=f"First legal: {choice.kind}",
            evaluated_actions=1,
        )
