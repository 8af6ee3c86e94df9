"""
Engine Core - Deterministic crystal-trading rules engine.

The engine is the runtime that:
1. Creates a seeded GameState
2. Validates and applies actions via the reducer
3. Advances turns and detects the end of the game
4. Generates legal actions for bots
5. Serializes the full client-visible state
"""

from .errors import EngineError, ValidationError, AffordabilityError, IllegalMoveError, StateError
from .resources import CrystalType, Resources, MAX_CRYSTALS
from .cards import Card, CardType, create_card_from_name
from .market import Market
from .player import Player
from .action import (
    Action,
    ActionType,
    ActionResult,
    ProduceAction,
    UpgradeAction,
    TradeAction,
    AcquireCardAction,
    ClaimPointCardAction,
    RestAction,
    DiscardCrystalsAction,
    DepositCrystalsAction,
    CollectCrystalsAction,
    CollectAllCrystalsAction,
    action_from_dict,
    action_to_dict,
)
from .state import GameState, new_game, next_turn, check_game_over, snapshot
from .reducer import Reducer, apply_action, execute_action
from .action_generator import ActionGenerator, legal_actions, is_legal

__all__ = [
    "EngineError",
    "ValidationError",
    "AffordabilityError",
    "IllegalMoveError",
    "StateError",
    "CrystalType",
    "Resources",
    "MAX_CRYSTALS",
    "Card",
    "CardType",
    "create_card_from_name",
    "Market",
    "Player",
    "Action",
    "ActionType",
    "ActionResult",
    "ProduceAction",
    "UpgradeAction",
    "TradeAction",
    "AcquireCardAction",
    "ClaimPointCardAction",
    "RestAction",
    "DiscardCrystalsAction",
    "DepositCrystalsAction",
    "CollectCrystalsAction",
    "CollectAllCrystalsAction",
    "action_from_dict",
    "action_to_dict",
    "GameState",
    "new_game",
    "next_turn",
    "check_game_over",
    "snapshot",
    "Reducer",
    "apply_action",
    "execute_action",
    "ActionGenerator",
    "legal_actions",
    "is_legal",
]
