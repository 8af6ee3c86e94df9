"""
Action Generator - Generates legal actions from a game state.

The action generator is used by:
1. Bots to enumerate possible moves
2. Tests, to drive random games through the reducer

Design: Generates Action objects, not just action types.
Upgrades are generated from a fixed set of single-crystal chains and
acquisitions only on the paid path, so the list is a practical subset
of everything the reducer would accept.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .action import (
    AcquireCardAction,
    Action,
    ClaimPointCardAction,
    CollectAllCrystalsAction,
    DiscardCrystalsAction,
    ProduceAction,
    RestAction,
    TradeAction,
    UpgradeAction,
)
from .cards import ActionType as CardActionType, Card, CardType
from .resources import MAX_CRYSTALS, CrystalType, Resources

if TYPE_CHECKING:
    from .player import Player
    from .state import GameState


# Single-crystal upgrade chains: (from, to, steps)
UPGRADE_TEMPLATES = [
    (CrystalType.YELLOW, CrystalType.GREEN, 1),
    (CrystalType.GREEN, CrystalType.BLUE, 1),
    (CrystalType.BLUE, CrystalType.PINK, 1),
    (CrystalType.YELLOW, CrystalType.BLUE, 2),
    (CrystalType.GREEN, CrystalType.PINK, 2),
    (CrystalType.YELLOW, CrystalType.PINK, 3),
]


def upgrade_actions(player: Player, card: Card, card_index: int) -> list[UpgradeAction]:
    """Template upgrades the card can perform, using exactly its budget."""
    actions = []
    for origin, target, steps in UPGRADE_TEMPLATES:
        if steps != card.turn_upgrade:
            continue
        action = UpgradeAction(
            card_index=card_index,
            input=Resources.from_crystals([origin]),
            output=Resources.from_crystals([target]),
            player_id=player.player_id,
        )
        if card.can_play(player, action):
            actions.append(action)
    return actions


def cheapest_discard(player: Player) -> Resources:
    """The owed crystals, lowest value first."""
    return Resources.from_crystals(player.resources.crystals()[:player.pending_discard])


def can_acquire_paid(state: GameState, player: Player, position: int) -> bool:
    """Whether paying outright for `position` is affordable and fits the caravan."""
    market = state.market
    cost = market.get_action_card_cost(position)
    if not player.resources.has_all(cost):
        return False
    collected = state.cards[market.action_cards[position]].deposit_count()
    return player.resources.total() - cost.total() + collected <= MAX_CRYSTALS


@dataclass
class ActionGenerator:
    """
    Generates legal actions for the current seat.

    With `all_trade_multipliers=False` only multiplier-1 trades are produced.
    """
    all_trade_multipliers: bool = True

    def generate(self, state: GameState) -> list[Action]:
        """
        Generate legal actions for the current player.

        Returns a list of fully-specified Action objects.
        """
        if state.game_over:
            return []

        player = state.current_player
        pid = player.player_id

        if player.pending_discard > 0:
            # Only moves that cannot gain crystals remain open
            actions: list[Action] = [
                DiscardCrystalsAction(discard=cheapest_discard(player), player_id=pid)
            ]
            actions.extend(self._generate_claim_actions(state, player))
            actions.append(RestAction(player_id=pid))
            return actions

        actions = []
        actions.extend(self._generate_claim_actions(state, player))
        actions.extend(self._generate_play_actions(state, player))
        actions.extend(self._generate_acquire_actions(state, player))
        actions.extend(self._generate_collect_actions(state, player))

        # Rest is always available
        actions.append(RestAction(player_id=pid))
        return actions

    def _generate_claim_actions(self, state: GameState, player: Player) -> list[Action]:
        return [
            ClaimPointCardAction(position=i, player_id=player.player_id)
            for i, card_id in enumerate(state.market.point_cards)
            if state.cards[card_id].can_claim(player)
        ]

    def _generate_play_actions(self, state: GameState, player: Player) -> list[Action]:
        actions: list[Action] = []
        for index, card_id in enumerate(player.hand):
            card = state.cards[card_id]
            if card.card_type != CardType.ACTION:
                continue

            if card.action_type == CardActionType.PRODUCE:
                actions.append(ProduceAction(card_index=index, player_id=player.player_id))

            elif card.action_type == CardActionType.UPGRADE:
                actions.extend(upgrade_actions(player, card, index))

            elif card.action_type == CardActionType.TRADE and card.input is not None:
                most = player.resources.max_multiplier(card.input)
                if not self.all_trade_multipliers:
                    most = min(most, 1)
                actions.extend(
                    TradeAction(card_index=index, multiplier=m, player_id=player.player_id)
                    for m in range(1, most + 1)
                )
        return actions

    def _generate_acquire_actions(self, state: GameState, player: Player) -> list[Action]:
        return [
            AcquireCardAction(position=position, player_id=player.player_id)
            for position in range(len(state.market.action_cards))
            if can_acquire_paid(state, player, position)
        ]

    def _generate_collect_actions(self, state: GameState, player: Player) -> list[Action]:
        return [
            CollectAllCrystalsAction(market_index=index, player_id=player.player_id)
            for index, card_id in enumerate(state.market.action_cards)
            if state.cards[card_id].deposit_count() > 1
        ]


def legal_actions(state: GameState) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    generator = ActionGenerator()
    return generator.generate(state)


def is_legal(state: GameState, action: Action) -> bool:
    """Check if a specific action would succeed, without touching `state`."""
    return state.clone().execute_action(action).success
