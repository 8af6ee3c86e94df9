"""
Greedy Bot - The fixed-priority automa.

Priority, first match wins:
0. Discard owed crystals, cheapest first
1. Claim the first affordable golem in market order
2. Play a hand card: produce, then upgrade, then trade at the
   largest affordable multiplier
3. Acquire the cheapest affordable action card
4. Rest

No lookahead and no scoring. The choice depends only on the state,
and the state is never touched.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from ..engine_core.action import (
    AcquireCardAction,
    Action,
    ClaimPointCardAction,
    DiscardCrystalsAction,
    ProduceAction,
    RestAction,
    TradeAction,
)
from ..engine_core.action_generator import can_acquire_paid, cheapest_discard, upgrade_actions
from ..engine_core.cards import ActionType as CardActionType, CardType
from .policy import BotDecision, BotPolicy

if TYPE_CHECKING:
    from ..engine_core.market import Market
    from ..engine_core.player import Player
    from ..engine_core.state import GameState


def choose_action(player: Player, market: Market, state: GameState) -> Action:
    """Pick the automa's next action for `player`."""
    pid = player.player_id

    if player.pending_discard > 0:
        return DiscardCrystalsAction(discard=cheapest_discard(player), player_id=pid)

    claim_index = player.can_claim_any(market.point_cards, state.cards)
    if claim_index is not None:
        return ClaimPointCardAction(position=claim_index, player_id=pid)

    play = _find_playable_action(player, state)
    if play is not None:
        return play

    for position in range(len(market.action_cards)):
        if can_acquire_paid(state, player, position):
            return AcquireCardAction(position=position, player_id=pid)

    return RestAction(player_id=pid)


def _find_playable_action(player: Player, state: GameState) -> Action | None:
    hand = [(i, state.cards[card_id]) for i, card_id in enumerate(player.hand)]
    action_cards = [(i, c) for i, c in hand if c.card_type == CardType.ACTION]

    # First pass: production
    for index, card in action_cards:
        if card.action_type == CardActionType.PRODUCE:
            action = ProduceAction(card_index=index, player_id=player.player_id)
            if card.can_play(player, action):
                return action

    # Second pass: upgrades
    for index, card in action_cards:
        if card.action_type == CardActionType.UPGRADE:
            options = upgrade_actions(player, card, index)
            if options:
                return options[0]

    # Third pass: trades, as many times as affordable
    for index, card in action_cards:
        if card.action_type == CardActionType.TRADE and card.input is not None:
            multiplier = player.resources.max_multiplier(card.input)
            if multiplier < 1:
                continue
            action = TradeAction(card_index=index, multiplier=multiplier, player_id=player.player_id)
            if card.can_play(player, action):
                return action

    return None


class GreedyPolicy(BotPolicy):
    """BotPolicy wrapper around choose_action; ignores the generated list."""

    needs_legal_actions = False

    def select_action(
        self,
        state: GameState,
        legal_actions: list[Action],
    ) -> BotDecision:
        action = choose_action(state.current_player, state.market, state)
        return BotDecision(
            action=action,
            explanation=f"Greedy: {action.kind}",
            evaluated_actions=1,
        )
