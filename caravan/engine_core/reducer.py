"""
Reducer - Applies actions to game state.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- Validates before applying: every check runs before the first write
- Returns ActionResult with success/failure
- Rule violations are typed EngineErrors, reported as failed results
- Anything else is a bug and propagates
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Callable

from .action import (
    AcquireCardAction,
    Action,
    ActionResult,
    ActionType,
    ClaimPointCardAction,
    CollectAllCrystalsAction,
    CollectCrystalsAction,
    DepositCrystalsAction,
    DiscardCrystalsAction,
    TradeAction,
    UpgradeAction,
)
from .errors import AffordabilityError, EngineError, IllegalMoveError, StateError, ValidationError
from .market import SILVER_COIN
from .player import Player
from .resources import MAX_CRYSTALS, CrystalType, Resources

if TYPE_CHECKING:
    from .state import GameState


# Actions that can add crystals; blocked while a discard is owed
RESOURCE_GAINING_ACTIONS = frozenset({
    ActionType.PLAY_CARD,
    ActionType.ACQUIRE_CARD,
    ActionType.COLLECT_CRYSTALS,
    ActionType.COLLECT_ALL_CRYSTALS,
})


class Reducer:
    """
    Reducer applies actions to game state.

    Stateless - all state is in GameState.
    """

    def apply(self, state: GameState, action: Action) -> ActionResult:
        """
        Apply an action to the game state.

        Returns ActionResult with the updated state or the typed error.
        A failed action leaves the state untouched.
        """
        try:
            self._validate_action(state, action)

            handler = self._get_handler(action.action_type)
            if not handler:
                raise StateError(f"Unknown action type: {action.action_type}")

            result = handler(state, state.current_player, action)
        except EngineError as e:
            return ActionResult.failure(e)

        state.action_history.append(action)
        return result

    def _validate_action(self, state: GameState, action: Action) -> None:
        """Raise if the action may not be attempted at all right now."""
        if not isinstance(action, Action) or getattr(action, "action_type", None) is None:
            raise StateError(f"Unknown action type: {type(action).__name__}")

        if state.game_over:
            raise StateError("Game is over - no actions allowed")

        player = state.current_player
        if action.player_id is not None and action.player_id != player.player_id:
            raise IllegalMoveError(f"Not player {action.player_id}'s turn")

        self._validate_payload(action)

        if player.pending_discard > 0 and action.action_type in RESOURCE_GAINING_ACTIONS:
            raise IllegalMoveError(
                f"{player.name} must discard {player.pending_discard} crystals first"
            )

    def _validate_payload(self, action: Action) -> None:
        """Reject crystal amounts no real move could carry."""
        amounts: list[Resources] = []
        if isinstance(action, UpgradeAction):
            amounts = [action.input, action.output]
        elif isinstance(action, DiscardCrystalsAction):
            amounts = [action.discard]
        if not all(amount.is_non_negative() for amount in amounts):
            raise ValidationError(f"Negative crystal count in {action.kind} payload")

        if isinstance(action, TradeAction) and action.multiplier < 1:
            raise ValidationError(f"Invalid trade multiplier: {action.multiplier}")
        if isinstance(action, DiscardCrystalsAction) and action.discard.total() == 0:
            raise ValidationError("Discard must give back at least one crystal")

    def _get_handler(
        self, action_type: ActionType
    ) -> Callable[[GameState, Player, Action], ActionResult] | None:
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLAY_CARD: self._handle_play_card,
            ActionType.ACQUIRE_CARD: self._handle_acquire_card,
            ActionType.CLAIM_POINT_CARD: self._handle_claim_point_card,
            ActionType.REST: self._handle_rest,
            ActionType.DISCARD_CRYSTALS: self._handle_discard,
            ActionType.DEPOSIT_CRYSTALS: self._handle_deposit,
            ActionType.COLLECT_CRYSTALS: self._handle_collect,
            ActionType.COLLECT_ALL_CRYSTALS: self._handle_collect_all,
        }
        return handlers.get(action_type)

    def _handle_play_card(self, state: GameState, player: Player, action: Action) -> ActionResult:
        """Handle playing a produce, upgrade or trade card from hand."""
        card = player.hand_card(action.card_index, state.cards)
        gained = player.play_card(action, state.cards)
        player.update_pending_discard()

        changes = [f"{player.name} played {card.name} for {gained}"]
        if player.pending_discard:
            changes.append(f"{player.name} must discard {player.pending_discard} crystals")
        return ActionResult.success_with_state(state, changes=changes)

    def _handle_acquire_card(
        self, state: GameState, player: Player, action: AcquireCardAction
    ) -> ActionResult:
        """
        Handle taking an action card from the market.

        Supplying a crystal for every ledger position 1..position makes
        the card free: each crystal is left on the matching earlier card.
        Otherwise the position cost is paid. Either way the acquirer also
        takes whatever was deposited on the card itself.
        """
        market = state.market
        position = action.position
        target = state.get_card(market.action_card_at(position))

        required = range(1, position + 1)
        extra = sorted(set(action.deposits) - set(required))
        if extra:
            raise ValidationError(f"No market card before position {position + 1} at {extra}")

        free = all(p in action.deposits for p in required)
        if free:
            charge = Resources.from_crystals(action.deposits[p] for p in required)
        else:
            charge = market.get_action_card_cost(position)

        if not player.resources.has_all(charge):
            raise AffordabilityError(
                f"{target.name} costs {charge}: only have {player.resources}"
            )

        collected = target.deposited()
        net_total = player.resources.total() - charge.total() + collected.total()
        if net_total > MAX_CRYSTALS:
            raise IllegalMoveError(
                f"Acquiring {target.name} would leave {net_total} crystals (max {MAX_CRYSTALS})"
            )

        # Commit
        player.resources.subtract_all(charge)
        if free:
            for p in required:
                state.cards[market.action_cards[p - 1]].add_deposit(p, action.deposits[p])
        player.resources.add_all(target.take_all_deposits())
        player.add_card(market.acquire_action_card(position))

        how = "free" if free else f"for {charge}"
        changes = [f"{player.name} acquired {target.name} {how}"]
        if collected.total():
            changes.append(f"{player.name} collected {collected} from {target.name}")
        return ActionResult.success_with_state(state, changes=changes)

    def _handle_claim_point_card(
        self, state: GameState, player: Player, action: ClaimPointCardAction
    ) -> ActionResult:
        """Handle claiming a golem, plus a coin for the first two positions."""
        market = state.market
        position = action.position
        card = state.get_card(market.point_card_at(position))

        points = player.claim_point_card(card)
        market.acquire_point_card(position)
        player.update_pending_discard()
        changes = [f"{player.name} claimed {card.name} for {points} points"]

        if position <= SILVER_COIN and position < len(market.coins):
            coin = state.cards[market.coins[position]]
            if coin.amount > 0:
                player.coins.append(coin.card_id)
                coin.amount -= 1
                changes.append(f"{player.name} earned {coin.name}")

        if player.check_last_round():
            state.last_round = True
            changes.append("Last round triggered")

        return ActionResult.success_with_state(state, changes=changes)

    def _handle_rest(self, state: GameState, player: Player, action: Action) -> ActionResult:
        """Handle rest: played cards return to hand."""
        returned = len(player.played_cards)
        player.rest()
        return ActionResult.success_with_state(
            state,
            changes=[f"{player.name} rested, {returned} cards returned"],
        )

    def _handle_discard(
        self, state: GameState, player: Player, action: DiscardCrystalsAction
    ) -> ActionResult:
        """Handle giving back the crystals owed above the caravan limit."""
        if action.discard.total() != player.pending_discard:
            raise ValidationError(
                f"Must discard exactly {player.pending_discard} crystals, "
                f"got {action.discard.total()}"
            )
        if not player.resources.has_all(action.discard):
            raise AffordabilityError(f"Cannot discard {action.discard}: only have {player.resources}")

        player.resources.subtract_all(action.discard)
        player.pending_discard = 0
        return ActionResult.success_with_state(
            state,
            changes=[f"{player.name} discarded {action.discard}"],
        )

    def _handle_deposit(
        self, state: GameState, player: Player, action: DepositCrystalsAction
    ) -> ActionResult:
        """Handle leaving one crystal on each market card before the target."""
        market = state.market
        target = action.target_position
        if target < 2 or target > len(market.action_cards):
            raise ValidationError(f"Invalid deposit target position: {target}")

        required = range(1, target)
        missing = [p for p in required if p not in action.deposits]
        if missing:
            raise IllegalMoveError(f"Missing deposits for positions {missing}")
        extra = sorted(set(action.deposits) - set(required))
        if extra:
            raise ValidationError(f"Unexpected deposits for positions {extra}")

        crystals: list[CrystalType] = [action.deposits[p] for p in required]
        payment = Resources.from_crystals(crystals)
        if not player.resources.has_all(payment):
            raise AffordabilityError(f"Cannot deposit {payment}: only have {player.resources}")

        player.resources.subtract_all(payment)
        for p, crystal in zip(required, crystals):
            state.cards[market.action_cards[p - 1]].add_deposit(p, crystal)
        player.update_pending_discard()

        return ActionResult.success_with_state(
            state,
            changes=[f"{player.name} deposited {payment} before position {target}"],
        )

    def _handle_collect(
        self, state: GameState, player: Player, action: CollectCrystalsAction
    ) -> ActionResult:
        """Handle taking one deposit from a market card."""
        card = state.get_card(state.market.action_card_at(action.market_index))
        collected = card.collect_crystals(player, action.positions)
        player.update_pending_discard()
        return ActionResult.success_with_state(
            state,
            changes=[f"{player.name} collected {collected} from {card.name}"],
        )

    def _handle_collect_all(
        self, state: GameState, player: Player, action: CollectAllCrystalsAction
    ) -> ActionResult:
        """Handle taking every deposit but one from a market card."""
        card = state.get_card(state.market.action_card_at(action.market_index))
        collected = card.collect_all_crystals(player)
        player.update_pending_discard()
        return ActionResult.success_with_state(
            state,
            changes=[f"{player.name} collected {collected} from {card.name}"],
        )


def apply_action(state: GameState, action: Action) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer()
    return reducer.apply(state, action)


def execute_action(state: GameState, action: Action) -> ActionResult:
    return apply_action(state, action)
