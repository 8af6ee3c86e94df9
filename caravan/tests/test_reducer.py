"""
Tests for the reducer (state transitions).

Tests:
- Action application
- State mutation correctness
- Validation and typed error codes
- Failed actions leave the state untouched
"""

import pytest

from ..engine_core.action import (
    AcquireCardAction,
    Action,
    ClaimPointCardAction,
    CollectAllCrystalsAction,
    CollectCrystalsAction,
    DepositCrystalsAction,
    DiscardCrystalsAction,
    ProduceAction,
    RestAction,
    TradeAction,
    UpgradeAction,
    action_from_dict,
)
from ..engine_core.cards import create_card_from_name
from ..engine_core.errors import ValidationError
from ..engine_core.reducer import Reducer, apply_action, execute_action
from ..engine_core.resources import CrystalType, Resources


Y, G, B, P = CrystalType.YELLOW, CrystalType.GREEN, CrystalType.BLUE, CrystalType.PINK


def assert_rejected(state, action, code):
    """Apply `action` and check it fails with `code` without changing anything."""
    before = state.clone()
    result = apply_action(state, action)
    assert not result.success
    assert result.error_code == code
    assert result.cause is not None
    assert state == before
    return result


class TestValidation:
    """Tests for checks that run before any handler."""

    def test_wrong_player_fails(self, table):
        result = assert_rejected(table, RestAction(player_id=2), "ILLEGAL_MOVE")
        assert "turn" in result.error.lower()

    def test_matching_player_id_accepted(self, table):
        assert apply_action(table, RestAction(player_id=1)).success

    def test_game_over_rejects_everything(self, table):
        table.game_over = True
        assert_rejected(table, RestAction(), "STATE_ERROR")

    def test_unknown_action_type(self, table):
        result = Reducer().apply(table, {"kind": "rest"})
        assert not result.success
        assert result.error_code == "STATE_ERROR"

    def test_bare_action_base_is_unknown(self, table):
        assert_rejected(table, Action(), "STATE_ERROR")

    @pytest.mark.parametrize(
        "action",
        [
            UpgradeAction(card_index=0, input=Resources(yellow=-1), output=Resources(green=1)),
            UpgradeAction(card_index=0, input=Resources(yellow=1), output=Resources(green=-1)),
            TradeAction(card_index=0, multiplier=0),
        ],
    )
    def test_malformed_crystal_payloads(self, table, add_to_hand, action):
        alice = table.current_player
        alice.resources = Resources(yellow=4)
        add_to_hand(table, alice, "upgrade_2")
        assert_rejected(table, action, "VALIDATION_ERROR")

    def test_success_is_recorded_in_history(self, table):
        action = RestAction()
        result = execute_action(table, action)

        assert result.success
        assert result.new_state is table
        assert table.action_history == [action]


class TestPlayCard:
    """Tests for playing cards from hand."""

    def test_produce(self, table, add_to_hand):
        alice = table.current_player
        index = add_to_hand(table, alice, "mint_0011")

        result = apply_action(table, ProduceAction(card_index=index))

        assert result.success
        assert alice.resources == Resources(yellow=1, green=1)
        assert alice.hand == []
        assert len(alice.played_cards) == 1

    def test_upgrade(self, table, add_to_hand):
        alice = table.current_player
        alice.resources = Resources(yellow=2)
        index = add_to_hand(table, alice, "upgrade_3")

        action = UpgradeAction(
            card_index=index,
            input=Resources(yellow=2),
            output=Resources(green=1, blue=1),
        )
        assert apply_action(table, action).success
        assert alice.resources == Resources(green=1, blue=1)

    def test_trade_with_multiplier(self, table, add_to_hand):
        alice = table.current_player
        alice.resources = Resources(yellow=5)
        index = add_to_hand(table, alice, "trade_0002_0100")

        assert apply_action(table, TradeAction(card_index=index, multiplier=2)).success
        assert alice.resources == Resources(yellow=1, blue=2)

    def test_unaffordable_trade(self, table, add_to_hand):
        alice = table.current_player
        alice.resources = Resources(yellow=1)
        index = add_to_hand(table, alice, "trade_0002_0100")

        assert_rejected(table, TradeAction(card_index=index), "AFFORDABILITY_ERROR")

    def test_invalid_upgrade_chain(self, table, add_to_hand):
        alice = table.current_player
        alice.resources = Resources(green=1)
        index = add_to_hand(table, alice, "upgrade_2")

        action = UpgradeAction(card_index=index, input=Resources(green=1), output=Resources(yellow=1))
        assert_rejected(table, action, "ILLEGAL_MOVE")

    def test_bad_hand_index(self, table):
        assert_rejected(table, ProduceAction(card_index=3), "VALIDATION_ERROR")

    def test_overflow_sets_pending_discard(self, table, add_to_hand):
        alice = table.current_player
        alice.resources = Resources(yellow=9)
        index = add_to_hand(table, alice, "mint_0004")

        result = apply_action(table, ProduceAction(card_index=index))

        assert result.success
        assert alice.pending_discard == 3
        assert any("discard" in change for change in result.state_changes)


class TestPendingDiscard:
    """Tests for the discard owed above the caravan limit."""

    @pytest.fixture
    def owing(self, table, add_to_hand):
        alice = table.current_player
        alice.resources = Resources(yellow=9, green=2)
        add_to_hand(table, alice, "mint_0003")
        add_to_hand(table, alice, "mint_0011")
        assert apply_action(table, ProduceAction(card_index=0)).success
        assert alice.pending_discard == 4
        return table

    def test_gaining_actions_blocked(self, owing):
        assert_rejected(owing, ProduceAction(card_index=0), "ILLEGAL_MOVE")
        assert_rejected(owing, AcquireCardAction(position=0), "ILLEGAL_MOVE")
        assert_rejected(owing, CollectAllCrystalsAction(market_index=0), "ILLEGAL_MOVE")
        assert_rejected(
            owing, CollectCrystalsAction(market_index=0, positions=(1,)), "ILLEGAL_MOVE"
        )

    def test_discard_must_match_exactly(self, owing):
        assert_rejected(
            owing, DiscardCrystalsAction(discard=Resources(yellow=3)), "VALIDATION_ERROR"
        )
        assert_rejected(
            owing, DiscardCrystalsAction(discard=Resources(pink=4)), "AFFORDABILITY_ERROR"
        )

    def test_discard_clears_debt(self, owing):
        alice = owing.current_player

        result = apply_action(owing, DiscardCrystalsAction(discard=Resources(yellow=4)))

        assert result.success
        assert alice.pending_discard == 0
        assert alice.resources == Resources(yellow=8, green=2)
        assert apply_action(owing, ProduceAction(card_index=0)).success

    def test_claim_and_rest_still_allowed(self, owing):
        assert apply_action(owing, ClaimPointCardAction(position=0)).success
        assert apply_action(owing, RestAction()).success

    def test_negative_discard_rejected(self, owing):
        alice = owing.current_player
        # Totals the 4 owed, but would turn yellow into pink
        action = DiscardCrystalsAction(discard=Resources(yellow=8, pink=-4))

        assert_rejected(owing, action, "VALIDATION_ERROR")
        assert alice.resources == Resources(yellow=12, green=2)

    def test_negative_discard_from_mapping_rejected(self):
        with pytest.raises(ValidationError):
            action_from_dict({"kind": "discard_crystals", "discard": {"yellow": 3, "pink": -3}})

    def test_empty_discard_rejected(self, table):
        assert_rejected(table, DiscardCrystalsAction(), "VALIDATION_ERROR")

    def test_claim_reduces_debt(self, owing):
        alice = owing.current_player
        alice.resources = Resources(yellow=9, green=2)
        alice.update_pending_discard()
        assert alice.pending_discard == 1

        assert apply_action(owing, ClaimPointCardAction(position=0)).success

        assert alice.resources == Resources(yellow=7)
        assert alice.pending_discard == 0

    def test_deposit_reduces_debt(self, owing):
        alice = owing.current_player

        action = DepositCrystalsAction(target_position=3, deposits={1: Y, 2: Y})
        assert apply_action(owing, action).success

        assert alice.resources.total() == 12
        assert alice.pending_discard == 2
        assert apply_action(owing, DiscardCrystalsAction(discard=Resources(yellow=2))).success
        assert alice.pending_discard == 0


class TestAcquireCard:
    """Tests for taking action cards from the market."""

    def test_paid_acquire_charges_position_cost(self, table):
        alice = table.current_player
        alice.resources = Resources(yellow=3)
        target = table.market.action_cards[2]

        result = apply_action(table, AcquireCardAction(position=2))

        assert result.success
        assert alice.resources == Resources(yellow=1)
        assert alice.hand == [target]
        assert target not in table.market.action_cards
        assert len(table.market.action_cards) == 5

    def test_free_acquire_with_deposits(self, table):
        alice = table.current_player
        alice.resources = Resources(yellow=1, green=1)
        first, second, target = table.market.action_cards[:3]
        table.cards[target].add_deposit(1, P)

        action = AcquireCardAction(position=2, deposits={1: Y, 2: G})
        result = apply_action(table, action)

        assert result.success
        # Two crystals paid, the pink left on the target collected
        assert alice.resources == Resources(pink=1)
        assert table.cards[first].deposits == {1: [Y]}
        assert table.cards[second].deposits == {2: [G]}
        assert table.cards[target].deposits == {}

    def test_partial_deposits_pay_the_cost(self, table):
        alice = table.current_player
        alice.resources = Resources(yellow=3)
        first = table.market.action_cards[0]

        assert apply_action(table, AcquireCardAction(position=2, deposits={1: Y})).success
        assert alice.resources == Resources(yellow=1)
        assert table.cards[first].deposits == {}

    def test_deposit_past_target_rejected(self, table):
        table.current_player.resources = Resources(yellow=3)
        action = AcquireCardAction(position=1, deposits={1: Y, 2: Y})
        assert_rejected(table, action, "VALIDATION_ERROR")

    def test_unaffordable(self, table):
        assert_rejected(table, AcquireCardAction(position=3), "AFFORDABILITY_ERROR")

    def test_free_path_crystals_must_be_held(self, table):
        table.current_player.resources = Resources(yellow=1)
        action = AcquireCardAction(position=1, deposits={1: G})
        assert_rejected(table, action, "AFFORDABILITY_ERROR")

    def test_capacity_counts_collected_deposits(self, table):
        table.current_player.resources = Resources(yellow=10)
        table.cards[table.market.action_cards[0]].add_deposit(2, G)
        assert_rejected(table, AcquireCardAction(position=0), "ILLEGAL_MOVE")

    def test_bad_position(self, table):
        assert_rejected(table, AcquireCardAction(position=5), "VALIDATION_ERROR")


class TestClaimPointCard:
    """Tests for claiming golems and coins."""

    def test_bronze_coin_for_first_position(self, table):
        alice = table.current_player
        alice.resources = Resources(yellow=2, green=2)
        golem = table.market.point_cards[0]
        bronze = table.cards[table.market.coins[0]]

        result = apply_action(table, ClaimPointCardAction(position=0))

        assert result.success
        assert alice.point_cards == [golem]
        assert alice.coins == [bronze.card_id]
        assert bronze.amount == 3
        assert alice.resources == Resources()
        assert alice.get_points(table.cards) == 8 + 3

    def test_silver_coin_for_second_position(self, table):
        alice = table.current_player
        alice.resources = Resources(yellow=1, green=1, blue=1, pink=1)
        silver = table.cards[table.market.coins[1]]

        assert apply_action(table, ClaimPointCardAction(position=1)).success
        assert alice.coins == [silver.card_id]
        assert silver.amount == 3

    def test_no_coin_from_third_position(self, table):
        alice = table.current_player
        alice.resources = Resources(green=4)

        assert apply_action(table, ClaimPointCardAction(position=2)).success
        assert alice.coins == []
        assert all(table.cards[c].amount == 4 for c in table.market.coins)

    def test_empty_coin_stack(self, table):
        alice = table.current_player
        alice.resources = Resources(yellow=2, green=2)
        table.cards[table.market.coins[0]].amount = 0

        assert apply_action(table, ClaimPointCardAction(position=0)).success
        assert alice.coins == []

    def test_window_refills(self, table):
        table.current_player.resources = Resources(yellow=2, green=2)
        next_golem = table.market.point_deck[0]

        apply_action(table, ClaimPointCardAction(position=0))

        assert table.market.point_cards[-1] == next_golem

    def test_unaffordable(self, table):
        assert_rejected(table, ClaimPointCardAction(position=4), "AFFORDABILITY_ERROR")

    def test_fifth_golem_triggers_last_round(self, table):
        alice = table.current_player
        alice.resources = Resources(yellow=2, green=2)
        for _ in range(4):
            alice.point_cards.append(table.register_card(create_card_from_name("golem_0022")))

        result = apply_action(table, ClaimPointCardAction(position=0))

        assert result.success
        assert table.last_round
        assert "Last round triggered" in result.state_changes


class TestRest:
    """Tests for resting."""

    def test_rest_returns_played_cards(self, table, add_to_hand):
        alice = table.current_player
        add_to_hand(table, alice, "mint_0011")
        add_to_hand(table, alice, "mint_0003")
        apply_action(table, ProduceAction(card_index=0))

        result = apply_action(table, RestAction())

        assert result.success
        assert len(alice.hand) == 2
        assert alice.played_cards == []
        assert alice.has_rested


class TestDeposit:
    """Tests for leaving crystals on earlier market cards."""

    def test_deposit_one_crystal_per_earlier_card(self, table):
        alice = table.current_player
        alice.resources = Resources(yellow=2, green=1)
        first, second = table.market.action_cards[:2]

        action = DepositCrystalsAction(target_position=3, deposits={1: Y, 2: G})
        result = apply_action(table, action)

        assert result.success
        assert not action.ends_turn
        assert alice.resources == Resources(yellow=1)
        assert table.cards[first].deposits == {1: [Y]}
        assert table.cards[second].deposits == {2: [G]}

    def test_missing_deposit(self, table):
        table.current_player.resources = Resources(yellow=3)
        action = DepositCrystalsAction(target_position=3, deposits={1: Y})
        assert_rejected(table, action, "ILLEGAL_MOVE")

    def test_extra_deposit(self, table):
        table.current_player.resources = Resources(yellow=3)
        action = DepositCrystalsAction(target_position=2, deposits={1: Y, 2: Y})
        assert_rejected(table, action, "VALIDATION_ERROR")

    @pytest.mark.parametrize("target", [0, 1, 6])
    def test_target_out_of_range(self, table, target):
        table.current_player.resources = Resources(yellow=6)
        deposits = {p: Y for p in range(1, target)}
        action = DepositCrystalsAction(target_position=target, deposits=deposits)
        assert_rejected(table, action, "VALIDATION_ERROR")

    def test_unaffordable(self, table):
        action = DepositCrystalsAction(target_position=2, deposits={1: B})
        assert_rejected(table, action, "AFFORDABILITY_ERROR")


class TestCollect:
    """Tests for taking deposits back off market cards."""

    def test_collect_one(self, table):
        alice = table.current_player
        card = table.cards[table.market.action_cards[2]]
        card.add_deposit(1, Y)
        card.add_deposit(2, G)

        result = apply_action(table, CollectCrystalsAction(market_index=2, positions=(2,)))

        assert result.success
        assert alice.resources == Resources(green=1)
        assert card.deposits == {1: [Y]}

    def test_collect_last_deposit_rejected(self, table):
        table.cards[table.market.action_cards[0]].add_deposit(1, Y)
        action = CollectCrystalsAction(market_index=0, positions=(1,))
        assert_rejected(table, action, "ILLEGAL_MOVE")

    def test_collect_all(self, table):
        alice = table.current_player
        card = table.cards[table.market.action_cards[3]]
        card.add_deposit(3, B)
        card.add_deposit(1, Y)
        card.add_deposit(1, G)

        result = apply_action(table, CollectAllCrystalsAction(market_index=3))

        assert result.success
        assert alice.resources == Resources(green=1, blue=1)
        assert card.deposits == {1: [Y]}

    def test_collect_over_limit_sets_pending_discard(self, table):
        alice = table.current_player
        alice.resources = Resources(yellow=10)
        card = table.cards[table.market.action_cards[0]]
        for crystal in (Y, G, B):
            card.add_deposit(1, crystal)

        assert apply_action(table, CollectAllCrystalsAction(market_index=0)).success
        assert alice.pending_discard == 2

    def test_bad_market_index(self, table):
        assert_rejected(table, CollectAllCrystalsAction(market_index=7), "VALIDATION_ERROR")
