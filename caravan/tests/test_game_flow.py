"""
Tests for game setup, turn order and the end of the game.

Tests:
- Seeded setup and determinism
- Card conservation
- Turn and round advancement
- Last round and winner selection
"""

import pytest

from ..engine_core.action_generator import legal_actions
from ..engine_core.cards import create_card_from_name
from ..engine_core.errors import ValidationError
from ..engine_core.resources import Resources
from ..engine_core.state import check_game_over, new_game, next_turn, snapshot


def all_card_ids(state):
    """Every card id held by a collection, duplicates kept."""
    market = state.market
    ids = market.action_cards + market.point_cards + market.action_deck + market.point_deck
    ids = ids + market.coins
    for player in state.players:
        ids = ids + player.hand + player.played_cards + player.point_cards
    return ids


class TestNewGame:
    """Tests for game creation."""

    def test_two_player_setup(self, game):
        first, second = game.players

        assert first.resources == Resources(yellow=3)
        assert second.resources == Resources(yellow=4)
        assert len(game.market.action_cards) == 5
        assert len(game.market.point_cards) == 5
        assert game.current_player is first
        assert game.round == 1
        assert not game.game_over

    def test_five_player_starting_crystals(self):
        state = new_game(5, seed=1)
        assert [p.resources for p in state.players] == [
            Resources(yellow=3),
            Resources(yellow=4),
            Resources(yellow=4),
            Resources(yellow=3, green=1),
            Resources(yellow=3, green=1),
        ]

    def test_starting_hands_and_coins(self, game):
        for player in game.players:
            assert [game.cards[c].name for c in player.hand] == ["mint_0002", "upgrade_2"]
        assert [game.cards[c].amount for c in game.market.coins] == [4, 4]

    def test_player_ids_and_names(self):
        state = new_game(3, seed=5, names=["Ana", "Ben", "Cy"], ai_players=[3])

        by_id = {p.player_id: p for p in state.players}
        assert sorted(by_id) == [1, 2, 3]
        assert by_id[1].name == "Ana"
        assert by_id[3].is_ai
        assert not by_id[1].is_ai

    @pytest.mark.parametrize("num_players", [0, 1, 6])
    def test_player_count_bounds(self, num_players):
        with pytest.raises(ValidationError):
            new_game(num_players, seed=1)

    def test_names_must_match_count(self):
        with pytest.raises(ValidationError):
            new_game(2, seed=1, names=["Solo"])

    def test_every_card_in_exactly_one_place(self, game):
        ids = all_card_ids(game)
        assert len(ids) == len(set(ids))
        assert set(ids) == set(game.cards)
        assert len(game.cards) == 2 * 2 + 43 + 36 + 2


class TestDeterminism:
    """Tests that seeds fully determine a game."""

    def test_same_seed_same_game(self):
        assert snapshot(new_game(3, seed=99)) == snapshot(new_game(3, seed=99))

    def test_different_seed_different_market(self):
        first = new_game(2, seed=1)
        second = new_game(2, seed=2)
        assert (
            first.market.action_cards + first.market.point_cards
            != second.market.action_cards + second.market.point_cards
        )

    def test_replaying_actions_rebuilds_state(self):
        played = new_game(2, seed=8)
        for _ in range(30):
            if played.game_over:
                break
            action = legal_actions(played)[0]
            assert played.execute_action(action).success
            if action.ends_turn:
                check_game_over(played)
                if not played.game_over:
                    next_turn(played)

        replayed = new_game(2, seed=8)
        for action in played.action_history:
            assert replayed.execute_action(action).success
            if action.ends_turn:
                check_game_over(replayed)
                if not replayed.game_over:
                    next_turn(replayed)

        assert snapshot(replayed) == snapshot(played)

    def test_clone_is_independent(self, game):
        copy = game.clone()
        copy.current_player.resources.add_all(Resources(pink=1))

        assert game.current_player.resources == Resources(yellow=3)
        assert copy.rng.random() == game.rng.random()


class TestTurns:
    """Tests for turn and round advancement."""

    def test_next_turn_cycles_seats(self, game):
        first, second = game.players

        next_turn(game)
        assert game.current_player is second
        assert game.round == 1

        next_turn(game)
        assert game.current_player is first
        assert game.round == 2

    def test_new_round_clears_rested(self, game):
        for player in game.players:
            player.has_rested = True

        next_turn(game)
        assert all(p.has_rested for p in game.players)

        next_turn(game)
        assert not any(p.has_rested for p in game.players)


class TestGameOver:
    """Tests for the last round and the winner."""

    def give_golems(self, state, player, count, name="golem_0022"):
        for _ in range(count):
            player.point_cards.append(state.register_card(create_card_from_name(name)))

    def test_not_over_below_five_golems(self, table):
        self.give_golems(table, table.players[0], 4)

        check_game_over(table)

        assert not table.last_round
        assert not table.game_over
        assert table.winner is None

    def test_five_golems_end_the_game(self, table):
        alice, bob = table.players
        self.give_golems(table, alice, 5)
        self.give_golems(table, bob, 2, name="golem_0500")

        check_game_over(table)

        assert table.last_round
        assert table.game_over
        assert table.winner == alice.player_id
        assert table.winner_player is alice

    def test_highest_final_points_wins(self, table):
        alice, bob = table.players
        self.give_golems(table, alice, 5)
        self.give_golems(table, bob, 3, name="golem_0500")

        check_game_over(table)

        assert table.winner == bob.player_id

    def test_crystals_break_golem_ties(self, table):
        alice, bob = table.players
        self.give_golems(table, alice, 5)
        self.give_golems(table, bob, 5)
        bob.resources = Resources(yellow=5, green=1)

        check_game_over(table)

        assert table.winner == bob.player_id

    def test_tie_goes_to_earlier_seat(self, table):
        alice, bob = table.players
        self.give_golems(table, alice, 5)
        self.give_golems(table, bob, 5)

        check_game_over(table)

        assert table.winner == alice.player_id

    def test_snapshot_reports_winner(self, table):
        alice, _ = table.players
        self.give_golems(table, alice, 5)
        check_game_over(table)

        data = snapshot(table)

        assert data["game_over"]
        assert data["winner"] == {"id": 1, "name": "Alice", "points": 40}


class TestSnapshot:
    """Tests for the client-visible state."""

    def test_market_positions_and_costs(self, game):
        data = snapshot(game)
        action_cards = data["market"]["action_cards"]

        assert [c["position"] for c in action_cards] == [0, 1, 2, 3, 4]
        assert action_cards[0]["acquire_cost"] == Resources().to_dict()
        assert action_cards[4]["acquire_cost"] == Resources(green=2).to_dict()
        assert data["market"]["action_deck"] == 43 - 5
        assert data["market"]["point_deck"] == 36 - 5

    def test_players(self, game):
        data = snapshot(game)
        first = data["players"][0]

        assert data["current_player"] == first["id"]
        assert first["resources"] == {"yellow": 3, "green": 0, "blue": 0, "pink": 0}
        assert [c["name"] for c in first["hand"]] == ["mint_0002", "upgrade_2"]
        assert first["points"] == 0
        assert first["pending_discard"] == 0
