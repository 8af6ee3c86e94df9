"""
Pytest fixtures for Caravan tests.
"""

import random

import pytest

from ..engine_core.cards import create_card_from_name, create_coin_cards
from ..engine_core.market import Market
from ..engine_core.player import Player
from ..engine_core.state import GameState, new_game


# Fixed market layout used by the `table` fixture
TABLE_ACTION_CARDS = [
    "trade_0002_0020",
    "mint_0011",
    "trade_0003_1000",
    "mint_0100",
    "trade_0020_0200",
]
TABLE_ACTION_DECK = ["mint_0003", "mint_0004"]
TABLE_POINT_CARDS = ["golem_0022", "golem_1111", "golem_0040", "golem_2002", "golem_0500"]
TABLE_POINT_DECK = ["golem_0050", "golem_0202"]


@pytest.fixture
def game() -> GameState:
    """A freshly dealt 2-player game with seed 42."""
    return new_game(2, seed=42)


@pytest.fixture
def table() -> GameState:
    """
    A 2-player game with an unshuffled, known market.

    Both players start with no crystals and no cards; tests hand out
    what they need.
    """
    state = GameState(
        players=[Player(player_id=1, name="Alice"), Player(player_id=2, name="Bob")],
        market=Market(),
        seed=7,
        rng=random.Random(7),
    )

    def register(names):
        return [state.register_card(create_card_from_name(name)) for name in names]

    market = Market(
        action_deck=register(TABLE_ACTION_CARDS + TABLE_ACTION_DECK),
        point_deck=register(TABLE_POINT_CARDS + TABLE_POINT_DECK),
        coins=[state.register_card(c) for c in create_coin_cards(amount=4)],
    )
    market.refill_action_cards()
    market.refill_point_cards()
    state.market = market
    return state


@pytest.fixture
def add_to_hand():
    """Return a helper that puts a named card in a player's hand; gives its hand index."""

    def _add(state: GameState, player: Player, name: str) -> int:
        card_id = state.register_card(create_card_from_name(name))
        player.add_card(card_id)
        return len(player.hand) - 1

    return _add
