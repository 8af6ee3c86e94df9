"""
Game State - The single authoritative record of one match.

Design principles:
- Deterministic: one seeded RNG per game, used for every shuffle
- Arena-owned cards: collections hold card ids, never shared objects
- Serializable: snapshot() gives the full client-visible state
- Mutated only through execute_action, next_turn and check_game_over
"""

from __future__ import annotations
import random
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Iterable

from .action import Action, ActionResult
from .cards import (
    Card,
    create_coin_cards,
    create_default_action_cards,
    create_default_point_cards,
    create_initial_action_cards,
)
from .errors import StateError, ValidationError
from .market import Market
from .player import Player
from .reducer import Reducer
from .resources import Resources


MIN_PLAYERS = 2
MAX_PLAYERS = 5

# Starting crystals by seat, after the seat shuffle
STARTING_RESOURCES = [
    Resources(yellow=3),
    Resources(yellow=4),
    Resources(yellow=4),
    Resources(yellow=3, green=1),
    Resources(yellow=3, green=1),
]


@dataclass
class GameState:
    """
    Complete game state at a point in time.

    The active seat is `current_turn % len(players)`; `winner` holds the
    winning player's id once the game is over.
    """
    players: list[Player]
    market: Market
    cards: dict[int, Card] = field(default_factory=dict)

    current_turn: int = 0
    round: int = 1
    game_over: bool = False
    winner: int | None = None
    last_round: bool = False

    # Random seed for determinism
    seed: int = 0
    rng: random.Random = field(default_factory=random.Random, repr=False, compare=False)
    next_card_id: int = 1

    # History (for replay)
    action_history: list[Action] = field(default_factory=list)

    @property
    def current_player(self) -> Player:
        """Get the current player."""
        return self.players[self.current_turn % len(self.players)]

    @property
    def num_players(self) -> int:
        return len(self.players)

    def get_player(self, player_id: int) -> Player | None:
        """Get player by ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def get_card(self, card_id: int) -> Card:
        if card_id not in self.cards:
            raise StateError(f"Card {card_id} not found")
        return self.cards[card_id]

    def register_card(self, card: Card) -> int:
        """Give a card the next arena id and store it."""
        card.card_id = self.next_card_id
        self.cards[card.card_id] = card
        self.next_card_id += 1
        return card.card_id

    def execute_action(self, action: Action) -> ActionResult:
        return Reducer().apply(self, action)

    def next_turn(self) -> None:
        """Hand the turn to the next seat; a full cycle starts a new round."""
        self.current_turn += 1
        if self.current_turn % len(self.players) == 0:
            self.round += 1
            for player in self.players:
                player.has_rested = False

    def check_game_over(self) -> None:
        """
        End the game once the last round has been triggered.

        The winner is the first player, in seat order, with the highest
        final score.
        """
        if not self.last_round and any(p.check_last_round() for p in self.players):
            self.last_round = True
        if not self.last_round:
            return

        self.game_over = True
        best: Player | None = None
        for player in self.players:
            if best is None or player.get_final_points(self.cards) > best.get_final_points(self.cards):
                best = player
        self.winner = best.player_id if best else None

    @property
    def winner_player(self) -> Player | None:
        return self.get_player(self.winner) if self.winner is not None else None

    def clone(self) -> GameState:
        """Deep copy the state, RNG included."""
        return deepcopy(self)

    def snapshot(self) -> dict[str, Any]:
        """Full client-visible state as plain JSON-ready data."""
        market = self.market
        action_cards = []
        for position, card_id in enumerate(market.action_cards):
            data = self.cards[card_id].to_dict()
            data["position"] = position
            data["acquire_cost"] = market.get_action_card_cost(position).to_dict()
            action_cards.append(data)

        winner = self.winner_player
        return {
            "current_turn": self.current_turn,
            "current_player": self.current_player.player_id,
            "round": self.round,
            "game_over": self.game_over,
            "last_round": self.last_round,
            "seed": self.seed,
            "winner": {
                "id": winner.player_id,
                "name": winner.name,
                "points": winner.get_final_points(self.cards),
            } if winner else None,
            "players": [self._player_snapshot(p) for p in self.players],
            "market": {
                "action_cards": action_cards,
                "point_cards": [self.cards[c].to_dict() for c in market.point_cards],
                "action_deck": len(market.action_deck),
                "point_deck": len(market.point_deck),
                "coins": [self.cards[c].to_dict() for c in market.coins],
            },
        }

    def _player_snapshot(self, player: Player) -> dict[str, Any]:
        return {
            "id": player.player_id,
            "name": player.name,
            "is_ai": player.is_ai,
            "resources": player.resources.to_dict(),
            "points": player.get_points(self.cards),
            "final_points": player.get_final_points(self.cards),
            "hand": [self.cards[c].to_dict() for c in player.hand],
            "played_cards": [self.cards[c].to_dict() for c in player.played_cards],
            "point_cards": [self.cards[c].to_dict() for c in player.point_cards],
            "coins": [self.cards[c].to_dict() for c in player.coins],
            "has_rested": player.has_rested,
            "pending_discard": player.pending_discard,
        }


def new_game(
    num_players: int,
    seed: int,
    names: list[str] | None = None,
    ai_players: Iterable[int] = (),
) -> GameState:
    """
    Create a game ready for its first turn.

    Players get ids 1..N, then the seat order is shuffled. Starting
    crystals go by seat. `ai_players` lists the ids played by bots.
    """
    if num_players < MIN_PLAYERS or num_players > MAX_PLAYERS:
        raise ValidationError(
            f"A game needs {MIN_PLAYERS}-{MAX_PLAYERS} players, got {num_players}"
        )
    if names is not None and len(names) != num_players:
        raise ValidationError(f"Expected {num_players} names, got {len(names)}")

    rng = random.Random(seed)
    ai_ids = set(ai_players)
    players = [
        Player(
            player_id=i + 1,
            name=names[i] if names else f"Player {i + 1}",
            is_ai=(i + 1) in ai_ids,
        )
        for i in range(num_players)
    ]
    rng.shuffle(players)

    state = GameState(players=players, market=Market(), seed=seed, rng=rng)

    for seat, player in enumerate(players):
        player.resources = STARTING_RESOURCES[seat].copy()
        for card in create_initial_action_cards():
            player.add_card(state.register_card(card))

    action_deck = [state.register_card(c) for c in create_default_action_cards()]
    point_deck = [state.register_card(c) for c in create_default_point_cards()]
    coins = [state.register_card(c) for c in create_coin_cards(amount=2 * num_players)]
    state.market = Market.create(action_deck, point_deck, coins, rng)

    return state


def next_turn(state: GameState) -> None:
    state.next_turn()


def check_game_over(state: GameState) -> None:
    state.check_game_over()


def snapshot(state: GameState) -> dict[str, Any]:
    return state.snapshot()
