"""
Player - Per-seat state.

Card collections hold ids into the game's card arena, so every method
that needs card data takes the arena as `cards`.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .action import Action, ProduceAction, TradeAction, UpgradeAction
from .cards import Card
from .errors import StateError, ValidationError
from .resources import MAX_CRYSTALS, Resources


# Point cards that trigger the last round
LAST_ROUND_POINT_CARDS = 5


@dataclass
class Player:
    """State for a single seat."""
    player_id: int
    name: str
    is_ai: bool = False

    resources: Resources = field(default_factory=Resources)
    hand: list[int] = field(default_factory=list)
    played_cards: list[int] = field(default_factory=list)
    point_cards: list[int] = field(default_factory=list)
    coins: list[int] = field(default_factory=list)

    has_rested: bool = False
    pending_discard: int = 0

    def add_card(self, card_id: int) -> None:
        self.hand.append(card_id)

    def hand_card(self, index: int, cards: dict[int, Card]) -> Card:
        if index < 0 or index >= len(self.hand):
            raise ValidationError(f"Invalid hand index: {index}")
        card_id = self.hand[index]
        if card_id not in cards:
            raise StateError(f"Card {card_id} not found")
        return cards[card_id]

    def play_card(
        self,
        action: ProduceAction | UpgradeAction | TradeAction,
        cards: dict[int, Card],
    ) -> Resources:
        """
        Play the hand card at `action.card_index` and move it to played.

        All-or-nothing: the card checks everything before any crystal
        moves, and the card only changes pile once the effect applied.
        """
        card = self.hand_card(action.card_index, cards)
        gained = card.play(self, action)
        self.played_cards.append(self.hand.pop(action.card_index))
        return gained

    def rest(self) -> None:
        """Take every played card back into hand."""
        self.hand.extend(self.played_cards)
        self.played_cards = []
        self.has_rested = True

    def claim_point_card(self, card: Card) -> int:
        points = card.claim(self)
        self.point_cards.append(card.card_id)
        return points

    def can_claim_any(self, point_cards: list[int], cards: dict[int, Card]) -> int | None:
        """Index of the first point card this player can afford, if any."""
        for index, card_id in enumerate(point_cards):
            if cards[card_id].can_claim(self):
                return index
        return None

    def check_last_round(self) -> bool:
        return len(self.point_cards) >= LAST_ROUND_POINT_CARDS

    def update_pending_discard(self) -> int:
        """Record how many crystals are owed above the caravan limit."""
        self.pending_discard = max(self.resources.total() - MAX_CRYSTALS, 0)
        return self.pending_discard

    def get_points(self, cards: dict[int, Card]) -> int:
        """Points from golems and coins."""
        return (
            sum(cards[card_id].points for card_id in self.point_cards)
            + sum(cards[coin_id].points for coin_id in self.coins)
        )

    def get_final_points(self, cards: dict[int, Card]) -> int:
        """Points plus one per non-yellow crystal still held."""
        return self.get_points(cards) + self.resources.final_score_contribution()

    def __str__(self) -> str:
        return (
            f"Player {self.player_id} ({self.name}): Resources={self.resources}, "
            f"Hand={len(self.hand)} cards, PointCards={len(self.point_cards)}"
        )
