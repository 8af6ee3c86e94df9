"""
Market - The shared supply of action cards, golems and coins.

Both decks are drawn from the front. Each visible window holds at most
`max_visible` cards and is topped up after every removal while its
deck still has cards. The market holds card ids; the cards themselves
live in the game's arena.
"""

from __future__ import annotations
import random
from dataclasses import dataclass, field

from .errors import ValidationError
from .resources import Resources


MAX_VISIBLE = 5

# Coin stack indices, matching the point-card positions that award them
BRONZE_COIN = 0
SILVER_COIN = 1


@dataclass
class Market:
    """Decks, visible windows and coin stacks."""
    action_cards: list[int] = field(default_factory=list)
    point_cards: list[int] = field(default_factory=list)
    action_deck: list[int] = field(default_factory=list)
    point_deck: list[int] = field(default_factory=list)
    coins: list[int] = field(default_factory=list)
    max_visible: int = MAX_VISIBLE

    @classmethod
    def create(
        cls,
        action_deck: list[int],
        point_deck: list[int],
        coins: list[int],
        rng: random.Random,
        max_visible: int = MAX_VISIBLE,
    ) -> Market:
        """Shuffle both decks with the game's RNG and deal the windows."""
        action_deck = list(action_deck)
        point_deck = list(point_deck)
        rng.shuffle(action_deck)
        rng.shuffle(point_deck)

        market = cls(
            action_deck=action_deck,
            point_deck=point_deck,
            coins=list(coins),
            max_visible=max_visible,
        )
        market.refill_action_cards()
        market.refill_point_cards()
        return market

    def refill_action_cards(self) -> None:
        while len(self.action_cards) < self.max_visible and self.action_deck:
            self.action_cards.append(self.action_deck.pop(0))

    def refill_point_cards(self) -> None:
        while len(self.point_cards) < self.max_visible and self.point_deck:
            self.point_cards.append(self.point_deck.pop(0))

    def get_action_card_cost(self, position: int) -> Resources:
        """
        Price of the action card at `position` when paying outright.

        Free at 0, then 1 and 2 Yellow, then 1 and 2 Green, and one more
        Green per step beyond that.
        """
        if position < 0 or position >= len(self.action_cards):
            raise ValidationError(f"Invalid market position: {position}")

        if position == 0:
            return Resources()
        if position <= 2:
            return Resources(yellow=position)
        if position <= 4:
            return Resources(green=position - 2)
        return Resources(green=position - 1)

    def action_card_at(self, position: int) -> int:
        if position < 0 or position >= len(self.action_cards):
            raise ValidationError(f"Invalid market position: {position}")
        return self.action_cards[position]

    def point_card_at(self, position: int) -> int:
        if position < 0 or position >= len(self.point_cards):
            raise ValidationError(f"Invalid point card position: {position}")
        return self.point_cards[position]

    def acquire_action_card(self, position: int) -> int:
        """Remove the action card at `position` and refill the window."""
        card_id = self.action_card_at(position)
        del self.action_cards[position]
        self.refill_action_cards()
        return card_id

    def acquire_point_card(self, position: int) -> int:
        """Remove the point card at `position` and refill the window."""
        card_id = self.point_card_at(position)
        del self.point_cards[position]
        self.refill_point_cards()
        return card_id
