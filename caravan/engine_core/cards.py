"""
Cards - Card entities, their rules, and the default catalogue.

A card is one of:
- ACTION: produce, upgrade or trade crystals when played from hand
- POINT: a golem, claimed by paying its requirement
- COIN: a bonus-token stack handed out with early point claims
- STONE / BACKGROUND: decorative, never in play

Cards are created from their names. The name encodes everything:
    mint_0011          produce 1 Green, 1 Yellow
    upgrade_3          up to 3 upgrade steps per play
    trade_0002_0100    2 Yellow -> 1 Blue
    golem_1111         requires one of each crystal
    coin_3             a 3 point coin

Resource codes are four digits laid out as [pink][blue][green][yellow].
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .action import Action, ProduceAction, TradeAction, UpgradeAction
from .errors import AffordabilityError, IllegalMoveError, ValidationError
from .resources import CrystalType, Resources

if TYPE_CHECKING:
    from .player import Player


class CardType(Enum):
    """Broad card categories."""
    ACTION = "action"
    POINT = "point"
    COIN = "coin"
    STONE = "stone"
    BACKGROUND = "background"


class ActionType(Enum):
    """What an action card does when played."""
    PRODUCE = "produce"
    UPGRADE = "upgrade"
    TRADE = "trade"


# Upgrade budget when a card name does not give a usable one
DEFAULT_TURN_UPGRADE = 2


@dataclass
class Card:
    """
    A single card.

    `card_id` is assigned when the card enters a game's arena and is
    never reused. `deposits` maps a ledger position (1..5) to the stack
    of crystals left there, oldest first.
    """
    card_id: int
    name: str
    card_type: CardType
    action_type: ActionType | None = None

    cost: Resources = field(default_factory=Resources)
    requirement: Resources = field(default_factory=Resources)
    points: int = 0
    amount: int = 0
    turn_upgrade: int = 0

    input: Resources | None = None
    output: Resources | None = None

    deposits: dict[int, list[CrystalType]] = field(default_factory=dict)

    # ---- Playing ----

    def check_play(self, player: Player, action: Action) -> None:
        """
        Raise the reason `action` cannot play this card for `player`.

        Upgrades convert exactly the caller's input into the caller's
        output; trades scale the card's fixed input and output.
        """
        if self.card_type != CardType.ACTION:
            raise IllegalMoveError(f"{self.name} is not an action card")

        if self.action_type == ActionType.PRODUCE:
            if not isinstance(action, ProduceAction):
                raise IllegalMoveError(f"{self.name} is a produce card")
            return

        if self.action_type == ActionType.UPGRADE:
            if not isinstance(action, UpgradeAction):
                raise IllegalMoveError(f"{self.name} is an upgrade card")
            if self.turn_upgrade == 0:
                raise IllegalMoveError(f"{self.name} has no upgrade budget")
            if action.input.total() == 0:
                raise ValidationError("Upgrade needs input crystals")
            if not player.resources.has_all(action.input):
                raise AffordabilityError(
                    f"Cannot upgrade {action.input}: only have {player.resources}"
                )
            if not action.input.can_upgrade(action.output, self.turn_upgrade):
                raise IllegalMoveError(
                    f"Cannot upgrade {action.input} into {action.output} "
                    f"within {self.turn_upgrade} steps"
                )
            return

        if not isinstance(action, TradeAction):
            raise IllegalMoveError(f"{self.name} is a trade card")
        if action.multiplier < 1:
            raise ValidationError(f"Invalid trade multiplier: {action.multiplier}")
        if self.input is not None and not player.resources.has_all(self.input, action.multiplier):
            raise AffordabilityError(
                f"Trade needs {self.input} x{action.multiplier}: only have {player.resources}"
            )

    def can_play(self, player: Player, action: Action) -> bool:
        try:
            self.check_play(player, action)
        except (AffordabilityError, IllegalMoveError, ValidationError):
            return False
        return True

    def play(self, player: Player, action: Action) -> Resources:
        """
        Apply the card's effect to `player`. Returns the crystals gained.

        Checks everything first; on failure nothing has changed.
        """
        self.check_play(player, action)

        if self.action_type == ActionType.PRODUCE:
            gained = self.output.copy() if self.output else Resources()
        elif self.action_type == ActionType.UPGRADE:
            player.resources.subtract_all(action.input)
            gained = action.output.copy()
        else:
            if self.input is not None:
                player.resources.subtract_all(self.input, action.multiplier)
            gained = Resources()
            if self.output is not None:
                gained.add_all(self.output, action.multiplier)

        player.resources.add_all(gained)
        return gained

    # ---- Claiming ----

    def can_claim(self, player: Player) -> bool:
        return (
            self.card_type == CardType.POINT
            and player.resources.has_all(self.requirement)
        )

    def claim(self, player: Player) -> int:
        """Pay the requirement and return the points earned."""
        if self.card_type != CardType.POINT:
            raise IllegalMoveError(f"{self.name} is not a point card")
        if not player.resources.has_all(self.requirement):
            raise AffordabilityError(
                f"{self.name} requires {self.requirement}: only have {player.resources}"
            )
        player.resources.subtract_all(self.requirement)
        return self.points

    # ---- Deposit ledger ----

    def add_deposit(self, position: int, crystal: CrystalType) -> None:
        self.deposits.setdefault(position, []).append(crystal)

    def deposit_count(self) -> int:
        return sum(len(stack) for stack in self.deposits.values())

    def deposited(self) -> Resources:
        """All crystals currently on this card."""
        return Resources.from_crystals(
            crystal for stack in self.deposits.values() for crystal in stack
        )

    def peek_collect(self, positions: list[int] | tuple[int, ...]) -> Resources:
        """
        Crystals `collect_crystals` would take, without taking them.

        Exactly one position may be collected per call, and the card
        always keeps at least one deposit.
        """
        if len(positions) != 1:
            raise ValidationError("Collect exactly one position at a time")
        position = positions[0]
        stack = self.deposits.get(position)
        if not stack:
            raise IllegalMoveError(f"No deposits at position {position} on {self.name}")
        if self.deposit_count() <= 1:
            raise IllegalMoveError(f"{self.name} must keep its last deposit")
        return Resources.from_crystals([stack[0]])

    def collect_crystals(self, player: Player, positions: list[int] | tuple[int, ...]) -> Resources:
        """Move the oldest deposit at the given position to `player`."""
        collected = self.peek_collect(positions)
        position = positions[0]
        stack = self.deposits[position]
        stack.pop(0)
        if not stack:
            del self.deposits[position]
        player.resources.add_all(collected)
        return collected

    def peek_collect_all(self) -> Resources:
        """Crystals `collect_all_crystals` would take."""
        if self.deposit_count() <= 1:
            raise IllegalMoveError(f"{self.name} needs at least two deposits to collect")
        keep_position = min(self.deposits)
        collected = self.deposited()
        collected.subtract(self.deposits[keep_position][0])
        return collected

    def collect_all_crystals(self, player: Player) -> Resources:
        """Move every deposit but one (the oldest at the lowest position) to `player`."""
        collected = self.peek_collect_all()
        keep_position = min(self.deposits)
        self.deposits = {keep_position: self.deposits[keep_position][:1]}
        player.resources.add_all(collected)
        return collected

    def take_all_deposits(self) -> Resources:
        """Empty the ledger; used when the card leaves the market."""
        collected = self.deposited()
        self.deposits = {}
        return collected

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.card_id,
            "name": self.name,
            "type": self.card_type.value,
            "deposits": {
                str(position): [crystal.name.lower() for crystal in stack]
                for position, stack in sorted(self.deposits.items())
            },
        }
        if self.card_type == CardType.ACTION:
            data["action_type"] = self.action_type.value if self.action_type else None
            data["cost"] = self.cost.to_dict()
            data["turn_upgrade"] = self.turn_upgrade
            data["input"] = self.input.to_dict() if self.input else None
            data["output"] = self.output.to_dict() if self.output else None
        elif self.card_type == CardType.POINT:
            data["requirement"] = self.requirement.to_dict()
            data["points"] = self.points
        elif self.card_type == CardType.COIN:
            data["points"] = self.points
            data["amount"] = self.amount
        return data

    def __str__(self) -> str:
        parts = [f"[{self.name}]"]
        if self.card_type == CardType.ACTION:
            if self.action_type == ActionType.UPGRADE:
                parts.append(f"Upgrade: {self.turn_upgrade} steps")
            else:
                label = "Mint:" if self.action_type == ActionType.PRODUCE else "Trade:"
                parts.append(label)
                if self.input is not None:
                    parts.append(f"{self.input} ->")
                if self.output is not None:
                    parts.append(str(self.output))
        elif self.card_type == CardType.POINT:
            parts.append(f"Points: {self.points} Requires: {self.requirement}")
        elif self.card_type == CardType.COIN:
            parts.append(f"Coin: {self.points} points")
        return " ".join(parts)


# =============================================================================
# Catalogue
# =============================================================================

DEFAULT_ACTION_CARD_NAMES = [
    "mint_0003",
    "mint_0004",
    "mint_0011",
    "mint_0012",
    "mint_0020",
    "mint_0100",
    "mint_0101",
    "mint_1000",
    "upgrade_3",
    "trade_0002_0020",
    "trade_0002_0100",
    "trade_0003_0030",
    "trade_0003_0110",
    "trade_0003_1000",
    "trade_0004_0200",
    "trade_0004_1100",
    "trade_0005_0300",
    "trade_0005_2000",
    "trade_0010_0003",
    "trade_0011_1000",
    "trade_0020_0103",
    "trade_0020_0200",
    "trade_0020_1002",
    "trade_0030_0202",
    "trade_0030_0300",
    "trade_0030_1101",
    "trade_0030_2000",
    "trade_0100_0014",
    "trade_0100_0020",
    "trade_0100_0021",
    "trade_0200_0032",
    "trade_0200_1012",
    "trade_0200_1020",
    "trade_0200_2000",
    "trade_0300_3000",
    "trade_1000_0022",
    "trade_1000_0030",
    "trade_1000_0103",
    "trade_1000_0111",
    "trade_1000_0200",
    "trade_1002_2000",
    "trade_2000_0230",
    "trade_2000_0311",
]

DEFAULT_POINT_CARD_NAMES = [
    "golem_0022", "golem_0023", "golem_0032", "golem_0040",
    "golem_0050", "golem_0202", "golem_0203", "golem_0220",
    "golem_0222", "golem_0230", "golem_0302", "golem_0320",
    "golem_0400", "golem_0500", "golem_1012", "golem_1111",
    "golem_1113", "golem_1120", "golem_1131", "golem_1201",
    "golem_1311", "golem_2002", "golem_2003", "golem_2020",
    "golem_2022", "golem_2030", "golem_2200", "golem_2202",
    "golem_2220", "golem_2300", "golem_3002", "golem_3020",
    "golem_3111", "golem_3200", "golem_4000", "golem_5000",
]

# Market coin stacks, in award order: Bronze first, Silver second
COIN_CARD_NAMES = ["coin_3", "coin_1"]
STARTING_HAND_NAMES = ["mint_0002", "upgrade_2"]


def golem_points(requirement: Resources) -> int:
    """
    Level sum of the requirement plus a bonus of at least 2.

    The bonus grows by one for three colours, one more for all four,
    and one for a requirement of exactly six crystals.
    """
    colours = requirement.distinct_types()
    bonus = 0
    if colours >= 3:
        bonus += 1
    if colours >= 4:
        bonus += 1
    if requirement.total() == 6:
        bonus += 1
    return requirement.level_sum() + max(bonus, 2)


def _produce_cost(output: Resources) -> Resources:
    return Resources(yellow=max(output.total() // 2, 1))


def _parse_action_name(name: str, card_id: int) -> Card:
    parts = name.split("_")
    prefix = parts[0]
    card = Card(card_id=card_id, name=name, card_type=CardType.ACTION)

    if prefix == "mint" and len(parts) >= 2:
        card.action_type = ActionType.PRODUCE
        card.output = Resources.from_code(parts[1])
        card.cost = _produce_cost(card.output)

    elif prefix == "upgrade" and len(parts) >= 2:
        card.action_type = ActionType.UPGRADE
        try:
            turns = int(parts[1])
        except ValueError:
            turns = DEFAULT_TURN_UPGRADE
        card.turn_upgrade = turns if turns in (2, 3) else DEFAULT_TURN_UPGRADE

    elif prefix in ("trade", "action") and len(parts) >= 3:
        card.input = Resources.from_code(parts[1])
        card.output = Resources.from_code(parts[2])
        card.cost = Resources(yellow=card.input.total())
        if prefix == "action" and card.input.total() == 0:
            card.action_type = ActionType.PRODUCE
            card.input = None
            card.cost = _produce_cost(card.output)
        else:
            card.action_type = ActionType.TRADE

    else:
        # Unparseable names still become inert produce cards
        card.action_type = ActionType.PRODUCE

    return card


def create_card_from_name(name: str, card_id: int = 0) -> Card:
    """Build a card from its catalogue name."""
    if name.startswith("coin_"):
        try:
            points = int(name.split("_")[1])
        except (IndexError, ValueError):
            points = 0
        return Card(card_id=card_id, name=name, card_type=CardType.COIN, points=points)

    if name.startswith("stone_"):
        return Card(card_id=card_id, name=name, card_type=CardType.STONE)

    if name.endswith("_bg"):
        return Card(card_id=card_id, name=name, card_type=CardType.BACKGROUND)

    if name.startswith("golem_"):
        requirement = Resources.from_code(name.split("_")[1])
        return Card(
            card_id=card_id,
            name=name,
            card_type=CardType.POINT,
            requirement=requirement,
            points=golem_points(requirement),
        )

    return _parse_action_name(name, card_id)


def create_default_action_cards() -> list[Card]:
    return [create_card_from_name(name) for name in DEFAULT_ACTION_CARD_NAMES]


def create_default_point_cards() -> list[Card]:
    return [create_card_from_name(name) for name in DEFAULT_POINT_CARD_NAMES]


def create_coin_cards(amount: int = 0) -> list[Card]:
    coins = [create_card_from_name(name) for name in COIN_CARD_NAMES]
    for coin in coins:
        coin.amount = amount
    return coins


def create_initial_action_cards() -> list[Card]:
    """The two cards every seat starts with."""
    return [create_card_from_name(name) for name in STARTING_HAND_NAMES]
