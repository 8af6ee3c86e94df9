"""
Resources - The crystal multiset every player carries in their caravan.

Crystals come in four ordered types. The order matters twice:
- upgrades may only move a crystal to an equal or higher type
- only upgraded (non-yellow) crystals score at the end of the game
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

from .errors import ValidationError


class CrystalType(IntEnum):
    """Crystal types, ordered by value."""
    YELLOW = 1
    GREEN = 2
    BLUE = 3
    PINK = 4

    @classmethod
    def parse(cls, value: str | int | CrystalType) -> CrystalType:
        """Accept an enum member, its level, or its (case-insensitive) name."""
        if isinstance(value, CrystalType):
            return value
        if isinstance(value, str):
            return cls[value.strip().upper()]
        return cls(value)


# Maximum number of crystals a caravan may hold after an action settles
MAX_CRYSTALS = 10


@dataclass
class Resources:
    """
    Non-negative crystal counts per type.

    All multiplier-taking methods scale the other operand; a multiplier
    below 1 is treated as 1.
    """
    yellow: int = 0
    green: int = 0
    blue: int = 0
    pink: int = 0

    @classmethod
    def from_crystals(cls, crystals: Iterable[CrystalType]) -> Resources:
        """Count a sequence of individual crystals."""
        result = cls()
        for crystal in crystals:
            result.add(crystal, 1)
        return result

    @classmethod
    def from_code(cls, code: str) -> Resources:
        """
        Parse a 4-digit card-name code laid out as [pink][blue][green][yellow].

        "0002" is 2 yellow, "0011" is 1 green and 1 yellow. Anything that
        is not exactly four digits yields an empty multiset.
        """
        if len(code) != 4 or not code.isdigit():
            return cls()
        return cls(
            pink=int(code[0]),
            blue=int(code[1]),
            green=int(code[2]),
            yellow=int(code[3]),
        )

    @classmethod
    def from_dict(cls, data: dict[str, int]) -> Resources:
        """Build from a {"yellow": n, ...} mapping; unknown keys are rejected."""
        result = cls()
        for name, count in data.items():
            count = int(count)
            if count < 0:
                raise ValidationError(f"Negative crystal count for {name}: {count}")
            result.set(CrystalType.parse(name), count)
        return result

    def to_dict(self) -> dict[str, int]:
        return {
            "yellow": self.yellow,
            "green": self.green,
            "blue": self.blue,
            "pink": self.pink,
        }

    def get(self, crystal: CrystalType) -> int:
        return getattr(self, crystal.name.lower())

    def set(self, crystal: CrystalType, count: int) -> None:
        setattr(self, crystal.name.lower(), count)

    def is_non_negative(self) -> bool:
        return all(self.get(crystal) >= 0 for crystal in CrystalType)

    def has(self, crystal: CrystalType, count: int = 1) -> bool:
        return self.get(crystal) >= count

    def has_all(self, required: Resources, multiplier: int = 1) -> bool:
        """Check that `required * multiplier` is available."""
        multiplier = max(multiplier, 1)
        return all(
            self.get(crystal) >= required.get(crystal) * multiplier
            for crystal in CrystalType
        )

    def add(self, crystal: CrystalType, count: int = 1) -> None:
        self.set(crystal, self.get(crystal) + count)

    def subtract(self, crystal: CrystalType, count: int = 1) -> bool:
        """Remove crystals; returns False (and changes nothing) if short."""
        if not self.has(crystal, count):
            return False
        self.set(crystal, self.get(crystal) - count)
        return True

    def add_all(self, other: Resources, multiplier: int = 1) -> None:
        multiplier = max(multiplier, 1)
        for crystal in CrystalType:
            self.add(crystal, other.get(crystal) * multiplier)

    def subtract_all(self, required: Resources, multiplier: int = 1) -> bool:
        """Remove `required * multiplier`; all-or-nothing."""
        multiplier = max(multiplier, 1)
        if not self.has_all(required, multiplier):
            return False
        for crystal in CrystalType:
            self.set(crystal, self.get(crystal) - required.get(crystal) * multiplier)
        return True

    def copy(self) -> Resources:
        return Resources(
            yellow=self.yellow,
            green=self.green,
            blue=self.blue,
            pink=self.pink,
        )

    def total(self) -> int:
        return self.yellow + self.green + self.blue + self.pink

    def level_sum(self) -> int:
        """Weighted sum: yellow=1, green=2, blue=3, pink=4."""
        return sum(self.get(crystal) * int(crystal) for crystal in CrystalType)

    def final_score_contribution(self) -> int:
        """Yellow is the free base resource; every other crystal scores 1."""
        return self.green + self.blue + self.pink

    def max_multiplier(self, required: Resources) -> int:
        """How many whole times `required` fits into these resources."""
        limits = [
            self.get(crystal) // required.get(crystal)
            for crystal in CrystalType
            if required.get(crystal) > 0
        ]
        return min(limits) if limits else 0

    def distinct_types(self) -> int:
        return sum(1 for crystal in CrystalType if self.get(crystal) > 0)

    def crystals(self) -> list[CrystalType]:
        """Expand into individual crystals, cheapest first."""
        return [
            crystal
            for crystal in CrystalType
            for _ in range(self.get(crystal))
        ]

    def can_upgrade(self, target: Resources, max_levels: int) -> bool:
        """
        Check whether this exact multiset can become `target`.

        Each crystal may only stay or move up, the crystal count is
        conserved, and the total number of level steps is bounded by
        `max_levels`.

        Feasibility uses a greedy matching: origin crystals are taken in
        ascending type order and each claims the lowest still-free target
        slot of an equal or higher type. Because crystals never move down,
        the earliest feasible assignment is always a valid one.
        """
        if self.total() != target.total():
            return False

        delta = target.level_sum() - self.level_sum()
        if delta < 0 or delta > max_levels:
            return False

        slots = {crystal: target.get(crystal) for crystal in CrystalType}
        for origin in CrystalType:
            for _ in range(self.get(origin)):
                slot = next(
                    (c for c in CrystalType if c >= origin and slots[c] > 0),
                    None,
                )
                if slot is None:
                    return False
                slots[slot] -= 1

        return all(count == 0 for count in slots.values())

    def __str__(self) -> str:
        parts = [
            f"{self.get(crystal)} {crystal.name.title()}"
            for crystal in CrystalType
            if self.get(crystal) > 0
        ]
        return ", ".join(parts) if parts else "None"
