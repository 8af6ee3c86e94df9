"""
Action System - The action union, its JSON mapping, and results.

Each kind of move is its own variant carrying only the fields it needs:
- PlayCard comes in three shapes (Produce, Upgrade, Trade) because a
  trade scales by a multiplier while an upgrade takes explicit deltas
- AcquireCard, ClaimPointCard, Rest, DiscardCrystals
- DepositCrystals, CollectCrystals, CollectAllCrystals (mid-turn moves)

All state changes flow through actions, and a recorded sequence of
actions replayed through the reducer rebuilds a game exactly.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

from .errors import EngineError, StateError, ValidationError
from .resources import CrystalType, Resources


class ActionType(Enum):
    """Types of player actions."""
    PLAY_CARD = "play_card"
    ACQUIRE_CARD = "acquire_card"
    CLAIM_POINT_CARD = "claim_point_card"
    REST = "rest"
    DISCARD_CRYSTALS = "discard_crystals"
    DEPOSIT_CRYSTALS = "deposit_crystals"
    COLLECT_CRYSTALS = "collect_crystals"
    COLLECT_ALL_CRYSTALS = "collect_all_crystals"


# Moves a player makes on the way to their real turn action
MID_TURN_ACTIONS = frozenset({
    ActionType.DISCARD_CRYSTALS,
    ActionType.DEPOSIT_CRYSTALS,
    ActionType.COLLECT_CRYSTALS,
    ActionType.COLLECT_ALL_CRYSTALS,
})


@dataclass(frozen=True)
class Action:
    """
    Base class for every action variant.

    `player_id` is optional; when set, the reducer rejects the action
    unless that player holds the current turn.
    """
    action_type: ClassVar[ActionType]
    kind: ClassVar[str]

    player_id: int | None = field(default=None, kw_only=True)

    @property
    def ends_turn(self) -> bool:
        """Whether the caller should advance the turn after success."""
        return self.action_type not in MID_TURN_ACTIONS

    def to_dict(self) -> dict[str, Any]:
        return action_to_dict(self)


@dataclass(frozen=True)
class ProduceAction(Action):
    """Play a produce (mint) card from hand."""
    action_type: ClassVar[ActionType] = ActionType.PLAY_CARD
    kind: ClassVar[str] = "produce"

    card_index: int = 0


@dataclass(frozen=True)
class UpgradeAction(Action):
    """
    Play an upgrade card: convert exactly `input` into `output`.

    The pair must be a legal upgrade chain within the card's turn budget.
    """
    action_type: ClassVar[ActionType] = ActionType.PLAY_CARD
    kind: ClassVar[str] = "upgrade"

    card_index: int = 0
    input: Resources = field(default_factory=Resources)
    output: Resources = field(default_factory=Resources)


@dataclass(frozen=True)
class TradeAction(Action):
    """Play a trade card `multiplier` times in one go."""
    action_type: ClassVar[ActionType] = ActionType.PLAY_CARD
    kind: ClassVar[str] = "trade"

    card_index: int = 0
    multiplier: int = 1


@dataclass(frozen=True)
class AcquireCardAction(Action):
    """
    Take the action card at market `position` (0-based).

    `deposits` maps ledger positions 1..position to the crystal left on
    each earlier card; supplying all of them makes the card free.
    """
    action_type: ClassVar[ActionType] = ActionType.ACQUIRE_CARD
    kind: ClassVar[str] = "acquire_card"

    position: int = 0
    deposits: dict[int, CrystalType] = field(default_factory=dict)


@dataclass(frozen=True)
class ClaimPointCardAction(Action):
    """Claim the point card at market `position` (0-based)."""
    action_type: ClassVar[ActionType] = ActionType.CLAIM_POINT_CARD
    kind: ClassVar[str] = "claim_point_card"

    position: int = 0


@dataclass(frozen=True)
class RestAction(Action):
    """Return all played cards to hand."""
    action_type: ClassVar[ActionType] = ActionType.REST
    kind: ClassVar[str] = "rest"


@dataclass(frozen=True)
class DiscardCrystalsAction(Action):
    """Give back exactly the crystals owed over the caravan limit."""
    action_type: ClassVar[ActionType] = ActionType.DISCARD_CRYSTALS
    kind: ClassVar[str] = "discard_crystals"

    discard: Resources = field(default_factory=Resources)


@dataclass(frozen=True)
class DepositCrystalsAction(Action):
    """
    Leave one crystal on every market card before `target_position`.

    `target_position` is 1-based; `deposits` maps positions
    1..target_position-1 to crystals.
    """
    action_type: ClassVar[ActionType] = ActionType.DEPOSIT_CRYSTALS
    kind: ClassVar[str] = "deposit_crystals"

    target_position: int = 1
    deposits: dict[int, CrystalType] = field(default_factory=dict)


@dataclass(frozen=True)
class CollectCrystalsAction(Action):
    """Take the oldest deposit at one ledger position of a market card."""
    action_type: ClassVar[ActionType] = ActionType.COLLECT_CRYSTALS
    kind: ClassVar[str] = "collect_crystals"

    market_index: int = 0
    positions: tuple[int, ...] = ()


@dataclass(frozen=True)
class CollectAllCrystalsAction(Action):
    """Take every deposit on a market card except one."""
    action_type: ClassVar[ActionType] = ActionType.COLLECT_ALL_CRYSTALS
    kind: ClassVar[str] = "collect_all_crystals"

    market_index: int = 0


ACTION_KINDS: dict[str, type[Action]] = {
    cls.kind: cls
    for cls in (
        ProduceAction,
        UpgradeAction,
        TradeAction,
        AcquireCardAction,
        ClaimPointCardAction,
        RestAction,
        DiscardCrystalsAction,
        DepositCrystalsAction,
        CollectCrystalsAction,
        CollectAllCrystalsAction,
    )
}


def _encode_deposits(deposits: dict[int, CrystalType]) -> dict[str, str]:
    return {str(pos): crystal.name.lower() for pos, crystal in sorted(deposits.items())}


def _decode_deposits(raw: dict[Any, Any] | None) -> dict[int, CrystalType]:
    if not raw:
        return {}
    return {int(pos): CrystalType.parse(crystal) for pos, crystal in raw.items()}


def action_to_dict(action: Action) -> dict[str, Any]:
    """Plain JSON-ready mapping of an action, tagged by `kind`."""
    data: dict[str, Any] = {"kind": action.kind, "player_id": action.player_id}

    if isinstance(action, (ProduceAction, TradeAction, UpgradeAction)):
        data["card_index"] = action.card_index
    if isinstance(action, TradeAction):
        data["multiplier"] = action.multiplier
    if isinstance(action, UpgradeAction):
        data["input"] = action.input.to_dict()
        data["output"] = action.output.to_dict()
    if isinstance(action, (AcquireCardAction, ClaimPointCardAction)):
        data["position"] = action.position
    if isinstance(action, (AcquireCardAction, DepositCrystalsAction)):
        data["deposits"] = _encode_deposits(action.deposits)
    if isinstance(action, DepositCrystalsAction):
        data["target_position"] = action.target_position
    if isinstance(action, DiscardCrystalsAction):
        data["discard"] = action.discard.to_dict()
    if isinstance(action, (CollectCrystalsAction, CollectAllCrystalsAction)):
        data["market_index"] = action.market_index
    if isinstance(action, CollectCrystalsAction):
        data["positions"] = list(action.positions)

    return data


def action_from_dict(data: dict[str, Any]) -> Action:
    """
    Rebuild an action from its mapping.

    Raises StateError for an unknown kind and ValidationError for a
    malformed payload.
    """
    kind = data.get("kind")
    cls = ACTION_KINDS.get(kind)  # type: ignore[arg-type]
    if cls is None:
        raise StateError(f"Unknown action type: {kind}")

    player_id = data.get("player_id")
    try:
        if cls is ProduceAction:
            return ProduceAction(card_index=int(data["card_index"]), player_id=player_id)
        if cls is UpgradeAction:
            return UpgradeAction(
                card_index=int(data["card_index"]),
                input=Resources.from_dict(data.get("input") or {}),
                output=Resources.from_dict(data.get("output") or {}),
                player_id=player_id,
            )
        if cls is TradeAction:
            return TradeAction(
                card_index=int(data["card_index"]),
                multiplier=int(data.get("multiplier", 1)),
                player_id=player_id,
            )
        if cls is AcquireCardAction:
            return AcquireCardAction(
                position=int(data["position"]),
                deposits=_decode_deposits(data.get("deposits")),
                player_id=player_id,
            )
        if cls is ClaimPointCardAction:
            return ClaimPointCardAction(position=int(data["position"]), player_id=player_id)
        if cls is DiscardCrystalsAction:
            return DiscardCrystalsAction(
                discard=Resources.from_dict(data.get("discard") or {}),
                player_id=player_id,
            )
        if cls is DepositCrystalsAction:
            return DepositCrystalsAction(
                target_position=int(data["target_position"]),
                deposits=_decode_deposits(data.get("deposits")),
                player_id=player_id,
            )
        if cls is CollectCrystalsAction:
            return CollectCrystalsAction(
                market_index=int(data["market_index"]),
                positions=tuple(int(p) for p in data.get("positions") or ()),
                player_id=player_id,
            )
        if cls is CollectAllCrystalsAction:
            return CollectAllCrystalsAction(
                market_index=int(data["market_index"]),
                player_id=player_id,
            )
        return RestAction(player_id=player_id)
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Malformed {kind} payload: {e}") from e


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether the action succeeded
    - The state it was applied to (if it succeeded)
    - The typed failure (if it was rejected)
    - Human-readable changes, for logs and action feeds
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: str | None = None
    cause: EngineError | None = None

    state_changes: list[str] = field(default_factory=list)

    @classmethod
    def failure(cls, cause: EngineError) -> ActionResult:
        """Create a failure result from a typed engine error."""
        return cls(
            success=False,
            error=str(cause),
            error_code=cause.code,
            cause=cause,
        )

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
    ) -> ActionResult:
        """Create a success result."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
        )
