"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the engine.
Actions are a discriminated union on `kind`; every payload maps 1:1
onto an engine action variant.

Error Codes:
- VALIDATION_ERROR: bad index, bounds or malformed payload
- AFFORDABILITY_ERROR: not enough crystals
- ILLEGAL_MOVE: wrong turn or a move the rules forbid
- STATE_ERROR: game over, unknown action or card
- SESSION_NOT_FOUND: Session does not exist or has expired
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, Field

from ..engine_core.action import Action, action_from_dict


CrystalName = Literal["yellow", "green", "blue", "pink"]


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Session status values."""
    ACTIVE = "active"
    YOUR_TURN = "your_turn"
    AUTOMA_THINKING = "automa_thinking"
    GAME_OVER = "game_over"
    ABANDONED = "abandoned"


class ErrorCode(str, Enum):
    """Structured error codes."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AFFORDABILITY_ERROR = "AFFORDABILITY_ERROR"
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    STATE_ERROR = "STATE_ERROR"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class ResourcesInfo(BaseModel):
    """Crystal counts."""
    yellow: int = Field(0, ge=0)
    green: int = Field(0, ge=0)
    blue: int = Field(0, ge=0)
    pink: int = Field(0, ge=0)


class CardInfo(BaseModel):
    """Card information for display."""
    id: int
    name: str
    type: str = Field(description="action, point, coin, stone, background")
    action_type: Optional[str] = Field(None, description="produce, upgrade, trade")
    cost: Optional[ResourcesInfo] = None
    turn_upgrade: Optional[int] = None
    input: Optional[ResourcesInfo] = None
    output: Optional[ResourcesInfo] = None
    requirement: Optional[ResourcesInfo] = None
    points: Optional[int] = None
    amount: Optional[int] = None
    deposits: dict[str, list[str]] = Field(default_factory=dict)

    # Market window only
    position: Optional[int] = None
    acquire_cost: Optional[ResourcesInfo] = None


class PlayerInfo(BaseModel):
    """Player information for display."""
    id: int
    name: str
    is_ai: bool
    resources: ResourcesInfo
    points: int = 0
    final_points: int = 0
    hand: list[CardInfo] = Field(default_factory=list)
    played_cards: list[CardInfo] = Field(default_factory=list)
    point_cards: list[CardInfo] = Field(default_factory=list)
    coins: list[CardInfo] = Field(default_factory=list)
    has_rested: bool = False
    pending_discard: int = 0


class MarketInfo(BaseModel):
    """Visible market windows, deck sizes and coin stacks."""
    action_cards: list[CardInfo] = Field(default_factory=list)
    point_cards: list[CardInfo] = Field(default_factory=list)
    action_deck: int = 0
    point_deck: int = 0
    coins: list[CardInfo] = Field(default_factory=list)


class WinnerInfo(BaseModel):
    id: int
    name: str
    points: int


# =============================================================================
# Action Models
# =============================================================================

class _ActionBase(BaseModel):
    player_id: Optional[int] = Field(None, description="Must be the current player when set")

    def to_action(self) -> Action:
        """Convert into the engine's action variant."""
        return action_from_dict(self.model_dump())


class ProduceRequest(_ActionBase):
    kind: Literal["produce"] = "produce"
    card_index: int = Field(..., ge=0)


class UpgradeRequest(_ActionBase):
    kind: Literal["upgrade"] = "upgrade"
    card_index: int = Field(..., ge=0)
    input: ResourcesInfo
    output: ResourcesInfo


class TradeRequest(_ActionBase):
    kind: Literal["trade"] = "trade"
    card_index: int = Field(..., ge=0)
    multiplier: int = Field(1, ge=1)


class AcquireCardRequest(_ActionBase):
    kind: Literal["acquire_card"] = "acquire_card"
    position: int = Field(..., ge=0)
    deposits: dict[int, CrystalName] = Field(
        default_factory=dict,
        description="Ledger position (1-based) -> crystal left on that earlier card",
    )


class ClaimPointCardRequest(_ActionBase):
    kind: Literal["claim_point_card"] = "claim_point_card"
    position: int = Field(..., ge=0)


class RestRequest(_ActionBase):
    kind: Literal["rest"] = "rest"


class DiscardCrystalsRequest(_ActionBase):
    kind: Literal["discard_crystals"] = "discard_crystals"
    discard: ResourcesInfo


class DepositCrystalsRequest(_ActionBase):
    kind: Literal["deposit_crystals"] = "deposit_crystals"
    target_position: int = Field(..., ge=1, description="1-based market position")
    deposits: dict[int, CrystalName] = Field(default_factory=dict)


class CollectCrystalsRequest(_ActionBase):
    kind: Literal["collect_crystals"] = "collect_crystals"
    market_index: int = Field(..., ge=0)
    positions: list[int] = Field(..., min_length=1)


class CollectAllCrystalsRequest(_ActionBase):
    kind: Literal["collect_all_crystals"] = "collect_all_crystals"
    market_index: int = Field(..., ge=0)


ActionRequest = Annotated[
    Union[
        ProduceRequest,
        UpgradeRequest,
        TradeRequest,
        AcquireCardRequest,
        ClaimPointCardRequest,
        RestRequest,
        DiscardCrystalsRequest,
        DepositCrystalsRequest,
        CollectCrystalsRequest,
        CollectAllCrystalsRequest,
    ],
    Field(discriminator="kind"),
]


class SubmitActionRequest(BaseModel):
    """Request to submit one action to a session."""
    action: ActionRequest


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request to create a new game session."""
    num_players: int = Field(2, ge=2, le=5, description="Total seats")
    num_humans: int = Field(1, ge=0, le=5, description="Seats played by clients")
    player_names: Optional[list[str]] = Field(None, description="Names by player id")
    bot_policy: str = Field("greedy", description="greedy, random or first_legal")
    random_seed: Optional[int] = Field(None, description="Seed for reproducible games")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Complete game state for display."""
    session_id: str
    status: SessionStatus
    current_turn: int
    current_player: int
    round: int
    game_over: bool
    last_round: bool
    seed: int
    winner: Optional[WinnerInfo] = None
    players: list[PlayerInfo] = Field(default_factory=list)
    market: MarketInfo
    api_version: str = "v1"


class SessionResponse(BaseModel):
    """Response containing session information."""
    session_id: str
    status: SessionStatus
    num_players: int
    human_player_ids: list[int] = Field(default_factory=list)
    current_player: int
    round: int = 1
    created_at: float = 0.0
    api_version: str = "v1"


class TurnResultInfo(BaseModel):
    """Outcome of one applied (or rejected) action."""
    success: bool
    player_id: Optional[int] = None
    action: Optional[dict[str, Any]] = None
    automa: bool = False
    turn_ended: bool = False
    changes: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    error_code: Optional[str] = None
    warnings: list[str] = Field(default_factory=list)


class ActionResponse(BaseModel):
    """Response after submitting an action."""
    session_id: str
    success: bool
    results: list[TurnResultInfo] = Field(default_factory=list)
    game_state: GameStateResponse
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing active sessions."""
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    """Response after ending a session."""
    success: bool
    session_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    sessions: int = 0
