"""
Tests for API Pydantic schemas.

Validates that:
- Action requests map onto engine actions
- The action union is discriminated by kind
- Error codes match the engine's error codes
"""

import pytest
from pydantic import TypeAdapter, ValidationError

from ..api.schemas import (
    ActionRequest,
    CreateSessionRequest,
    ErrorCode,
    ErrorResponse,
    GameStateResponse,
    SubmitActionRequest,
    UpgradeRequest,
)
from ..engine_core.action import (
    AcquireCardAction,
    CollectCrystalsAction,
    DiscardCrystalsAction,
    RestAction,
    UpgradeAction,
)
from ..engine_core.errors import AffordabilityError, IllegalMoveError, StateError
from ..engine_core.errors import ValidationError as EngineValidationError
from ..engine_core.resources import CrystalType, Resources
from ..engine_core.state import new_game


class TestActionRequests:
    """Tests for converting request payloads into engine actions."""

    adapter = TypeAdapter(ActionRequest)

    def test_discriminated_by_kind(self):
        request = self.adapter.validate_python({"kind": "rest", "player_id": 2})
        assert request.to_action() == RestAction(player_id=2)

    def test_acquire_with_string_keys(self):
        request = self.adapter.validate_python({
            "kind": "acquire_card",
            "position": 2,
            "deposits": {"1": "yellow", "2": "green"},
        })

        assert request.to_action() == AcquireCardAction(
            position=2,
            deposits={1: CrystalType.YELLOW, 2: CrystalType.GREEN},
        )

    def test_upgrade(self):
        request = UpgradeRequest(
            card_index=1,
            input={"yellow": 2},
            output={"green": 1, "blue": 1},
        )

        assert request.to_action() == UpgradeAction(
            card_index=1,
            input=Resources(yellow=2),
            output=Resources(green=1, blue=1),
        )

    def test_discard_and_collect(self):
        discard = self.adapter.validate_python({"kind": "discard_crystals", "discard": {"pink": 1}})
        collect = self.adapter.validate_python(
            {"kind": "collect_crystals", "market_index": 2, "positions": [3]}
        )

        assert discard.to_action() == DiscardCrystalsAction(discard=Resources(pink=1))
        assert collect.to_action() == CollectCrystalsAction(market_index=2, positions=(3,))

    @pytest.mark.parametrize(
        "data",
        [
            {"kind": "steal"},
            {"kind": "produce"},
            {"kind": "produce", "card_index": -1},
            {"kind": "trade", "card_index": 0, "multiplier": 0},
            {"kind": "acquire_card", "position": 1, "deposits": {"1": "purple"}},
            {"kind": "collect_crystals", "market_index": 0, "positions": []},
            {"kind": "upgrade", "card_index": 0, "input": {"yellow": -1}, "output": {}},
        ],
    )
    def test_rejected_payloads(self, data):
        with pytest.raises(ValidationError):
            SubmitActionRequest(action=data)


class TestSessionSchemas:
    """Tests for session and state models."""

    def test_create_session_defaults(self):
        request = CreateSessionRequest()

        assert request.num_players == 2
        assert request.num_humans == 1
        assert request.bot_policy == "greedy"
        assert request.random_seed is None

    @pytest.mark.parametrize("num_players", [1, 6])
    def test_player_bounds(self, num_players):
        with pytest.raises(ValidationError):
            CreateSessionRequest(num_players=num_players)

    def test_game_state_from_snapshot(self):
        state = new_game(2, seed=42)

        response = GameStateResponse(session_id="s", status="your_turn", **state.snapshot())
        data = response.model_dump(mode="json")

        assert data["status"] == "your_turn"
        assert data["players"][0]["resources"]["yellow"] == 3
        assert data["market"]["coins"][0]["name"] == "coin_3"
        assert data["market"]["coins"][0]["amount"] == 4
        assert data["winner"] is None


class TestErrorCodes:
    """Tests for the error contract."""

    @pytest.mark.parametrize(
        "error",
        [EngineValidationError, AffordabilityError, IllegalMoveError, StateError],
    )
    def test_engine_codes_are_api_codes(self, error):
        assert ErrorCode(error.code).value == error.code

    def test_error_response(self):
        response = ErrorResponse(error="Session x not found", error_code=ErrorCode.SESSION_NOT_FOUND)
        data = response.model_dump(mode="json")

        assert data["error_code"] == "SESSION_NOT_FOUND"
        assert data["api_version"] == "v1"
        assert data["details"] is None
