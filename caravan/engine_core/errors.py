"""
Engine Errors - Typed failure taxonomy for rejected actions.

Every check in the engine happens before mutation, so raising one of
these never leaves a half-applied action behind. The reducer catches
EngineError and turns it into a failed ActionResult; anything else
is a bug and propagates.

Codes:
- VALIDATION_ERROR: bad index, bounds or malformed payload
- AFFORDABILITY_ERROR: insufficient crystals for a cost or requirement
- ILLEGAL_MOVE: wrong turn, invalid upgrade chain, missing deposits, capacity
- STATE_ERROR: unknown action type, card not found, game already over
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for all rule violations reported by the engine."""
    code = "ENGINE_ERROR"


class ValidationError(EngineError):
    """Bad index, out-of-range position or malformed payload."""
    code = "VALIDATION_ERROR"


class AffordabilityError(EngineError):
    """The player does not hold the crystals an operation needs."""
    code = "AFFORDABILITY_ERROR"


class IllegalMoveError(EngineError):
    """The move is well-formed but breaks a game rule."""
    code = "ILLEGAL_MOVE"


class StateError(EngineError):
    """The game is not in a state where the request makes sense."""
    code = "STATE_ERROR"
