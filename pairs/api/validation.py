"""
Input validation for inbound client messages.

Messages are checked for shape and bounds before anything touches the
engine. A failure names the offending field and never mutates anything.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Union

from pydantic import TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from .schemas import MESSAGE_TYPES, ClientRequest, FlipCardRequest, NewGameRequest

GAME_NOT_FOUND_REASON = "game not found"

_request_adapter = TypeAdapter(ClientRequest)


@dataclass(frozen=True)
class ValidationFailure:
    """A rejected message: which field, and why."""
    field: str
    reason: str

    @property
    def message(self) -> str:
        return f"{self.field}: {self.reason}"


ValidationResult = Union[NewGameRequest, FlipCardRequest, ValidationFailure]


def validate_message(
    data: Any,
    session_exists: Callable[[str], bool] | None = None,
) -> ValidationResult:
    """
    Validate a raw client message.

    Args:
        data: Decoded JSON message
        session_exists: Optional liveness check for FLIP_CARD game ids

    Returns:
        The typed request, or a ValidationFailure
    """
    if not isinstance(data, dict):
        return ValidationFailure("message", "must be a JSON object")

    message_type = data.get("type")
    if message_type is None:
        return ValidationFailure("type", "missing message type")
    if message_type not in MESSAGE_TYPES:
        return ValidationFailure("type", f"unknown message type: {message_type}")

    try:
        request = _request_adapter.validate_python(data)
    except ValidationError as e:
        return _first_failure(e)

    if isinstance(request, FlipCardRequest) and session_exists is not None:
        if not session_exists(request.game_id):
            return ValidationFailure("gameId", GAME_NOT_FOUND_REASON)

    return request


def validate_new_game(data: dict[str, Any]) -> ValidationResult:
    """Validate a NEW_GAME payload (type may be omitted)."""
    return validate_message({**data, "type": "NEW_GAME"})


def validate_flip_card(
    data: dict[str, Any],
    session_exists: Callable[[str], bool] | None = None,
) -> ValidationResult:
    """Validate a FLIP_CARD payload (type may be omitted)."""
    return validate_message({**data, "type": "FLIP_CARD"}, session_exists)


def _first_failure(error: ValidationError) -> ValidationFailure:
    """Reduce a pydantic error to the first offending field."""
    first = error.errors()[0]
    # loc starts with the union tag, e.g. ("NEW_GAME", "playerCount")
    names = [str(part) for part in first["loc"] if str(part) not in MESSAGE_TYPES]
    field = names[-1] if names else "message"
    if "_" in field:
        field = to_camel(field)
    return ValidationFailure(field, first["msg"])
