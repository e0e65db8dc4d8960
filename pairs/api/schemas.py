"""
Pydantic Schemas for API - Request/response models for clients.

These models define the exact contract between clients and the engine.
Field names are camelCase on the wire.

Error Codes:
- INVALID_CONFIGURATION: Unsupported game setup (player count)
- VALIDATION_ERROR: Malformed request field
- GAME_NOT_FOUND: Game does not exist or was deleted
- ILLEGAL_MOVE: Flip rejected by the game rules
- UNKNOWN_MESSAGE: WebSocket message type not understood
"""

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Enums
# =============================================================================

class GameStatus(str, Enum):
    """Game status values."""
    PLAYING = "playing"
    WON = "won"


class MoveOutcome(str, Enum):
    """Outcome of an accepted flip."""
    FLIPPED = "flipped"
    MATCHED = "matched"
    MISMATCHED = "mismatched"


class ErrorCode(str, Enum):
    """Structured error codes."""
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    ILLEGAL_MOVE = "ILLEGAL_MOVE"
    UNKNOWN_MESSAGE = "UNKNOWN_MESSAGE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Inbound messages (tagged on "type")
# =============================================================================

class NewGameRequest(CamelModel):
    """Start a new game."""
    type: Literal["NEW_GAME"] = "NEW_GAME"
    player_count: int = Field(..., ge=1, le=4, description="Number of players (1-4)")


class FlipCardRequest(CamelModel):
    """Flip one card of a running game."""
    type: Literal["FLIP_CARD"] = "FLIP_CARD"
    game_id: str = Field(..., min_length=1)
    card_id: str = Field(..., min_length=1)


ClientRequest = Annotated[
    Union[NewGameRequest, FlipCardRequest],
    Field(discriminator="type"),
]

MESSAGE_TYPES = ("NEW_GAME", "FLIP_CARD")


# REST bodies (game id comes from the path)

class CreateGameBody(CamelModel):
    """
    Request to create a new game.

    The range is checked by the game factory so that an out-of-range count
    is reported as INVALID_CONFIGURATION.
    """
    player_count: int = Field(1, description="Number of players (1-4)")


class FlipCardBody(CamelModel):
    """Request to flip a card."""
    card_id: str = Field(..., min_length=1)


# =============================================================================
# Client views (always built from the sanitizer)
# =============================================================================

class CardView(CamelModel):
    """
    A card as a client may see it.

    value is only set for face-up cards. Dump with exclude_unset so that
    face-down cards carry no value key at all.
    """
    id: str
    is_matched: bool
    value: Optional[str] = None


class PlayerView(CamelModel):
    """A player seat."""
    id: str
    color: str
    score: int = Field(0, ge=0)


class GameStateView(CamelModel):
    """Client-safe game state."""
    game_id: str
    status: GameStatus
    players: list[PlayerView]
    active_player_index: int
    cards: list[CardView]


# =============================================================================
# Response Models
# =============================================================================

class FlipResponse(CamelModel):
    """Response after an accepted flip."""
    outcome: MoveOutcome
    message: str
    unlock_after_ms: Optional[int] = Field(
        None, description="Set on a mismatch: cards flip back after this delay"
    )
    game: GameStateView


class ErrorResponse(CamelModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")


class GameListResponse(CamelModel):
    """Response listing live games."""
    games: list[str]
    count: int


class EndGameResponse(CamelModel):
    """Response after deleting a game."""
    success: bool
    game_id: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
