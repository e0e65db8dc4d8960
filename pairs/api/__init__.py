"""
API Module - Client interface.

Exposes the engine over REST and WebSocket.
A client:
1. Creates a game (NEW_GAME / POST /games)
2. Flips cards (FLIP_CARD / POST /games/{id}/flip)
3. Receives sanitized game states, including the delayed unlock

All state is session-scoped. No accounts, no persistence.
"""

from .schemas import (
    # Requests
    NewGameRequest,
    FlipCardRequest,
    CreateGameBody,
    FlipCardBody,
    # Responses
    GameStateView,
    CardView,
    PlayerView,
    FlipResponse,
    ErrorResponse,
    ErrorCode,
)
from .validation import ValidationFailure, validate_message
from .service import GameService, Reply
from .app import create_app

__all__ = [
    # Requests
    "NewGameRequest",
    "FlipCardRequest",
    "CreateGameBody",
    "FlipCardBody",
    # Responses
    "GameStateView",
    "CardView",
    "PlayerView",
    "FlipResponse",
    "ErrorResponse",
    "ErrorCode",
    # Validation
    "ValidationFailure",
    "validate_message",
    # Service
    "GameService",
    "Reply",
    "create_app",
]
