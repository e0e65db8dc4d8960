"""
Engine Core - Deterministic game state management.

The engine is the runtime that:
1. Builds a shuffled GameState for a new session
2. Resolves flips via the reducer
3. Rotates turns after a mismatch
4. Projects client-safe views of the state
"""

from .state import (
    CARD_VALUES,
    DECK_SIZE,
    MAX_PLAYERS,
    MIN_PLAYERS,
    PAIR_COUNT,
    PLAYER_COLORS,
    Card,
    GameState,
    GameStatus,
    Player,
)
from .errors import InvalidConfiguration, PairsError, SessionNotFound
from .shuffle import shuffle
from .setup import IdSupplier, create_game_state, new_id
from .action import DEFAULT_REVEAL_DELAY_MS, MoveOutcome, MoveResult, RejectReason
from .reducer import apply_move, unlock_board_after_no_match
from .sanitizer import sanitize_game_state

__all__ = [
    "CARD_VALUES",
    "DECK_SIZE",
    "MAX_PLAYERS",
    "MIN_PLAYERS",
    "PAIR_COUNT",
    "PLAYER_COLORS",
    "Card",
    "GameState",
    "GameStatus",
    "Player",
    "InvalidConfiguration",
    "PairsError",
    "SessionNotFound",
    "shuffle",
    "IdSupplier",
    "create_game_state",
    "new_id",
    "DEFAULT_REVEAL_DELAY_MS",
    "MoveOutcome",
    "MoveResult",
    "RejectReason",
    "apply_move",
    "unlock_board_after_no_match",
    "sanitize_game_state",
]
