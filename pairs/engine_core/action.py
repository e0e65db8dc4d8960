"""
Move Results - Outcome of resolving a flip.

A flip either:
1. Is rejected (state unchanged, reason given)
2. Flips the first card of a turn
3. Completes a matching pair
4. Completes a mismatching pair (caller must schedule the unlock)
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .state import GameState


# How long a mismatched pair stays visible before flipping back
DEFAULT_REVEAL_DELAY_MS = 800


class MoveOutcome(Enum):
    """What a flip did."""
    REJECTED = "rejected"
    FLIPPED = "flipped"  # Awaiting second flip
    MATCHED = "matched"
    MISMATCHED = "mismatched"  # Board locked until unlock


class RejectReason(Enum):
    """Why a flip was rejected (illegal move)."""
    GAME_NOT_PLAYING = "game_not_playing"
    BOARD_LOCKED = "board_locked"
    UNKNOWN_CARD = "unknown_card"
    CARD_ALREADY_MATCHED = "card_already_matched"
    CARD_ALREADY_FLIPPED = "card_already_flipped"
    TOO_MANY_FLIPPED = "too_many_flipped"


REJECT_MESSAGES = {
    RejectReason.GAME_NOT_PLAYING: "Game is over - no moves allowed",
    RejectReason.BOARD_LOCKED: "Board is locked - wait for the cards to flip back",
    RejectReason.UNKNOWN_CARD: "Card is not on this board",
    RejectReason.CARD_ALREADY_MATCHED: "Card is already matched",
    RejectReason.CARD_ALREADY_FLIPPED: "Card is already face up",
    RejectReason.TOO_MANY_FLIPPED: "Two cards are already face up",
}


@dataclass(frozen=True)
class MoveResult:
    """
    Result of applying a flip.

    next_state is always set: it is the input state itself when the move
    was rejected, so callers can commit unconditionally.
    """
    next_state: GameState
    outcome: MoveOutcome
    reason: RejectReason | None = None
    unlock_after_ms: int | None = None

    @property
    def accepted(self) -> bool:
        return self.outcome != MoveOutcome.REJECTED

    @property
    def needs_unlock(self) -> bool:
        return self.outcome == MoveOutcome.MISMATCHED

    @property
    def message(self) -> str:
        """Human-readable summary, safe to send to clients."""
        if self.reason is not None:
            return REJECT_MESSAGES[self.reason]
        if self.outcome == MoveOutcome.FLIPPED:
            return "Card flipped - pick a second card"
        if self.outcome == MoveOutcome.MATCHED:
            if self.next_state.is_over:
                return "Match! All pairs found"
            return "Match! Same player goes again"
        return "No match - turn passes to the next player"

    @classmethod
    def rejected(cls, state: GameState, reason: RejectReason) -> MoveResult:
        """Create a rejection that leaves the state untouched."""
        return cls(next_state=state, outcome=MoveOutcome.REJECTED, reason=reason)
