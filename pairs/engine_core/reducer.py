"""
Reducer - Applies flips to game state.

The reducer is the single point of state transition.
All state changes go through apply_move() and unlock_board_after_no_match().

Design principles:
- Pure functions: (state, card_id) -> MoveResult
- Validates before applying
- Illegal moves are returned as rejections, never raised
- Turn rotation happens only in the delayed unlock
"""

from __future__ import annotations

from .action import DEFAULT_REVEAL_DELAY_MS, MoveOutcome, MoveResult, RejectReason
from .state import GameState, GameStatus


def apply_move(
    state: GameState,
    card_id: str,
    reveal_delay_ms: int = DEFAULT_REVEAL_DELAY_MS,
) -> MoveResult:
    """
    Flip a card.

    Returns MoveResult with the next state or the rejection reason.
    A MISMATCHED result leaves the board locked; the caller must call
    unlock_board_after_no_match() on the stored state after
    result.unlock_after_ms.
    """
    reason = _validate_move(state, card_id)
    if reason is not None:
        return MoveResult.rejected(state, reason)

    flipped = state.flipped_card_ids + (card_id,)

    if len(flipped) == 1:
        return MoveResult(
            next_state=state._copy_with(flipped_card_ids=flipped),
            outcome=MoveOutcome.FLIPPED,
        )

    first_id, second_id = flipped
    first = state.get_card(first_id)
    second = state.get_card(second_id)

    if first.value == second.value:
        new_state = (
            state
            .with_cards_matched(first_id, second_id)
            .with_point_for_active_player()
        )
        status = GameStatus.WON if new_state.all_matched else GameStatus.PLAYING
        # The active player keeps the turn after a match
        new_state = new_state._copy_with(
            flipped_card_ids=(),
            lock_board=False,
            status=status,
        )
        return MoveResult(next_state=new_state, outcome=MoveOutcome.MATCHED)

    # Both cards stay visible until the unlock
    new_state = state._copy_with(flipped_card_ids=flipped, lock_board=True)
    return MoveResult(
        next_state=new_state,
        outcome=MoveOutcome.MISMATCHED,
        unlock_after_ms=reveal_delay_ms,
    )


def unlock_board_after_no_match(state: GameState) -> GameState:
    """
    Turn a mismatched pair face down and pass the turn.

    A state that is not locked is returned unchanged, so a late or repeated
    unlock never rotates the turn twice.
    """
    if not state.lock_board:
        return state

    next_player_idx = (state.active_player_index + 1) % state.num_players
    return state._copy_with(
        flipped_card_ids=(),
        lock_board=False,
        active_player_index=next_player_idx,
    )


def _validate_move(state: GameState, card_id: str) -> RejectReason | None:
    """
    Validate that a flip is legal in the current state.

    Returns the rejection reason if illegal, None if legal.
    """
    if state.status != GameStatus.PLAYING:
        return RejectReason.GAME_NOT_PLAYING

    if state.lock_board:
        return RejectReason.BOARD_LOCKED

    card = state.get_card(card_id)
    if card is None:
        return RejectReason.UNKNOWN_CARD

    if card.is_matched:
        return RejectReason.CARD_ALREADY_MATCHED

    if card_id in state.flipped_card_ids:
        return RejectReason.CARD_ALREADY_FLIPPED

    if len(state.flipped_card_ids) >= 2:
        return RejectReason.TOO_MANY_FLIPPED

    return None
