"""
Tests for the reducer (flip resolution and delayed unlock).

Tests:
- First and second flips
- Match and mismatch resolution
- Turn retention and rotation
- Illegal moves leave the state untouched
- Win detection
"""

import pytest

from ..engine_core.action import DEFAULT_REVEAL_DELAY_MS, MoveOutcome, RejectReason
from ..engine_core.reducer import apply_move, unlock_board_after_no_match
from ..engine_core.state import GameStatus, PAIR_COUNT
from .helpers import find_mismatch, find_pair


def play_out(state):
    """Match every pair in turn; returns the final state."""
    while state.status == GameStatus.PLAYING:
        first, second = find_pair(state)
        state = apply_move(state, first).next_state
        state = apply_move(state, second).next_state
    return state


class TestFirstFlip:
    """Tests for the first flip of a turn."""

    def test_first_flip_only_records_card(self, two_player_state):
        """Flipping one card appends it and changes nothing else."""
        state = two_player_state
        card_id = state.cards[0].id

        result = apply_move(state, card_id)

        assert result.outcome == MoveOutcome.FLIPPED
        assert result.accepted
        assert not result.needs_unlock
        assert result.next_state == state._copy_with(flipped_card_ids=(card_id,))

    def test_input_state_not_mutated(self, two_player_state):
        state = two_player_state
        apply_move(state, state.cards[0].id)

        assert state.flipped_card_ids == ()


class TestMatch:
    """Scenario A and friends."""

    def test_single_player_match(self, one_player_state):
        """Matching a pair scores, marks both cards and clears the flip."""
        state = one_player_state
        first, second = find_pair(state)

        state = apply_move(state, first).next_state
        result = apply_move(state, second)
        new_state = result.next_state

        assert result.outcome == MoveOutcome.MATCHED
        assert new_state.players[0].score == 1
        assert new_state.get_card(first).is_matched
        assert new_state.get_card(second).is_matched
        assert new_state.flipped_card_ids == ()
        assert new_state.active_player_index == 0
        assert new_state.lock_board is False

    def test_match_keeps_turn(self, two_player_state):
        """The active player goes again after a match."""
        state = two_player_state._copy_with(active_player_index=1)
        first, second = find_pair(state)

        state = apply_move(state, first).next_state
        state = apply_move(state, second).next_state

        assert state.active_player_index == 1
        assert state.players[1].score == 1
        assert state.players[0].score == 0

    def test_other_cards_untouched(self, one_player_state):
        state = one_player_state
        first, second = find_pair(state)

        state = apply_move(apply_move(state, first).next_state, second).next_state

        matched = [card.id for card in state.cards if card.is_matched]
        assert sorted(matched) == sorted([first, second])


class TestMismatch:
    """Scenario B: mismatch locks, unlock rotates the turn."""

    def test_mismatch_locks_board(self, two_player_state):
        """Both cards stay flipped and the board locks."""
        state = two_player_state
        first, second = find_mismatch(state)

        state = apply_move(state, first).next_state
        result = apply_move(state, second)

        assert result.outcome == MoveOutcome.MISMATCHED
        assert result.needs_unlock
        assert result.unlock_after_ms == DEFAULT_REVEAL_DELAY_MS
        assert result.next_state.lock_board is True
        assert result.next_state.flipped_card_ids == (first, second)
        assert result.next_state.active_player_index == 0

    def test_custom_reveal_delay(self, two_player_state):
        state = two_player_state
        first, second = find_mismatch(state)

        state = apply_move(state, first, reveal_delay_ms=50).next_state
        result = apply_move(state, second, reveal_delay_ms=50)

        assert result.unlock_after_ms == 50

    def test_unlock_passes_turn(self, two_player_state):
        """After unlock the next player moves with a clean board."""
        state = two_player_state
        first, second = find_mismatch(state)
        state = apply_move(apply_move(state, first).next_state, second).next_state

        unlocked = unlock_board_after_no_match(state)

        assert unlocked.active_player_index == 1
        assert unlocked.flipped_card_ids == ()
        assert unlocked.lock_board is False
        assert unlocked.players == state.players
        assert unlocked.cards == state.cards

    def test_unlock_wraps_around(self, two_player_state):
        """Turn rotation is modulo the player count."""
        state = two_player_state._copy_with(active_player_index=1)
        first, second = find_mismatch(state)
        state = apply_move(apply_move(state, first).next_state, second).next_state

        assert unlock_board_after_no_match(state).active_player_index == 0

    def test_single_player_keeps_turn_after_unlock(self, one_player_state):
        state = one_player_state
        first, second = find_mismatch(state)
        state = apply_move(apply_move(state, first).next_state, second).next_state

        assert unlock_board_after_no_match(state).active_player_index == 0

    def test_unlock_on_unlocked_state_is_noop(self, two_player_state):
        """A stale unlock never rotates the turn."""
        state = two_player_state
        assert unlock_board_after_no_match(state) is state


class TestIllegalMoves:
    """Rejections leave the state exactly as it was."""

    def assert_rejected(self, state, card_id, reason):
        result = apply_move(state, card_id)
        assert result.outcome == MoveOutcome.REJECTED
        assert result.reason == reason
        assert result.next_state is state
        assert not result.accepted
        return result

    def test_flip_same_card_twice(self, two_player_state):
        """Scenario C: re-flipping a face-up card is rejected."""
        state = two_player_state
        card_id = state.cards[0].id
        state = apply_move(state, card_id).next_state

        self.assert_rejected(state, card_id, RejectReason.CARD_ALREADY_FLIPPED)

    def test_unknown_card(self, two_player_state):
        self.assert_rejected(two_player_state, "nope", RejectReason.UNKNOWN_CARD)

    def test_matched_card(self, one_player_state):
        state = one_player_state
        first, second = find_pair(state)
        state = apply_move(apply_move(state, first).next_state, second).next_state

        self.assert_rejected(state, first, RejectReason.CARD_ALREADY_MATCHED)

    def test_board_locked(self, two_player_state):
        """A flip during the reveal is rejected, not queued."""
        state = two_player_state
        first, second = find_mismatch(state)
        state = apply_move(apply_move(state, first).next_state, second).next_state
        third = next(
            c.id for c in state.cards if c.id not in (first, second)
        )

        self.assert_rejected(state, third, RejectReason.BOARD_LOCKED)

    def test_two_already_flipped(self, two_player_state):
        """Defensive: two flipped cards on an unlocked board block a third."""
        state = two_player_state
        ids = tuple(card.id for card in state.cards[:3])
        state = state._copy_with(flipped_card_ids=ids[:2])

        self.assert_rejected(state, ids[2], RejectReason.TOO_MANY_FLIPPED)

    def test_game_won(self, one_player_state):
        state = play_out(one_player_state)

        self.assert_rejected(state, state.cards[0].id, RejectReason.GAME_NOT_PLAYING)

    def test_rejection_message_is_generic(self, two_player_state):
        """Messages never mention card values."""
        result = apply_move(two_player_state, "nope")
        assert result.message == "Card is not on this board"


class TestWinDetection:
    """status becomes won exactly on the last pair."""

    def test_won_only_after_last_pair(self, one_player_state):
        state = one_player_state

        for pairs_done in range(PAIR_COUNT):
            assert state.status == GameStatus.PLAYING
            first, second = find_pair(state)
            state = apply_move(state, first).next_state
            result = apply_move(state, second)
            state = result.next_state

        assert state.status == GameStatus.WON
        assert state.all_matched
        assert result.message == "Match! All pairs found"

    def test_scores_sum_to_pair_count(self, two_player_state):
        state = play_out(two_player_state)

        assert state.total_score == PAIR_COUNT
        assert state.players[0].score == PAIR_COUNT

    @pytest.mark.parametrize("misses", [0, 1, 3])
    def test_invariants_through_play(self, two_player_state, misses):
        """Invariants hold after every transition, misses included."""
        state = two_player_state

        for _ in range(misses):
            first, second = find_mismatch(state)
            state = apply_move(apply_move(state, first).next_state, second).next_state
            assert state.lock_board and len(state.flipped_card_ids) == 2
            state = unlock_board_after_no_match(state)

        while state.status == GameStatus.PLAYING:
            first, second = find_pair(state)
            for card_id in (first, second):
                state = apply_move(state, card_id).next_state
                assert len(state.flipped_card_ids) <= 2
                assert len(set(state.flipped_card_ids)) == len(state.flipped_card_ids)
                assert not state.lock_board
                assert 0 <= state.active_player_index < state.num_players
                assert state.total_score <= PAIR_COUNT
                assert (state.status == GameStatus.WON) == state.all_matched

        assert state.active_player_index == misses % 2
