"""
Game Service - Business logic layer between transports and engine.

The service:
1. Validates inbound requests
2. Resolves flips against the stored state under the session lock
3. Commits the next state and schedules the delayed unlock
4. Returns sanitized views only

This layer is framework-agnostic (used by the FastAPI app, the CLI and tests).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable
import inspect
import logging

from .schemas import (
    ErrorCode,
    ErrorResponse,
    FlipResponse,
    GameStateView,
    MoveOutcome,
    NewGameRequest,
)
from .validation import GAME_NOT_FOUND_REASON, ValidationFailure, validate_message
from ..engine_core.action import DEFAULT_REVEAL_DELAY_MS
from ..engine_core.errors import InvalidConfiguration, SessionNotFound
from ..engine_core.reducer import apply_move, unlock_board_after_no_match
from ..engine_core.sanitizer import sanitize_game_state
from ..session import SessionRegistry, Scheduler, AsyncioScheduler

logger = logging.getLogger(__name__)

# Called with (game_id, sanitized view) after a delayed unlock; may be async
UnlockListener = Callable[[str, dict[str, Any]], Any]


@dataclass
class Reply:
    """
    Outbound message produced for one inbound message.

    broadcast replies carry a game state for every client watching game_id;
    the others go back to the sender only.
    """
    payload: dict[str, Any]
    game_id: str | None = None
    broadcast: bool = False


@dataclass
class GameService:
    """
    Main game service.

    Usage:
        service = GameService()

        view = service.create_game(2)
        response = service.flip_card(view.game_id, view.cards[0].id)
    """
    registry: SessionRegistry = field(default_factory=SessionRegistry)
    scheduler: Scheduler = field(default_factory=AsyncioScheduler)
    reveal_delay_ms: int = DEFAULT_REVEAL_DELAY_MS

    _unlock_listeners: list[UnlockListener] = field(default_factory=list)

    def add_unlock_listener(self, listener: UnlockListener) -> None:
        """Register a callback for states produced by delayed unlocks."""
        self._unlock_listeners.append(listener)

    # =========================================================================
    # Games
    # =========================================================================

    def create_game(self, player_count: int) -> GameStateView | ErrorResponse:
        """Create a game and return its client view."""
        try:
            state = self.registry.create(player_count)
        except InvalidConfiguration as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.INVALID_CONFIGURATION,
                details={"field": "playerCount"},
            )
        return to_view(sanitize_game_state(state))

    def get_game(self, game_id: str) -> GameStateView | ErrorResponse:
        """Get the client view of a game."""
        state = self.registry.find(game_id)
        if state is None:
            return _not_found(game_id)
        return to_view(sanitize_game_state(state))

    def end_game(self, game_id: str) -> bool:
        """
        Delete a game. Pending unlocks for it become no-ops.

        Runs under the session lock, after any flip already in progress.
        """
        return self.registry.delete(game_id)

    def list_games(self) -> list[str]:
        return self.registry.list_ids()

    # =========================================================================
    # Moves
    # =========================================================================

    def flip_card(self, game_id: str, card_id: str) -> FlipResponse | ErrorResponse:
        """
        Flip a card and commit the result.

        On a mismatch the unlock is scheduled after reveal_delay_ms; it
        re-reads the stored state when it fires.
        """
        try:
            with self.registry.lock(game_id):
                state = self.registry.get(game_id)
                result = apply_move(state, card_id, self.reveal_delay_ms)
                if not result.accepted:
                    logger.debug(
                        "Game %s: flip rejected (%s)", game_id, result.reason.value
                    )
                    return ErrorResponse(
                        error=result.message,
                        error_code=ErrorCode.ILLEGAL_MOVE,
                        details={"reason": result.reason.value},
                    )
                self.registry.update(game_id, result.next_state)
        except SessionNotFound:
            return _not_found(game_id)

        logger.info("Game %s: %s", game_id, result.outcome.value)
        if result.next_state.is_over:
            logger.info("Game %s won", game_id)

        if result.needs_unlock:
            self.scheduler.schedule(
                lambda: self._on_unlock_due(game_id),
                result.unlock_after_ms,
            )
            logger.debug("Game %s: unlock in %d ms", game_id, result.unlock_after_ms)

        return FlipResponse(
            outcome=MoveOutcome(result.outcome.value),
            message=result.message,
            unlock_after_ms=result.unlock_after_ms,
            game=to_view(sanitize_game_state(result.next_state)),
        )

    def unlock(self, game_id: str) -> dict[str, Any] | None:
        """
        Apply the delayed unlock to the current stored state.

        Returns the sanitized view, or None if the game is gone or was not
        locked any more.
        """
        try:
            with self.registry.lock(game_id):
                state = self.registry.find(game_id)
                if state is None or not state.lock_board:
                    return None
                new_state = self.registry.update(game_id, unlock_board_after_no_match(state))
        except SessionNotFound:
            logger.debug("Game %s: deleted before unlock", game_id)
            return None

        logger.info(
            "Game %s: unlocked, player %d to move", game_id, new_state.active_player_index
        )
        return sanitize_game_state(new_state)

    def _on_unlock_due(self, game_id: str):
        view = self.unlock(game_id)
        if view is None:
            return None
        pending = []
        for listener in self._unlock_listeners:
            result = listener(game_id, view)
            if inspect.isawaitable(result):
                pending.append(result)
        if pending:
            return _wait_all(pending)
        return None

    # =========================================================================
    # Wire messages
    # =========================================================================

    def handle_message(self, data: Any) -> Reply:
        """
        Handle one decoded client message (NEW_GAME / FLIP_CARD).

        Game states come back as GAME_STATE broadcasts, everything else as
        an ERROR for the sender.
        """
        request = validate_message(data, self.registry.exists)
        if isinstance(request, ValidationFailure):
            return Reply(payload=_failure_payload(request))

        if isinstance(request, NewGameRequest):
            response = self.create_game(request.player_count)
        else:
            response = self.flip_card(request.game_id, request.card_id)

        if isinstance(response, ErrorResponse):
            return Reply(payload=error_payload(response.error_code, response.error))

        view = response.game if isinstance(response, FlipResponse) else response
        return Reply(
            payload=state_payload(dump_view(view)),
            game_id=view.game_id,
            broadcast=True,
        )


async def _wait_all(awaitables: list) -> None:
    for awaitable in awaitables:
        await awaitable


# =============================================================================
# Conversion Helpers
# =============================================================================

def to_view(view: dict[str, Any]) -> GameStateView:
    """Wrap a sanitized dict, keeping absent card values unset."""
    return GameStateView.model_validate(view)


def dump_view(view: GameStateView) -> dict[str, Any]:
    """Serialize a view for the wire; face-down cards get no value key."""
    return view.model_dump(mode="json", by_alias=True, exclude_unset=True)


def state_payload(view: dict[str, Any]) -> dict[str, Any]:
    return {"type": "GAME_STATE", **view}


def error_payload(code: ErrorCode, message: str) -> dict[str, Any]:
    return {"type": "ERROR", "code": code.value, "message": message}


def _not_found(game_id: str) -> ErrorResponse:
    return ErrorResponse(
        error="Game not found",
        error_code=ErrorCode.GAME_NOT_FOUND,
        details={"gameId": game_id},
    )


def _failure_payload(failure: ValidationFailure) -> dict[str, Any]:
    if failure.field == "gameId" and failure.reason == GAME_NOT_FOUND_REASON:
        return error_payload(ErrorCode.GAME_NOT_FOUND, "Game not found")
    if failure.field == "type" and failure.reason.startswith("unknown"):
        return error_payload(ErrorCode.UNKNOWN_MESSAGE, failure.message)
    return error_payload(ErrorCode.VALIDATION_ERROR, failure.message)

