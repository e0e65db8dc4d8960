"""
Sanitizer - Client-safe projection of game state.

This is the only way game state may leave the server. A face-down card is
sent without its value key at all; a present-but-null value would still tell
the client something.
"""

from __future__ import annotations
from typing import Any

from .state import GameState


def sanitize_game_state(state: GameState) -> dict[str, Any]:
    """
    Project authoritative state into the client view.

    Cards expose their value only while flipped or once matched.
    Players hold no secrets and pass through.
    """
    flipped = set(state.flipped_card_ids)

    cards = []
    for card in state.cards:
        view: dict[str, Any] = {"id": card.id, "isMatched": card.is_matched}
        if card.is_matched or card.id in flipped:
            view["value"] = card.value
        cards.append(view)

    return {
        "gameId": state.game_id,
        "status": state.status.value,
        "players": [
            {"id": p.id, "color": p.color, "score": p.score}
            for p in state.players
        ],
        "activePlayerIndex": state.active_player_index,
        "cards": cards,
    }
