"""
WebSocket hub: sockets subscribed per game, and fan-out of game states.
"""

from __future__ import annotations
from typing import Any
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionHub:
    def __init__(self):
        self._by_game: dict[str, list[WebSocket]] = {}

    def subscribe(self, game_id: str, ws: WebSocket) -> None:
        sockets = self._by_game.setdefault(game_id, [])
        if ws not in sockets:
            sockets.append(ws)

    def unsubscribe_all(self, ws: WebSocket) -> None:
        for game_id in list(self._by_game):
            sockets = self._by_game[game_id]
            if ws in sockets:
                sockets.remove(ws)
            if not sockets:
                del self._by_game[game_id]

    def subscribers(self, game_id: str) -> int:
        return len(self._by_game.get(game_id, []))

    async def broadcast(self, game_id: str, payload: dict[str, Any]) -> None:
        """Send payload to every socket watching game_id, dropping dead ones."""
        dead = []
        for ws in list(self._by_game.get(game_id, [])):
            try:
                await ws.send_json(payload)
            except Exception as e:
                logger.warning("broadcast %s: %s", game_id, e)
                dead.append(ws)
        for ws in dead:
            self.unsubscribe_all(ws)
