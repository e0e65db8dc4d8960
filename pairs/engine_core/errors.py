"""
Engine errors.

Only configuration and lookup problems are raised. Illegal moves are
returned as rejected MoveResults and never raised.
"""


class PairsError(Exception):
    """Base class for engine errors."""


class InvalidConfiguration(PairsError, ValueError):
    """A session was requested with an unsupported setup (e.g. player count)."""


class SessionNotFound(PairsError, KeyError):
    """No session is stored under the given game id."""

    def __init__(self, game_id: str):
        super().__init__(game_id)
        self.game_id = game_id

    def __str__(self) -> str:
        return f"Game {self.game_id} not found"
