"""
Game Setup - Creates the initial state of a session.

This module handles:
- Validating the requested player count
- Seating players with colors from the fixed palette
- Building the 8-pair deck with fresh card ids
- Shuffling (optionally seeded for determinism)
"""

from __future__ import annotations
import random
import uuid
from typing import Callable

from .errors import InvalidConfiguration
from .shuffle import shuffle
from .state import (
    CARD_VALUES,
    MAX_PLAYERS,
    MIN_PLAYERS,
    PLAYER_COLORS,
    Card,
    GameState,
    GameStatus,
    Player,
)

IdSupplier = Callable[[], str]


def new_id() -> str:
    """Default id supplier."""
    return uuid.uuid4().hex


def create_game_state(
    player_count: int = 1,
    id_supplier: IdSupplier | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """
    Set up a new game.

    Args:
        player_count: Number of players (1-4)
        id_supplier: Callable returning unique ids (uuid4 hex by default)
        rng: Random source for the shuffle

    Returns:
        Initial GameState ready for the first flip

    Raises:
        InvalidConfiguration: if player_count is out of range
    """
    if isinstance(player_count, bool) or not isinstance(player_count, int):
        raise InvalidConfiguration(f"Player count must be an integer, got {player_count!r}")
    if player_count < MIN_PLAYERS or player_count > MAX_PLAYERS:
        raise InvalidConfiguration(
            f"Player count must be between {MIN_PLAYERS} and {MAX_PLAYERS}"
        )

    next_id = id_supplier or new_id

    players = _create_players(player_count, next_id)
    cards = shuffle(_create_deck(next_id), rng)

    return GameState(
        game_id=next_id(),
        cards=tuple(cards),
        players=tuple(players),
        active_player_index=0,
        flipped_card_ids=(),
        lock_board=False,
        status=GameStatus.PLAYING,
    )


def _create_players(player_count: int, next_id: IdSupplier) -> list[Player]:
    """Seat players in palette order."""
    return [
        Player(id=next_id(), color=PLAYER_COLORS[i], score=0)
        for i in range(player_count)
    ]


def _create_deck(next_id: IdSupplier) -> list[Card]:
    """Two cards per value, unshuffled."""
    cards = []
    for value in CARD_VALUES:
        cards.append(Card(id=next_id(), value=value))
        cards.append(Card(id=next_id(), value=value))
    return cards
