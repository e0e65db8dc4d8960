"""
Game State - Authoritative state of one pairs session.

Design principles:
- Immutable: all transitions return a new state
- Complete: the state alone decides every legal move
- Secret: card values never leave the server unsanitized
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum


# Card values (A-H = 8 pairs = 16 cards for a 4x4 grid)
CARD_VALUES: tuple[str, ...] = ("A", "B", "C", "D", "E", "F", "G", "H")
PAIR_COUNT = len(CARD_VALUES)
DECK_SIZE = PAIR_COUNT * 2

# Seat colors, assigned in order
PLAYER_COLORS: tuple[str, ...] = ("red", "yellow", "blue", "green")
MIN_PLAYERS = 1
MAX_PLAYERS = len(PLAYER_COLORS)


class GameStatus(Enum):
    """Lifecycle of a session."""
    PLAYING = "playing"
    WON = "won"


@dataclass(frozen=True)
class Card:
    """A card on the board. The value is secret until flipped or matched."""
    id: str
    value: str
    is_matched: bool = False

    def matched(self) -> Card:
        """Return the same card marked as matched."""
        return replace(self, is_matched=True)


@dataclass(frozen=True)
class Player:
    """A seat at the table."""
    id: str
    color: str
    score: int = 0

    def with_point(self) -> Player:
        """Return the player with one more pair scored."""
        return replace(self, score=self.score + 1)


@dataclass(frozen=True)
class GameState:
    """
    Complete state of a session at a point in time.

    This is the canonical state owned by the session registry.
    All changes go through the reducer and are committed as a whole.
    """
    game_id: str
    cards: tuple[Card, ...] = ()
    players: tuple[Player, ...] = ()
    active_player_index: int = 0
    flipped_card_ids: tuple[str, ...] = ()
    lock_board: bool = False
    status: GameStatus = GameStatus.PLAYING

    @property
    def active_player(self) -> Player:
        """Get the player whose turn it is."""
        return self.players[self.active_player_index]

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def is_over(self) -> bool:
        return self.status == GameStatus.WON

    @property
    def all_matched(self) -> bool:
        return all(card.is_matched for card in self.cards)

    @property
    def total_score(self) -> int:
        return sum(player.score for player in self.players)

    def get_card(self, card_id: str) -> Card | None:
        """Get card by ID."""
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def is_face_up(self, card: Card) -> bool:
        """A card is face up while flipped or once matched."""
        return card.is_matched or card.id in self.flipped_card_ids

    def with_cards_matched(self, *card_ids: str) -> GameState:
        """Return new state with the given cards marked as matched."""
        new_cards = tuple(
            card.matched() if card.id in card_ids else card
            for card in self.cards
        )
        return self._copy_with(cards=new_cards)

    def with_point_for_active_player(self) -> GameState:
        """Return new state with the active player's score incremented."""
        new_players = tuple(
            player.with_point() if index == self.active_player_index else player
            for index, player in enumerate(self.players)
        )
        return self._copy_with(players=new_players)

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return replace(self, **kwargs)
