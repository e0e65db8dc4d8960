"""Shared helpers for building and inspecting test games."""

import itertools

from ..engine_core.state import GameState


def counter_ids(prefix: str = "id"):
    """Deterministic id supplier: id1, id2, ..."""
    counter = itertools.count(1)
    return lambda: f"{prefix}{next(counter)}"


def find_pair(state: GameState) -> tuple[str, str]:
    """Ids of two unmatched cards with the same value."""
    by_value: dict[str, list[str]] = {}
    for card in state.cards:
        if not card.is_matched:
            by_value.setdefault(card.value, []).append(card.id)
    for ids in by_value.values():
        if len(ids) == 2:
            return ids[0], ids[1]
    raise AssertionError("no unmatched pair left")


def find_mismatch(state: GameState) -> tuple[str, str]:
    """Ids of two unmatched cards with different values."""
    unmatched = [card for card in state.cards if not card.is_matched]
    first = unmatched[0]
    for card in unmatched[1:]:
        if card.value != first.value:
            return first.id, card.id
    raise AssertionError("no mismatching cards left")


def partner_of(state: GameState, card_id: str) -> str:
    value = state.get_card(card_id).value
    return next(c.id for c in state.cards if c.value == value and c.id != card_id)
