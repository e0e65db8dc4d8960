"""
Pytest fixtures for Pairs tests.
"""

import random

import pytest

from ..engine_core.setup import create_game_state
from ..engine_core.state import GameState
from ..session import ManualScheduler, SessionRegistry
from ..api.service import GameService
from .helpers import counter_ids


@pytest.fixture
def id_supplier():
    """Predictable ids for players, cards and games."""
    return counter_ids()


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def one_player_state(id_supplier, rng) -> GameState:
    """A fresh single-player game."""
    return create_game_state(1, id_supplier=id_supplier, rng=rng)


@pytest.fixture
def two_player_state(id_supplier, rng) -> GameState:
    """A fresh two-player game."""
    return create_game_state(2, id_supplier=id_supplier, rng=rng)


@pytest.fixture
def registry(rng) -> SessionRegistry:
    """Registry with deterministic shuffles."""
    return SessionRegistry(rng=rng)


@pytest.fixture
def scheduler() -> ManualScheduler:
    """Clock-driven scheduler; nothing fires until advanced."""
    return ManualScheduler()


@pytest.fixture
def service(registry, scheduler) -> GameService:
    """Game service wired to the manual scheduler."""
    return GameService(registry=registry, scheduler=scheduler, reveal_delay_ms=800)
