"""
Session Registry - Creates and owns game sessions.

LIFECYCLE:
1. Client asks for a new game -> registry builds and stores a GameState
2. During play:
   - A flip is resolved against the stored state (under the session lock)
   - The resulting state replaces the stored one wholesale
3. Session is removed only when explicitly deleted

STORAGE RULES:
- In-memory only, no persistence
- The store is the single source of truth per game id
- States are immutable; commits are point replacements (last writer wins)
- Distinct sessions never contend on anything but the store's map lock
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator
import logging
import random
import threading

from ..engine_core.errors import SessionNotFound
from ..engine_core.setup import IdSupplier, create_game_state
from ..engine_core.state import GameState

logger = logging.getLogger(__name__)


class SessionStore(ABC):
    """Storage backend for game states keyed by game id."""

    @abstractmethod
    def get(self, game_id: str) -> GameState | None:
        """Return the stored state or None."""

    @abstractmethod
    def set(self, game_id: str, state: GameState) -> None:
        """Store state under game_id, replacing any previous one."""

    @abstractmethod
    def replace(self, game_id: str, state: GameState) -> bool:
        """Store state only if game_id is present. Returns False otherwise."""

    @abstractmethod
    def delete(self, game_id: str) -> bool:
        """Remove the state. Returns True if it existed."""

    @abstractmethod
    def ids(self) -> list[str]:
        """List stored game ids."""


class InMemorySessionStore(SessionStore):
    """Dict-backed store, safe to share between threads."""

    def __init__(self):
        self._states: dict[str, GameState] = {}
        self._lock = threading.Lock()

    def get(self, game_id: str) -> GameState | None:
        with self._lock:
            return self._states.get(game_id)

    def set(self, game_id: str, state: GameState) -> None:
        with self._lock:
            self._states[game_id] = state

    def replace(self, game_id: str, state: GameState) -> bool:
        with self._lock:
            if game_id not in self._states:
                return False
            self._states[game_id] = state
            return True

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._states.pop(game_id, None) is not None

    def ids(self) -> list[str]:
        with self._lock:
            return list(self._states)


class SessionRegistry:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions through the game setup
    - Look up, replace and delete stored states
    - Hand out per-session locks so each resolve-and-commit is serialized

    Usage:
        registry = SessionRegistry()
        state = registry.create(2)

        with registry.lock(state.game_id):
            current = registry.get(state.game_id)
            result = apply_move(current, card_id)
            registry.update(state.game_id, result.next_state)
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        id_supplier: IdSupplier | None = None,
        rng: random.Random | None = None,
    ):
        self._store = store or InMemorySessionStore()
        self._id_supplier = id_supplier
        self._rng = rng
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def create(self, player_count: int = 1) -> GameState:
        """
        Create and store a new session.

        Raises:
            InvalidConfiguration: if player_count is out of range
        """
        state = create_game_state(
            player_count,
            id_supplier=self._id_supplier,
            rng=self._rng,
        )
        self._store.set(state.game_id, state)
        logger.info("Game %s created with %d player(s)", state.game_id, player_count)
        return state

    def get(self, game_id: str) -> GameState:
        """
        Get the current state of a session.

        Raises:
            SessionNotFound: if no session has this id
        """
        state = self._store.get(game_id)
        if state is None:
            raise SessionNotFound(game_id)
        return state

    def find(self, game_id: str) -> GameState | None:
        """Get the current state, or None if the session does not exist."""
        return self._store.get(game_id)

    def exists(self, game_id: str) -> bool:
        return self._store.get(game_id) is not None

    def update(self, game_id: str, state: GameState) -> GameState:
        """
        Replace the stored state wholesale.

        Raises:
            SessionNotFound: if the session was deleted meanwhile
        """
        if not self._store.replace(game_id, state):
            raise SessionNotFound(game_id)
        return state

    def delete(self, game_id: str) -> bool:
        """
        Remove a session. Returns True if it existed.

        Waits for any resolve-and-commit in progress on the same session.
        """
        with self.lock(game_id):
            removed = self._store.delete(game_id)
            with self._locks_guard:
                self._locks.pop(game_id, None)
        if removed:
            logger.info("Game %s deleted", game_id)
        return removed

    def list_ids(self) -> list[str]:
        """List ids of stored sessions."""
        return self._store.ids()

    def count(self) -> int:
        return len(self._store.ids())

    @contextmanager
    def lock(self, game_id: str) -> Iterator[None]:
        """Hold the exclusive lock of one session."""
        with self._locks_guard:
            session_lock = self._locks.get(game_id)
            if session_lock is None:
                session_lock = threading.RLock()
                # Unknown ids get a throwaway lock; lookups under it will fail
                if self._store.get(game_id) is not None:
                    self._locks[game_id] = session_lock
        with session_lock:
            yield
