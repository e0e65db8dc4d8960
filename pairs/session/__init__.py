"""
Session Module - Owns live game sessions.

A session is one match:
- Created when a client asks for a new game
- Holds the current authoritative GameState
- Replaced wholesale on every committed move
- Removed only when explicitly deleted

Sessions are EPHEMERAL: in-memory only, no persistence.
"""

from .manager import SessionRegistry, SessionStore, InMemorySessionStore
from .scheduler import Scheduler, AsyncioScheduler, ManualScheduler

__all__ = [
    "SessionRegistry",
    "SessionStore",
    "InMemorySessionStore",
    "Scheduler",
    "AsyncioScheduler",
    "ManualScheduler",
]
