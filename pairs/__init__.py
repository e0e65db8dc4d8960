"""
Pairs - Multiplayer Memory-Matching Engine

A server-authoritative engine for the classic pairs (concentration) game.
The engine owns every session and provides:
- Session creation (shuffled 16-card deck, 1-4 players)
- Flip resolution, turn rotation and win detection
- Client-safe views that never reveal face-down cards
"""

__version__ = "0.1.0"
