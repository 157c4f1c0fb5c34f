"""
Session Module - Runs games.

A session is one play-through:
- The GameLoop owns the world and processes hours
- The TickDriver (optional) fires the hourly and real-time timers
- The SessionManager keeps games in memory until they are deleted

Sessions are EPHEMERAL: export a save code to keep a game.
"""

from .manager import SessionManager, Session, SessionState
from .game_loop import GameLoop, LoopState, TickResult
from .driver import TickDriver

__all__ = [
    "SessionManager",
    "Session",
    "SessionState",
    "GameLoop",
    "LoopState",
    "TickResult",
    "TickDriver",
]
