"""
Session Manager - Creates and manages running games.

LIFECYCLE:
1. A game is created with an optional seed, starting currency and tick rate
2. The GameLoop is started (hour 0: initial shop)
3. Optionally a TickDriver runs the hourly and real-time timers
4. The game ends when it is deleted; its timers are cancelled

PERSISTENCE RULES:
- Games live in memory only
- The only way to keep a game is exporting a save code
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import logging
import time
import uuid

from ..engine_core.state import STARTING_CURRENCY, World
from ..engine_core.clock import TICK_RATE_MS
from .driver import TickDriver
from .game_loop import GameLoop

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a game session."""
    ACTIVE = "active"
    ENDED = "ended"


@dataclass
class Session:
    """
    One running game.

    Contains the orchestrator, its optional real-time driver and
    bookkeeping. The session is discarded when the game ends.
    """
    session_id: str
    loop: GameLoop
    created_at: float
    state: SessionState = SessionState.ACTIVE
    driver: TickDriver | None = None

    @property
    def world(self) -> World:
        return self.loop.world

    def is_active(self) -> bool:
        return self.state == SessionState.ACTIVE

    @property
    def realtime(self) -> bool:
        return self.driver is not None and self.driver.running


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create games
    - Track active games
    - Stop timers and forget ended games
    """

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def create_session(
        self,
        seed: int | None = None,
        currency: float = STARTING_CURRENCY,
        tick_rate: int = TICK_RATE_MS,
        realtime: bool = False,
    ) -> Session:
        """
        Create and start a new game.

        Args:
            seed: Seed for the world RNG (None for a random game)
            currency: Starting currency
            tick_rate: Real milliseconds per game hour
            realtime: Start the asyncio timers; needs a running event loop

        Returns:
            The new Session
        """
        world = World.create(seed=seed, currency=currency, tick_rate=tick_rate)
        loop = GameLoop(world)
        loop.start()

        session = Session(
            session_id=str(uuid.uuid4()),
            loop=loop,
            created_at=time.time(),
        )
        if realtime:
            session.driver = TickDriver(loop)
            session.driver.start()

        self._sessions[session.session_id] = session
        logger.info("Created game %s (seed=%s, realtime=%s)", session.session_id, seed, realtime)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    async def end_session(self, session_id: str) -> bool:
        """
        End a game: cancel its timers and remove it from memory.

        Returns False if no such game exists.
        """
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        if session.driver is not None:
            await session.driver.stop()
        session.state = SessionState.ENDED
        logger.info("Ended game %s", session_id)
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [
            sid for sid, session in self._sessions.items()
            if session.is_active()
        ]

    async def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End games older than max_age_seconds that have no running timers.

        Returns the number of games removed.
        """
        current_time = time.time()
        stale = [
            session_id
            for session_id, session in self._sessions.items()
            if current_time - session.created_at > max_age_seconds and not session.realtime
        ]
        for session_id in stale:
            await self.end_session(session_id)
        return len(stale)
