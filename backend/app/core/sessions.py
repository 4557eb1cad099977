import logging
import time
from collections import OrderedDict
from typing import Dict

from forecaster.config import ForecastConfig
from forecaster.orchestrator import ForecastOrchestrator

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    One orchestrator per user session; nothing is shared between sessions.

    Bounded: opening a session closes those idle for longer than
    `idle_seconds`, then the least recently used ones beyond `max_sessions`.
    """

    def __init__(self, config: ForecastConfig, max_sessions: int = 1000, idle_seconds: float = 3600.0):
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")
        self.config = config
        self.max_sessions = max_sessions
        self.idle_seconds = idle_seconds
        self._sessions: "OrderedDict[str, ForecastOrchestrator]" = OrderedDict()
        self._last_used: Dict[str, float] = {}

    def __len__(self):
        return len(self._sessions)

    def __contains__(self, session_id):
        return session_id in self._sessions

    def _touch(self, session_id: str):
        self._sessions.move_to_end(session_id)
        self._last_used[session_id] = time.monotonic()

    def get(self, session_id: str) -> ForecastOrchestrator | None:
        orchestrator = self._sessions.get(session_id)
        if orchestrator is not None:
            self._touch(session_id)
        return orchestrator

    async def get_or_create(self, session_id: str) -> ForecastOrchestrator:
        orchestrator = self._sessions.get(session_id)
        if orchestrator is None:
            await self._evict(reserve=1)
            orchestrator = ForecastOrchestrator(self.config)
            self._sessions[session_id] = orchestrator
            logger.info("Opened forecast session %s", session_id)
        self._touch(session_id)
        return orchestrator

    async def _evict(self, reserve: int = 0):
        cutoff = time.monotonic() - self.idle_seconds
        idle = [sid for sid, used in self._last_used.items() if used < cutoff]
        for session_id in idle:
            logger.info("Expiring idle forecast session %s", session_id)
            await self.close(session_id)
        while len(self._sessions) + reserve > self.max_sessions:
            session_id = next(iter(self._sessions))
            logger.info("Session limit reached, closing forecast session %s", session_id)
            await self.close(session_id)

    async def close(self, session_id: str) -> bool:
        orchestrator = self._sessions.pop(session_id, None)
        self._last_used.pop(session_id, None)
        if orchestrator is None:
            return False
        await orchestrator.aclose()
        logger.info("Closed forecast session %s", session_id)
        return True

    async def close_all(self):
        for session_id in list(self._sessions):
            await self.close(session_id)
