"""In-memory registry of analysis sessions served over HTTP.

Each upload gets its own ViewController keyed by a random session id.
Nothing is persisted. Sessions live until deleted, evicted to make room
for newer ones, or the process exits.
"""

import logging
import os
import uuid
from collections.abc import Callable

from quantscholar.gateway.base import AIGateway
from quantscholar.gateway.gemini import get_gateway
from quantscholar.session.controller import ViewController

logger = logging.getLogger(__name__)

# Each session holds a whole document in memory
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "32"))


class SessionRegistry:
    """Maps session ids to view controllers, oldest first."""

    def __init__(
        self,
        gateway_factory: Callable[[], AIGateway] = get_gateway,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._gateway_factory = gateway_factory
        self._max_sessions = max_sessions
        self._sessions: dict[str, ViewController] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self) -> tuple[str, ViewController]:
        """Register a new controller in the UPLOAD state.

        Evicts the oldest sessions when the registry is full.

        Raises:
            ValueError: If the gateway cannot be configured.
        """
        controller = ViewController(self._gateway_factory())

        while len(self._sessions) >= self._max_sessions:
            oldest = next(iter(self._sessions))
            logger.warning(f"Session limit {self._max_sessions} reached, evicting {oldest[:8]}")
            self.discard(oldest)

        session_id = uuid.uuid4().hex
        self._sessions[session_id] = controller
        logger.info(f"Created session {session_id[:8]}")
        return session_id, controller

    def get(self, session_id: str) -> ViewController | None:
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        """Reset and forget a session.

        Returns:
            False if the session was unknown.
        """
        controller = self._sessions.pop(session_id, None)
        if controller is None:
            return False
        controller.reset()
        logger.info(f"Discarded session {session_id[:8]}")
        return True

    def clear(self) -> None:
        """Reset and forget every session."""
        for session_id in list(self._sessions):
            self.discard(session_id)


# Module-level singleton instance
_registry: SessionRegistry | None = None


def get_session_registry() -> SessionRegistry:
    """Get or create the global session registry.

    Returns:
        The SessionRegistry instance.
    """
    global _registry
    if _registry is None:
        _registry = SessionRegistry()
    return _registry
