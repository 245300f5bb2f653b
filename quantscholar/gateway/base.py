"""Provider-neutral gateway contract.

The session layer only talks to an ``AIGateway``. Swapping the model
provider means writing another implementation of this protocol; nothing
above the gateway changes.
"""

import uuid
from collections.abc import AsyncIterator
from typing import Any, Protocol

from quantscholar.encoding.document import DocumentPayload
from quantscholar.models.analysis import AnalysisResult


class ChatSession:
    """Opaque handle to a multi-turn conversation seeded with one document.

    The provider chat object is stateful: it accumulates history as messages
    are sent. Gateways own its meaning; callers only pass the handle back.
    """

    def __init__(self, chat: Any, file_name: str | None = None) -> None:
        self.id: str = uuid.uuid4().hex
        self.chat = chat
        self.file_name = file_name

    def __repr__(self) -> str:
        return f"ChatSession(id={self.id[:8]!r}, file_name={self.file_name!r})"


class AIGateway(Protocol):
    """Calls against a hosted generative model."""

    async def extract_analysis(self, payload: DocumentPayload) -> AnalysisResult:
        """Run one structured extraction.

        Raises:
            ExtractionError: On service failure or unusable content.
        """
        ...

    def open_chat(self, payload: DocumentPayload) -> ChatSession:
        """Build a chat session locally, without a network round-trip.

        Raises:
            ChatError: If the session cannot be constructed.
        """
        ...

    def send_message(self, session: ChatSession, text: str) -> AsyncIterator[str]:
        """Stream non-empty reply fragments in arrival order.

        Raises:
            ChatError: On network or service failure, after any fragments
                already delivered.
        """
        ...
