"""View controller: the state machine of one analysis session.

States:
    UPLOAD    -> no document
    ANALYZING -> document encoded, extraction in flight, chat open
    READY     -> analysis available, chat open

Selecting a file moves UPLOAD -> ANALYZING exactly once and always ends in
READY or back in UPLOAD. ``reset`` returns to UPLOAD from anywhere. Calls
in flight cannot be cancelled, so every await is followed by a generation
check: results that land after a reset are dropped.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from quantscholar.encoding.document import DocumentPayload, UploadSource, encode_document
from quantscholar.errors import ChatError, ExtractionError, ReadError
from quantscholar.gateway.base import AIGateway, ChatSession
from quantscholar.gateway.prompts import ANALYSIS_FAILED_NOTICE, CHAT_ERROR_TEXT
from quantscholar.models.analysis import AnalysisResult
from quantscholar.models.schemas import SessionSnapshot, ViewState
from quantscholar.session.conversation import ConversationStore

logger = logging.getLogger(__name__)

READ_FAILED_NOTICE = "Failed to read the file. Please try again."

Listener = Callable[[SessionSnapshot], None]


@dataclass(frozen=True)
class _Exchange:
    """A question waiting for its reply to be streamed."""

    placeholder_id: str
    text: str
    chat: ChatSession
    conversation: ConversationStore
    generation: int


class ViewController:
    """Owns the document, analysis, chat session and conversation of one user.

    The gateway is injected; the controller never reaches for globals.
    """

    def __init__(self, gateway: AIGateway) -> None:
        self._gateway = gateway
        self._state = ViewState.UPLOAD
        self._payload: DocumentPayload | None = None
        self._analysis: AnalysisResult | None = None
        self._chat: ChatSession | None = None
        self._conversation = ConversationStore()
        self._notice: str | None = None
        self._generation = 0
        self._listeners: list[Listener] = []
        self._exchange: _Exchange | None = None

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def analysis(self) -> AnalysisResult | None:
        return self._analysis

    @property
    def chat_session(self) -> ChatSession | None:
        return self._chat

    @property
    def conversation(self) -> ConversationStore:
        return self._conversation

    @property
    def notice(self) -> str | None:
        return self._notice

    # --- Rendering interface ---

    def snapshot(self) -> SessionSnapshot:
        """Build a read-only view of the current session."""
        return SessionSnapshot(
            state=self._state,
            file_name=self._payload.file_name if self._payload else None,
            analysis=self._analysis,
            messages=self._conversation.messages(),
            is_streaming=self._conversation.is_streaming,
            chat_ready=self._chat is not None,
            notice=self._notice,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback invoked with a fresh snapshot on every change.

        Returns:
            Callable that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Session listener failed")

    def _set_state(self, state: ViewState) -> None:
        if state is not self._state:
            logger.info(f"Session state {self._state.value} -> {state.value}")
        self._state = state
        self._notify()

    def _is_stale(self, generation: int) -> bool:
        return generation != self._generation

    def dismiss_notice(self) -> None:
        if self._notice is not None:
            self._notice = None
            self._notify()

    # --- Upload and analysis ---

    def _abort_analysis(self, generation: int, notice: str) -> None:
        if self._is_stale(generation):
            logger.info("Ignoring failure of an analysis discarded by reset")
            return
        # An open chat is dropped too: there is no analysis to pair it with
        self._payload = None
        self._analysis = None
        self._chat = None
        self._exchange = None
        self._conversation.clear()
        self._notice = notice
        self._set_state(ViewState.UPLOAD)

    async def select_file(
        self,
        source: UploadSource | Path | str,
        media_type: str | None = None,
    ) -> bool:
        """Encode a document, then run extraction and open the chat concurrently.

        Args:
            source: Upload object or filesystem path.
            media_type: Optional media type override.

        Returns:
            True if the session reached READY.
        """
        if self._state is not ViewState.UPLOAD:
            logger.warning(f"Ignoring file selection while {self._state.value}")
            return False

        generation = self._generation
        self._notice = None
        self._set_state(ViewState.ANALYZING)

        try:
            payload = await encode_document(source, media_type)
        except ReadError as e:
            logger.warning(f"Document read failed: {e}")
            self._abort_analysis(generation, READ_FAILED_NOTICE)
            return False

        if self._is_stale(generation):
            return False
        self._payload = payload

        extraction = asyncio.create_task(self._gateway.extract_analysis(payload))
        try:
            self._chat = self._gateway.open_chat(payload)
        except ChatError as e:
            logger.error(f"Chat session could not be opened: {e}")
            extraction.cancel()
            self._abort_analysis(generation, ANALYSIS_FAILED_NOTICE)
            return False
        self._notify()

        try:
            analysis = await extraction
        except ExtractionError as e:
            logger.error(f"Error processing paper: {e}")
            self._abort_analysis(generation, ANALYSIS_FAILED_NOTICE)
            return False
        except Exception:
            logger.exception("Unexpected error during extraction")
            self._abort_analysis(generation, ANALYSIS_FAILED_NOTICE)
            return False

        if self._is_stale(generation):
            logger.info("Discarding analysis that completed after reset")
            return False

        self._analysis = analysis
        self._set_state(ViewState.READY)
        return True

    def reset(self) -> None:
        """Return to UPLOAD, dropping the analysis, chat and conversation."""
        self._generation += 1
        self._payload = None
        self._analysis = None
        self._chat = None
        self._notice = None
        self._exchange = None
        # Fresh store: a stream still in flight keeps writing to the old one
        self._conversation = ConversationStore()
        logger.info("Session reset")
        self._set_state(ViewState.UPLOAD)

    # --- Conversation ---

    def can_submit(self, text: str) -> bool:
        """Whether ``submit_user_message`` would accept this text now."""
        return bool(text.strip()) and self._chat is not None and not self._conversation.is_streaming

    def begin_user_message(self, text: str) -> str | None:
        """Record a question and its empty reply placeholder.

        Claims the conversation's single streaming slot synchronously, so a
        second caller is refused before any reply starts.

        Returns:
            The placeholder id to pass to ``stream_reply``, or None when the
            text is blank, no chat is open, or a reply is still streaming.
        """
        text = text.strip()
        chat = self._chat
        if not text or chat is None:
            return None

        placeholder_id = self._conversation.begin_exchange(text)
        if placeholder_id is None:
            logger.debug("Dropping message submitted while a reply is streaming")
            return None

        self._exchange = _Exchange(
            placeholder_id=placeholder_id,
            text=text,
            chat=chat,
            conversation=self._conversation,
            generation=self._generation,
        )
        self._notify()
        return placeholder_id

    async def stream_reply(self, placeholder_id: str) -> bool:
        """Stream the tutor's reply into the placeholder opened by ``begin_user_message``.

        Returns:
            False if no exchange with this placeholder is pending.
        """
        exchange = self._exchange
        if exchange is None or exchange.placeholder_id != placeholder_id:
            return False
        self._exchange = None
        conversation = exchange.conversation

        try:
            async for fragment in self._gateway.send_message(exchange.chat, exchange.text):
                conversation.append_fragment(placeholder_id, fragment)
                if not self._is_stale(exchange.generation):
                    self._notify()
        except ChatError as e:
            logger.warning(f"Chat error: {e}")
            conversation.fail(placeholder_id, CHAT_ERROR_TEXT)
        except Exception:
            logger.exception("Unexpected error while streaming reply")
            conversation.fail(placeholder_id, CHAT_ERROR_TEXT)
        else:
            conversation.complete(placeholder_id)

        if not self._is_stale(exchange.generation):
            self._notify()
        return True

    async def submit_user_message(self, text: str) -> bool:
        """Send a question to the tutor and stream the reply into the conversation.

        Silently ignored when the text is blank, no chat is open, or a reply
        is still streaming.

        Args:
            text: The user's question.

        Returns:
            True if the message was accepted.
        """
        placeholder_id = self.begin_user_message(text)
        if placeholder_id is None:
            return False
        return await self.stream_reply(placeholder_id)
