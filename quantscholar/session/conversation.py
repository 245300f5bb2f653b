"""In-memory conversation with a single streaming writer.

Messages are append-only. The one exception is the assistant placeholder of
the current exchange: it is addressed by id and mutated in place until the
exchange completes or fails. ``begin_exchange`` refuses to open a second
exchange while one is streaming, which keeps fragments from two replies
from ever interleaving.
"""

import logging

from quantscholar.models.conversation import ConversationMessage, MessageRole

logger = logging.getLogger(__name__)


class ConversationStore:
    """Ordered messages of one tutoring session."""

    def __init__(self) -> None:
        self._messages: list[ConversationMessage] = []
        self._streaming_id: str | None = None

    def __len__(self) -> int:
        return len(self._messages)

    @property
    def is_streaming(self) -> bool:
        return self._streaming_id is not None

    def messages(self) -> list[ConversationMessage]:
        """Return copies of all messages, oldest first."""
        return [message.model_copy() for message in self._messages]

    def begin_exchange(self, text: str) -> str | None:
        """Append a user message and an empty streaming placeholder.

        Args:
            text: The user's message.

        Returns:
            Id of the placeholder, or None if an exchange is already streaming.
        """
        if self._streaming_id is not None:
            return None

        self._messages.append(ConversationMessage(role=MessageRole.USER, text=text))
        placeholder = ConversationMessage(role=MessageRole.ASSISTANT, is_streaming=True)
        self._messages.append(placeholder)
        self._streaming_id = placeholder.id
        return placeholder.id

    def _streaming_message(self, message_id: str) -> ConversationMessage | None:
        if message_id != self._streaming_id:
            return None
        # The placeholder is always the last message while streaming
        return self._messages[-1]

    def append_fragment(self, message_id: str, fragment: str) -> bool:
        """Append a fragment to the streaming placeholder.

        Returns:
            False if ``message_id`` is not the message currently streaming.
        """
        message = self._streaming_message(message_id)
        if message is None:
            logger.debug(f"Dropping fragment for inactive message {message_id}")
            return False
        message.text += fragment
        return True

    def complete(self, message_id: str) -> bool:
        """Freeze the placeholder after its stream is exhausted."""
        message = self._streaming_message(message_id)
        if message is None:
            return False
        message.is_streaming = False
        self._streaming_id = None
        return True

    def fail(self, message_id: str, error_text: str) -> bool:
        """Replace the placeholder text with an error and freeze it."""
        message = self._streaming_message(message_id)
        if message is None:
            return False
        message.text = error_text
        message.is_streaming = False
        message.is_error = True
        self._streaming_id = None
        return True

    def clear(self) -> None:
        self._messages.clear()
        self._streaming_id = None
