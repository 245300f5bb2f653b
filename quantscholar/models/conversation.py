"""Messages exchanged with the AI tutor."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    """Speaker of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


class ConversationMessage(BaseModel):
    """A single message in the discussion panel.

    Assistant replies start as an empty placeholder with ``is_streaming`` set
    and grow in place as fragments arrive.

    Attributes:
        id: Unique message identifier.
        role: Who wrote the message.
        text: Message text, growing while streaming.
        timestamp: Creation time.
        is_streaming: Whether fragments are still arriving.
        is_error: Whether the reply ended with a chat failure.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: MessageRole
    text: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)
    is_streaming: bool = False
    is_error: bool = False
