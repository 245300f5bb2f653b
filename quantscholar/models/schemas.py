from enum import Enum

from pydantic import BaseModel, Field, field_validator

from quantscholar.models.analysis import AnalysisResult
from quantscholar.models.conversation import ConversationMessage


class ViewState(str, Enum):
    """Top-level screen of an analysis session."""

    UPLOAD = "UPLOAD"
    ANALYZING = "ANALYZING"
    READY = "READY"


class StreamStatus(str, Enum):
    """Status values for streaming updates."""

    RECEIVED = "received"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"


class SessionSnapshot(BaseModel):
    """Read-only view of a session handed to the rendering layer.

    Attributes:
        state: Current screen.
        file_name: Name of the uploaded document, if any.
        analysis: Structured analysis once extraction succeeded.
        messages: Copies of the conversation messages, oldest first.
        is_streaming: Whether an assistant reply is in flight.
        chat_ready: Whether a chat session is open.
        notice: Last failure notice for the user, if not yet dismissed.
    """

    state: ViewState
    file_name: str | None = None
    analysis: AnalysisResult | None = None
    messages: list[ConversationMessage] = Field(default_factory=list)
    is_streaming: bool = False
    chat_ready: bool = False
    notice: str | None = None


class ChatRequest(BaseModel):
    """Request payload for the chat streaming endpoint.

    Attributes:
        message: The student's question about the paper.
    """

    message: str = Field(..., min_length=1)

    @field_validator("message", mode="before")
    @classmethod
    def strip_message(cls, v: str) -> str:
        """Strip whitespace from message before validation."""
        if isinstance(v, str):
            return v.strip()
        return v


class StreamChunk(BaseModel):
    """A chunk of streamed response data.

    Attributes:
        content: The text content of this chunk.
        done: Whether this is the final chunk.
        status: Current processing status (received, generating, complete, error).
        error: Error message if something went wrong.
    """

    content: str
    done: bool
    status: StreamStatus | None = None
    error: str | None = None


class PaperResponse(BaseModel):
    """Response after a paper was uploaded and analyzed.

    Attributes:
        session_id: Identifier for follow-up chat and reset calls.
        file_name: Name of the uploaded file.
        analysis: The structured analysis.
    """

    session_id: str
    file_name: str | None = None
    analysis: AnalysisResult
