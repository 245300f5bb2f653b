"""Pydantic models for the analysis contract, conversation and API payloads.

Provides type safety, strict validation of model output, and automatic
OpenAPI documentation.

Models:
    - AnalysisResult: Structured extraction result (with Methodology, Critique)
    - ConversationMessage: A message in the tutor discussion
    - SessionSnapshot: Read-only session view for the UI and API
    - ChatRequest / StreamChunk: Streaming chat payloads
    - PaperResponse: Upload result
"""

from quantscholar.models.analysis import AnalysisResult, Critique, Methodology
from quantscholar.models.conversation import ConversationMessage, MessageRole
from quantscholar.models.schemas import (
    ChatRequest,
    PaperResponse,
    SessionSnapshot,
    StreamChunk,
    StreamStatus,
    ViewState,
)

__all__ = [
    "AnalysisResult",
    "ChatRequest",
    "ConversationMessage",
    "Critique",
    "MessageRole",
    "Methodology",
    "PaperResponse",
    "SessionSnapshot",
    "StreamChunk",
    "StreamStatus",
    "ViewState",
]
