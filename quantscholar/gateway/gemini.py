"""Gemini gateway: structured extraction and streamed tutoring.

Two kinds of call go out to the Gemini API, both carrying the uploaded PDF
inline:

1. **Extraction** - a single non-streamed ``generate_content`` call with the
   professor prompt, a response schema and a JSON response type. The text
   is validated strictly against ``AnalysisResult``; malformed or
   incomplete output fails the call with no repair and no retry.

2. **Chat** - an async chat session created locally with the tutor system
   instruction and two bootstrap turns (the document plus an
   acknowledgment). Nothing is sent until the first question; each question
   is streamed back fragment by fragment.
"""

import logging
from collections.abc import AsyncIterator

from google import genai
from google.genai import types
from pydantic import ValidationError

from quantscholar.encoding.document import DocumentPayload
from quantscholar.errors import ChatError, ExtractionError
from quantscholar.gateway.base import ChatSession
from quantscholar.gateway.config import GatewayConfig, get_gateway_config
from quantscholar.gateway.prompts import (
    ANALYSIS_PROMPT,
    BOOTSTRAP_MODEL_TURN,
    BOOTSTRAP_USER_TURN,
    TUTOR_SYSTEM_INSTRUCTION,
)
from quantscholar.models.analysis import AnalysisResult

logger = logging.getLogger(__name__)

_STRING = types.Type.STRING


def _string(description: str | None = None) -> types.Schema:
    return types.Schema(type=_STRING, description=description)


def _string_list(description: str | None = None) -> types.Schema:
    return types.Schema(type=types.Type.ARRAY, items=types.Schema(type=_STRING), description=description)


# Mirrors AnalysisResult; keys and required fields must stay in sync with it
ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "title": _string("Title of the paper"),
        "authors": _string_list("List of authors"),
        "journal_fit": _string(
            "Which top journal (e.g., Marketing Science, JMR, AER) does this fit and why?"
        ),
        "research_question": _string("The core research question or puzzle addressed."),
        "methodology": types.Schema(
            type=types.Type.OBJECT,
            properties={
                "type": _string("e.g., Game Theory, Empirical structural, Reduced form"),
                "key_assumptions": _string_list(
                    "Crucial modeling assumptions (e.g. linear demand, uniform distribution)"
                ),
                "model_setup": _string("Brief description of the players and the game."),
            },
        ),
        "key_findings": _string_list("Main propositions or empirical results."),
        "theoretical_contribution": _string(
            "Explain the theoretical novelty. How does it change our understanding of the "
            "market mechanism? Use specific terminology."
        ),
        "managerial_implications": _string("Practical takeaways for firms or policy."),
        "critique": types.Schema(
            type=types.Type.OBJECT,
            properties={
                "strengths": _string_list(),
                "weaknesses": _string_list(),
                "reviewer_perspective": _string("Anticipate a critique from a tough reviewer."),
            },
        ),
    },
    required=["title", "research_question", "methodology", "theoretical_contribution", "critique"],
)


def document_part(payload: DocumentPayload) -> types.Part:
    """Inline the document bytes as a request part."""
    return types.Part.from_bytes(data=payload.content, mime_type=payload.media_type)


def bootstrap_history(payload: DocumentPayload) -> list[types.Content]:
    """Seed turns that put the document into the chat context.

    Args:
        payload: The encoded document.

    Returns:
        A user turn carrying the document and a model acknowledgment.
    """
    return [
        types.Content(
            role="user",
            parts=[document_part(payload), types.Part.from_text(text=BOOTSTRAP_USER_TURN)],
        ),
        types.Content(
            role="model",
            parts=[types.Part.from_text(text=BOOTSTRAP_MODEL_TURN)],
        ),
    ]


class GeminiGateway:
    """AIGateway backed by the ``google-genai`` async client."""

    def __init__(self, config: GatewayConfig | None = None) -> None:
        """Initialize the gateway.

        Args:
            config: Optional gateway configuration.
                    Loads from environment if not provided.
        """
        self._config = config or get_gateway_config()
        self._client = genai.Client(api_key=self._config.api_key)

    async def extract_analysis(self, payload: DocumentPayload) -> AnalysisResult:
        """Request the structured analysis of a paper.

        Args:
            payload: The encoded document.

        Returns:
            The validated analysis.

        Raises:
            ExtractionError: If the call fails, returns nothing, or returns
                content that does not validate against AnalysisResult.
        """
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=ANALYSIS_SCHEMA,
            temperature=self._config.extraction_temperature,
        )
        contents = [
            types.Content(
                role="user",
                parts=[document_part(payload), types.Part.from_text(text=ANALYSIS_PROMPT)],
            )
        ]

        try:
            response = await self._client.aio.models.generate_content(
                model=self._config.model_name,
                contents=contents,
                config=config,
            )
        except Exception as e:
            logger.error(f"Analysis request failed for {payload.file_name!r}: {e}")
            raise ExtractionError(f"Analysis request failed: {e}") from e

        text = response.text
        if not text:
            logger.error(f"Empty analysis response for {payload.file_name!r}")
            raise ExtractionError("No response from model")

        try:
            result = AnalysisResult.model_validate_json(text, strict=True)
        except ValidationError as e:
            logger.error(f"Analysis response rejected ({e.error_count()} validation errors)")
            raise ExtractionError(f"Model response does not match the analysis schema: {e}") from e

        logger.info(f"Extracted analysis: {result.title!r}")
        return result

    def open_chat(self, payload: DocumentPayload) -> ChatSession:
        """Create a tutor chat seeded with the document.

        Args:
            payload: The encoded document.

        Returns:
            Handle wrapping the provider chat.

        Raises:
            ChatError: If the chat cannot be constructed.
        """
        try:
            chat = self._client.aio.chats.create(
                model=self._config.model_name,
                config=types.GenerateContentConfig(
                    system_instruction=TUTOR_SYSTEM_INSTRUCTION,
                    temperature=self._config.chat_temperature,
                ),
                history=bootstrap_history(payload),
            )
        except Exception as e:
            logger.error(f"Failed to open chat for {payload.file_name!r}: {e}")
            raise ChatError(f"Failed to open chat session: {e}") from e

        session = ChatSession(chat=chat, file_name=payload.file_name)
        logger.debug(f"Opened {session!r}")
        return session

    async def send_message(self, session: ChatSession, text: str) -> AsyncIterator[str]:
        """Stream the tutor's reply to a question.

        Args:
            session: Handle returned by ``open_chat``.
            text: The question.

        Yields:
            Non-empty reply fragments as they arrive.

        Raises:
            ChatError: If the request or the stream fails.
        """
        try:
            stream = await session.chat.send_message_stream(text)
            async for chunk in stream:
                fragment = chunk.text
                if fragment:
                    yield fragment
        except Exception as e:
            logger.error(f"Chat stream failed in {session!r}: {e}")
            raise ChatError(f"Chat request failed: {e}") from e


# Module-level singleton instance
_gateway: GeminiGateway | None = None


def get_gateway() -> GeminiGateway:
    """Get or create the global Gemini gateway.

    Returns:
        The GeminiGateway instance.
    """
    global _gateway
    if _gateway is None:
        _gateway = GeminiGateway()
    return _gateway
