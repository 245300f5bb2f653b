"""AI gateway for the hosted generative model.

Responsibilities:
    - Structured, schema-constrained paper extraction
    - Chat sessions seeded with the uploaded document
    - Streaming reply fragments to the session layer
    - Mapping provider failures to ExtractionError and ChatError

The provider sits behind the AIGateway protocol so it can be replaced
without touching the session or HTTP layers.
"""

from quantscholar.gateway.base import AIGateway, ChatSession
from quantscholar.gateway.config import GatewayConfig, get_gateway_config
from quantscholar.gateway.gemini import GeminiGateway, get_gateway

__all__ = [
    "AIGateway",
    "ChatSession",
    "GatewayConfig",
    "GeminiGateway",
    "get_gateway",
    "get_gateway_config",
]
