"""Gateway configuration with environment variable loading.

Pydantic-based configuration for the Gemini gateway. The extraction
temperature is a policy knob: low values favor faithful, repeatable
extraction over creative variation.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


def _optional_float(name: str) -> float | None:
    value = os.getenv(name)
    return float(value) if value else None


class GatewayConfig(BaseModel):
    """Configuration for the Gemini gateway.

    Attributes:
        api_key: API key for the Gemini API.
        model_name: Model identifier used for extraction and chat.
        extraction_temperature: Sampling temperature for structured extraction.
        chat_temperature: Sampling temperature for the tutor (None = provider default).
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY", os.getenv("GOOGLE_API_KEY", "")),
        description="API key for the Gemini API",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        description="Model to use",
    )
    extraction_temperature: float = Field(
        default_factory=lambda: float(os.getenv("EXTRACTION_TEMPERATURE", "0.2")),
        ge=0.0,
        le=2.0,
        description="Sampling temperature for structured extraction",
    )
    chat_temperature: float | None = Field(
        default_factory=lambda: _optional_float("CHAT_TEMPERATURE"),
        ge=0.0,
        le=2.0,
        description="Sampling temperature for tutor replies",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API key required. Set GEMINI_API_KEY or GOOGLE_API_KEY in .env")
        return v.strip()


def get_gateway_config() -> GatewayConfig:
    """Create gateway configuration from environment.

    Returns:
        Configured GatewayConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return GatewayConfig()
