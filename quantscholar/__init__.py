"""QuantScholar - structured paper analysis and an AI tutor for academic PDFs.

Combines Google Gemini for structured extraction and streamed chat,
FastAPI for the HTTP surface, NiceGUI for the dashboard,
and Pydantic for data validation.

Components:
    - encoding: Uploaded file to transport-ready document payload
    - gateway: Gemini calls for extraction and multi-turn tutoring
    - models: Analysis result shape and API schemas
    - session: View controller state machine and conversation store
    - api: HTTP endpoints and streaming responses
    - ui: Web interface for upload, analysis and discussion
"""

from quantscholar.errors import ChatError, ExtractionError, QuantScholarError, ReadError

__version__ = "0.1.0"

__all__ = ["ChatError", "ExtractionError", "QuantScholarError", "ReadError"]
