"""Error taxonomy shared by every layer.

ReadError and ExtractionError abort an analysis and send the session back
to the upload screen. ChatError is scoped to a single assistant reply.
"""


class QuantScholarError(Exception):
    """Base class for all application errors."""

    pass


class ReadError(QuantScholarError):
    """Raised when the uploaded document cannot be read."""

    pass


class ExtractionError(QuantScholarError):
    """Raised when the structured analysis call fails or returns unusable content."""

    pass


class ChatError(QuantScholarError):
    """Raised when a chat session cannot be built or a streamed reply fails."""

    pass
