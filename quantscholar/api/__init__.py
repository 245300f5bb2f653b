"""FastAPI endpoints for QuantScholar.

HTTP and streaming routes with async request handling.
Supports Server-Sent Events for real-time tutor replies.

Endpoints:
    - GET /health: Service health status
    - POST /papers: Upload and analyze a paper
    - GET /papers/{id}: Session snapshot
    - POST /papers/{id}/chat/stream: Stream a tutor reply
    - DELETE /papers/{id}: Reset and forget a session
"""

from quantscholar.api.app import app, create_app

__all__ = ["app", "create_app"]
