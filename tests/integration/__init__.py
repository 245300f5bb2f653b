"""Integration tests for the HTTP API.

Runs the real FastAPI app through httpx ASGITransport with the session
registry wired to a scripted gateway, covering upload, snapshot, streamed
chat and reset.
"""
