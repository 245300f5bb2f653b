"""FastAPI application: CORS, the paper routes and a health check."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from quantscholar import __version__
from quantscholar.api.papers import router as papers_router
from quantscholar.api.sessions import get_session_registry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Drop every in-memory session on shutdown."""
    logger.info("Starting QuantScholar API...")
    yield
    registry = get_session_registry()
    logger.info(f"Shutting down QuantScholar API, discarding {len(registry)} sessions")
    registry.clear()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="QuantScholar API",
        description=(
            "Upload an academic PDF, receive a structured analysis of its thesis, "
            "methodology, findings and critique, then discuss the paper with an AI "
            "tutor through streamed replies."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.include_router(papers_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "quantscholar"}

    return application


app = create_app()
