"""Main application entry point.

Runs FastAPI (port 8000) with the NiceGUI dashboard mounted on it.
Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def _serve(app) -> None:
    import uvicorn

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_integrated() -> None:
    """Run FastAPI with NiceGUI mounted on the same server.

    FastAPI handles API routes, NiceGUI handles the UI.
    Both accessible on port 8000.
    """
    from nicegui import ui

    from quantscholar.api.app import create_app
    from quantscholar.ui.paper_page import paper_page  # noqa: F401 - Registers the page

    app = create_app()

    # Mount NiceGUI onto FastAPI
    ui.run_with(
        app,
        title="QuantScholar",
        favicon="🎓",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "quantscholar-secret"),
    )

    logger.info("Starting integrated server on http://localhost:8000")
    logger.info("API docs available at http://localhost:8000/docs")
    logger.info("Dashboard available at http://localhost:8000/")

    _serve(app)


def run_api() -> None:
    """Run the HTTP API alone, without the dashboard."""
    from quantscholar.api.app import create_app

    logger.info("Starting API server on http://localhost:8000")
    _serve(create_app())


def main() -> None:
    """Application entry point.

    Set RUN_MODE=api to serve only the HTTP API.
    Default is integrated mode (API and dashboard on port 8000).
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting QuantScholar in {mode} mode")

    if mode == "api":
        run_api()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
