"""Main application entry point.

Runs FastAPI (port 8000) with NiceGUI mounted for the chat interface.
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

    from chat_relay.api.app import app
    from chat_relay.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    # Mount NiceGUI onto FastAPI
    ui.run_with(
        app,
        title="AI Chat Assistant",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "chat-relay-secret"),
    )

    logger.info("Starting integrated server on http://localhost:8000")
    logger.info("API docs available at http://localhost:8000/docs")
    logger.info("Chat UI available at http://localhost:8000/")

    _serve(app)


def run_api() -> None:
    """Run only the relay API, for use behind a separate front end."""
    from chat_relay.api.app import app

    logger.info("Starting relay API on http://localhost:8000")
    _serve(app)


def run_separate() -> None:
    """Run the relay API and the NiceGUI page as separate servers.

    API on port 8000, chat page on port 8080 (pointed at the API through
    API_BASE_URL).
    """
    import asyncio
    import subprocess

    async def run_servers() -> None:
        logger.info("Starting relay API on http://localhost:8000")
        logger.info("Starting chat page on http://localhost:8080")

        api_proc = subprocess.Popen(
            [
                sys.executable,
                "-m",
                "uvicorn",
                "chat_relay.api.app:app",
                "--host",
                os.getenv("HOST", "0.0.0.0"),
                "--port",
                "8000",
            ]
        )
        ui_proc = subprocess.Popen(
            [sys.executable, "-c", "from chat_relay.ui.chat_page import main; main()"]
        )

        try:
            while api_proc.poll() is None and ui_proc.poll() is None:
                await asyncio.sleep(1)
        finally:
            api_proc.terminate()
            ui_proc.terminate()
            api_proc.wait()
            ui_proc.wait()

    try:
        asyncio.run(run_servers())
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")


def main() -> None:
    """Application entry point.

    Set RUN_MODE=api to serve the relay without the NiceGUI page, or
    RUN_MODE=separate to serve the page on its own port (8080).
    Default is integrated mode (API and UI on port 8000).
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting Chat Relay in {mode} mode")

    if mode == "api":
        run_api()
    elif mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()
