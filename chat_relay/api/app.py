"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error translation and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chat_relay.api.chat import router as chat_router
from chat_relay.models.schemas import ErrorResponse
from chat_relay.relay.chat_relay import ChatRelay
from chat_relay.relay.config import RelayConfig, get_relay_config
from chat_relay.relay.errors import RelayError
from chat_relay.relay.provider import CompletionProvider, OpenAIChatProvider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    config: RelayConfig = app.state.chat_relay.config
    logger.info(f"Starting Chat Relay API (model: {config.generation.model})...")
    if not config.has_api_key:
        logger.warning("OPENAI_API_KEY is not set; chat requests will be rejected")
    yield
    logger.info("Shutting down Chat Relay API...")
    if isinstance(app.state.provider, OpenAIChatProvider):
        await app.state.provider.aclose()


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Translate relay failures into ``{"error": ...}`` responses."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message).model_dump(),
    )


def create_app(
    config: RelayConfig | None = None,
    provider: CompletionProvider | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config: Relay configuration. Loaded from environment if not provided.
        provider: Completion provider. OpenAI SDK-backed if not provided.

    Returns:
        Configured FastAPI application instance.
    """
    config = config or get_relay_config()
    provider = provider or OpenAIChatProvider(config)

    application = FastAPI(
        title="Chat Relay API",
        description=(
            "Streaming chat relay that forwards conversations to the OpenAI "
            "Chat Completions API and streams generated tokens back."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.state.provider = provider
    application.state.chat_relay = ChatRelay(config, provider)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.add_exception_handler(RelayError, relay_error_handler)
    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "chat-relay"}

    return application


app = create_app()
