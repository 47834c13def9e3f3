"""HTTP client for the chat relay endpoint, used by the chat page."""

import logging
import os
from collections.abc import Callable, Sequence

import httpx

from chat_relay.models.schemas import Message

logger = logging.getLogger(__name__)

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

GENERIC_ERROR = "Failed to process your request. Please try again."


def _error_from_response(response: httpx.Response) -> str:
    """Return the relay's ``error`` field verbatim, or a fallback."""
    try:
        error = response.json().get("error")
    except (ValueError, AttributeError):
        error = None
    return error or f"HTTP {response.status_code}: {GENERIC_ERROR}"


async def stream_chat_response(
    messages: Sequence[Message],
    on_chunk: Callable[[str], None],
    on_complete: Callable[[], None],
    on_error: Callable[[str], None],
    client: httpx.AsyncClient | None = None,
) -> None:
    """POST the conversation and feed streamed text to the callbacks.

    Args:
        messages: The whole conversation, including the new user turn.
        on_chunk: Called with each piece of text as it arrives.
        on_complete: Called once the stream ends normally.
        on_error: Called with the relay's error message on failure.
        client: Optional client to use instead of a fresh one.
    """
    payload = {"messages": [m.model_dump(exclude_none=True) for m in messages]}

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(base_url=API_BASE_URL, timeout=60.0)

    try:
        async with client.stream("POST", "/api/chat", json=payload) as response:
            if response.status_code != 200:
                await response.aread()
                on_error(_error_from_response(response))
                return
            async for text in response.aiter_text():
                if text:
                    on_chunk(text)
        on_complete()
    except httpx.RequestError as e:
        logger.warning(f"Chat request failed: {e}")
        on_error(f"Connection failed: {e}")
    finally:
        if owns_client:
            await client.aclose()
