"""Chat relay endpoint.

Streams the provider's tokens back as a plain-text body, or returns a
structured ``{"error": ...}`` response when the relay fails before streaming.
"""

import asyncio
import logging

import anyio
from fastapi import APIRouter, Depends, Request
from starlette.responses import Response, StreamingResponse
from starlette.types import Receive, Scope, Send

from chat_relay.models.schemas import ChatRequest, ErrorResponse, Message
from chat_relay.relay.chat_relay import ChatRelay, RelayedStream

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"

# Non-standard status for a request abandoned by the client; never seen by it.
CLIENT_CLOSED_REQUEST = 499


class RelayStreamingResponse(StreamingResponse):
    """Streaming response that always closes its body iterator.

    Starlette stops iterating when the client goes away but leaves the
    iterator open. Closing it here releases the upstream provider stream on
    disconnect as well as on normal completion.
    """

    media_type = STREAM_MEDIA_TYPE

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            aclose = getattr(self.body_iterator, "aclose", None)
            if aclose is not None:
                with anyio.CancelScope(shield=True):
                    await aclose()


async def _wait_for_disconnect(request: Request) -> None:
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


async def _relay_unless_disconnected(
    request: Request, relay: ChatRelay, messages: list[Message]
) -> RelayedStream | None:
    """Wait for the relay's first chunk, giving up if the caller leaves.

    Returns None when the caller disconnected first. The pending relay call
    is cancelled, which closes any upstream stream it already opened.
    """
    priming = asyncio.create_task(relay.handle_chat_request(messages))
    watcher = asyncio.create_task(_wait_for_disconnect(request))
    try:
        await asyncio.wait({priming, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not priming.done():
            priming.cancel()
            await asyncio.wait({priming})

    if priming.cancelled():
        logger.info("Client disconnected before the first chunk; relay cancelled")
        return None
    return priming.result()


def get_chat_relay(request: Request) -> ChatRelay:
    """Return the app's relay, failing fast if the credential is missing.

    Runs before the request body is validated, so a missing credential is
    reported as a configuration error for any conversation.
    """
    relay: ChatRelay = request.app.state.chat_relay
    relay.ensure_configured()
    return relay


@router.post(
    "/chat",
    response_class=RelayStreamingResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Provider credential not configured"},
        401: {"model": ErrorResponse, "description": "Provider rejected the credential"},
        429: {"model": ErrorResponse, "description": "Provider usage quota exceeded"},
        500: {"model": ErrorResponse, "description": "Any other provider failure"},
    },
)
async def chat(
    chat_request: ChatRequest,
    request: Request,
    relay: ChatRelay = Depends(get_chat_relay),
) -> Response:
    """Relay a conversation to the completion provider.

    Args:
        chat_request: The conversation so far.
        request: Incoming request, watched for a client disconnect.
        relay: Injected chat relay.

    Returns:
        A streamed text body containing the generated tokens, or an empty
        499 response if the caller left before the first token.

    Raises:
        RelayError: Converted to a JSON error response by the app.
    """
    logger.info(f"Relaying conversation with {len(chat_request.messages)} messages")
    body = await _relay_unless_disconnected(request, relay, chat_request.messages)
    if body is None:
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    return RelayStreamingResponse(body)
