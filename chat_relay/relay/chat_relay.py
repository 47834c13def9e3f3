"""Streaming chat relay.

Forwards a conversation to the completion provider and hands back the token
stream as bytes. The relay commits to one of two outcomes before anything is
written downstream:

1. **Structured error** - the credential is missing, the provider rejected
   the call, or the stream failed before producing its first chunk. The
   failure is logged once and raised as a classified ``RelayError``.

2. **Passthrough stream** - the first chunk has arrived. It and every later
   chunk are forwarded unchanged, in order, as they arrive.

If the provider fails after the first chunk has been forwarded, the stream is
truncated: the failure is logged, the upstream stream is closed and the body
simply ends. Nothing is appended to the caller's byte stream.

The whole request shares one deadline (``RelayConfig.request_timeout``).
Every exit path (normal end, failure, or the consumer closing the returned
stream on disconnect) closes the upstream stream.
"""

import asyncio
import logging
from collections.abc import Sequence

import anyio

from chat_relay.models.schemas import Message
from chat_relay.relay.config import API_KEY_ENV_VAR, RelayConfig
from chat_relay.relay.errors import ConfigurationError, ProviderError, from_upstream
from chat_relay.relay.provider import CompletionProvider, CompletionRequest, TokenStream

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a helpful, knowledgeable, and friendly AI assistant. You provide clear, "
    "accurate, and well-formatted responses. When writing code, always include "
    "explanations and follow best practices. Use markdown formatting for better "
    "readability."
)


def _remaining(deadline: float) -> float:
    return max(deadline - asyncio.get_running_loop().time(), 0.0)


async def _pull(stream: TokenStream) -> str | None:
    try:
        return await anext(stream)
    except StopAsyncIteration:
        return None


async def _next_chunk(stream: TokenStream, deadline: float, timeout: float) -> str | None:
    """Read one chunk, or None at end of stream, before the deadline."""
    try:
        return await asyncio.wait_for(_pull(stream), timeout=_remaining(deadline))
    except TimeoutError as e:
        raise ProviderError(f"Provider did not finish within {timeout:g} seconds") from e


async def _close_stream(stream: TokenStream) -> None:
    """Close an upstream stream, even from inside a cancelled scope."""
    with anyio.CancelScope(shield=True):
        try:
            await stream.aclose()
        except Exception as e:
            logger.warning(f"Failed to close upstream stream cleanly: {e}")


class RelayedStream:
    """Passthrough byte stream over an opened provider stream.

    Yields each provider chunk as UTF-8 as soon as it arrives. ``aclose()``
    releases the upstream stream whether or not iteration ever started.
    """

    def __init__(
        self,
        stream: TokenStream,
        first_chunk: str | None,
        deadline: float,
        timeout: float,
    ) -> None:
        self._stream = stream
        self._pending = first_chunk
        self._exhausted = first_chunk is None
        self._deadline = deadline
        self._timeout = timeout
        self._closed = False
        self.forwarded = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> "RelayedStream":
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration

        if self._pending is not None:
            chunk, self._pending = self._pending, None
            return self._emit(chunk)

        if self._exhausted:
            await self.aclose()
            raise StopAsyncIteration

        try:
            chunk = await _next_chunk(self._stream, self._deadline, self._timeout)
        except Exception as e:
            logger.error(
                f"Chat relay stream failed after {self.forwarded} chunks, truncating: {e}"
            )
            await self.aclose()
            raise StopAsyncIteration from e
        except BaseException:
            await self.aclose()
            raise

        if chunk is None:
            logger.debug(f"Relayed {self.forwarded} chunks")
            self._exhausted = True
            await self.aclose()
            raise StopAsyncIteration
        return self._emit(chunk)

    def _emit(self, chunk: str) -> bytes:
        self.forwarded += 1
        return chunk.encode("utf-8")

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await _close_stream(self._stream)


class ChatRelay:
    """Relays one conversation per call to a completion provider.

    Holds no per-request state; a single instance serves every request.
    """

    def __init__(self, config: RelayConfig, provider: CompletionProvider) -> None:
        """Initialize the relay.

        Args:
            config: Read-only relay configuration.
            provider: Completion provider to forward requests to.
        """
        self._config = config
        self._provider = provider

    @property
    def config(self) -> RelayConfig:
        return self._config

    def ensure_configured(self) -> None:
        """Fail fast when the provider credential is missing.

        Raises:
            ConfigurationError: If no API key is configured.
        """
        if not self._config.has_api_key:
            error = ConfigurationError(f"{API_KEY_ENV_VAR} is not set")
            logger.error(f"Chat relay error ({error.kind.value}): {error.detail}")
            raise error

    def build_request(self, conversation: Sequence[Message]) -> CompletionRequest:
        """Prepend the system instruction and attach generation parameters."""
        generation = self._config.generation
        return CompletionRequest(
            model=generation.model,
            messages=(Message(role="system", content=SYSTEM_INSTRUCTION), *conversation),
            temperature=generation.temperature,
            max_output_tokens=generation.max_output_tokens,
        )

    async def handle_chat_request(self, conversation: Sequence[Message]) -> RelayedStream:
        """Open a relayed stream for a conversation.

        Waits for the provider's first chunk so that start-up failures are
        reported as structured errors instead of a broken stream.

        Args:
            conversation: Caller's messages, oldest first. Not modified.

        Returns:
            RelayedStream of UTF-8 encoded chunks.

        Raises:
            RelayError: Configuration or classified provider failure.
        """
        self.ensure_configured()

        timeout = self._config.request_timeout
        deadline = asyncio.get_running_loop().time() + timeout
        request = self.build_request(conversation)

        stream: TokenStream | None = None
        try:
            try:
                stream = await asyncio.wait_for(
                    self._provider.open_stream(request),
                    timeout=_remaining(deadline),
                )
            except TimeoutError as e:
                raise ProviderError(
                    f"Provider did not respond within {timeout:g} seconds"
                ) from e
            first_chunk = await _next_chunk(stream, deadline, timeout)
        except Exception as e:
            if stream is not None:
                await _close_stream(stream)
            error = from_upstream(e)
            logger.error(f"Chat relay error ({error.kind.value}): {error.detail}")
            raise error from e
        except BaseException:
            if stream is not None:
                await _close_stream(stream)
            raise

        return RelayedStream(stream, first_chunk, deadline, timeout)
