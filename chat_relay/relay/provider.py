"""Completion provider contract and the OpenAI implementation.

The relay only depends on ``CompletionProvider``: open a stream for a
``CompletionRequest`` (raising ``ProviderError`` if the call is rejected) and
iterate the returned ``TokenStream`` for text deltas. Closing the token stream
releases the upstream connection.

``OpenAIChatProvider`` streams from the Chat Completions API through the
``openai`` SDK and yields ``choices[0].delta.content`` of each chunk.
"""

import logging
from collections.abc import AsyncIterator
from typing import Protocol

import httpx
from openai import APIConnectionError, APIError, AsyncOpenAI, AsyncStream
from openai.types.chat import ChatCompletionChunk
from pydantic import BaseModel, ConfigDict

from chat_relay.models.schemas import Message
from chat_relay.relay.config import RelayConfig
from chat_relay.relay.errors import ProviderError

logger = logging.getLogger(__name__)

# Roles the Chat Completions API accepts without extra fields (tool_call_id,
# name). "data" messages are UI annotations and never reach the model.
_FORWARDED_ROLES = frozenset({"system", "user", "assistant"})


class CompletionRequest(BaseModel):
    """Request handed to a completion provider.

    Attributes:
        model: Model identifier.
        messages: Messages to send, system instruction first.
        temperature: Sampling temperature.
        max_output_tokens: Cap on generated tokens.
    """

    model_config = ConfigDict(frozen=True)

    model: str
    messages: tuple[Message, ...]
    temperature: float
    max_output_tokens: int


class TokenStream(Protocol):
    """Lazy stream of generated text chunks."""

    def __aiter__(self) -> AsyncIterator[str]: ...

    async def __anext__(self) -> str: ...

    async def aclose(self) -> None: ...


class CompletionProvider(Protocol):
    """Anything that can turn a CompletionRequest into a token stream."""

    async def open_stream(self, request: CompletionRequest) -> TokenStream: ...


def _provider_error(error: APIError) -> ProviderError:
    if isinstance(error, APIConnectionError):
        return ProviderError(f"Connection to OpenAI failed: {error}")
    return ProviderError(str(error))


class OpenAITokenStream:
    """Token stream over an SDK chunk stream, skipping chunks without text."""

    def __init__(self, stream: AsyncStream[ChatCompletionChunk]) -> None:
        self._stream = stream
        self._chunks = aiter(stream)
        self._content_chunks = 0

    def __aiter__(self) -> "OpenAITokenStream":
        return self

    async def __anext__(self) -> str:
        while True:
            try:
                chunk = await anext(self._chunks)
            except StopAsyncIteration:
                logger.debug(f"OpenAI stream finished after {self._content_chunks} content chunks")
                raise
            except APIError as e:
                raise _provider_error(e) from e
            except httpx.HTTPError as e:
                raise ProviderError(f"OpenAI stream interrupted: {e}") from e

            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                self._content_chunks += 1
                return content

    async def aclose(self) -> None:
        try:
            await self._chunks.aclose()
        finally:
            await self._stream.close()


class OpenAIChatProvider:
    """Completion provider backed by the OpenAI Chat Completions API.

    The SDK client is created on first use, so building the provider never
    needs a credential or opens a connection pool.
    """

    def __init__(
        self,
        config: RelayConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            config: Relay configuration holding credential and base URL.
            http_client: Optional preconfigured httpx client (used by tests).
                Left open by ``aclose()``.
        """
        self._config = config
        self._http_client = http_client
        self._client: AsyncOpenAI | None = None

    @property
    def client(self) -> AsyncOpenAI:
        """The SDK client, created on first access."""
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._config.openai_api_key,
                base_url=self._config.base_url,
                timeout=httpx.Timeout(self._config.request_timeout, connect=10.0),
                # The relay owns the deadline; a retried call would overrun it.
                max_retries=0,
                http_client=self._http_client,
            )
        return self._client

    def _build_messages(self, request: CompletionRequest) -> list[dict[str, str]]:
        messages = []
        for message in request.messages:
            if message.role not in _FORWARDED_ROLES:
                logger.debug(f"Not forwarding '{message.role}' message to OpenAI")
                continue
            messages.append({"role": message.role, "content": message.content})
        return messages

    async def open_stream(self, request: CompletionRequest) -> OpenAITokenStream:
        """Start a streaming completion.

        Args:
            request: The completion request.

        Returns:
            A token stream positioned before the first chunk.

        Raises:
            ProviderError: If the request cannot be sent or is rejected.
        """
        logger.info(
            f"Streaming request to model '{request.model}' ({len(request.messages)} messages)"
        )
        try:
            stream = await self.client.chat.completions.create(
                model=request.model,
                messages=self._build_messages(request),
                temperature=request.temperature,
                max_tokens=request.max_output_tokens,
                stream=True,
            )
        except APIError as e:
            raise _provider_error(e) from e

        return OpenAITokenStream(stream)

    async def aclose(self) -> None:
        """Close the SDK client unless its HTTP client was injected."""
        if self._client is not None and self._http_client is None:
            await self._client.close()
        self._client = None
