"""In-memory completion provider for relay tests.

Records every request it receives and hands out token streams whose
chunks, pacing and failures are scripted by the test.
"""

import asyncio
from collections.abc import Sequence

from chat_relay.relay.provider import CompletionRequest


class FakeTokenStream:
    """Scripted token stream that records how far it was consumed."""

    def __init__(
        self,
        chunks: Sequence[str],
        delay: float = 0.0,
        fail_after: int | None = None,
        error: Exception | None = None,
    ) -> None:
        self.chunks = list(chunks)
        self.delay = delay
        self.fail_after = fail_after
        self.error = error or RuntimeError("stream broke")
        self.yielded = 0
        self.close_count = 0

    @property
    def closed(self) -> bool:
        return self.close_count > 0

    def __aiter__(self) -> "FakeTokenStream":
        return self

    async def __anext__(self) -> str:
        if self.closed:
            raise StopAsyncIteration
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_after is not None and self.yielded == self.fail_after:
            raise self.error
        if self.yielded >= len(self.chunks):
            raise StopAsyncIteration
        chunk = self.chunks[self.yielded]
        self.yielded += 1
        return chunk

    async def aclose(self) -> None:
        self.close_count += 1


class FakeProvider:
    """Completion provider returning a fresh FakeTokenStream per call."""

    def __init__(
        self,
        chunks: Sequence[str] = (),
        open_error: Exception | None = None,
        open_delay: float = 0.0,
        **stream_options,
    ) -> None:
        self.chunks = list(chunks)
        self.open_error = open_error
        self.open_delay = open_delay
        self.stream_options = stream_options
        self.requests: list[CompletionRequest] = []
        self.streams: list[FakeTokenStream] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    async def open_stream(self, request: CompletionRequest) -> FakeTokenStream:
        self.requests.append(request)
        if self.open_delay:
            await asyncio.sleep(self.open_delay)
        if self.open_error is not None:
            raise self.open_error
        stream = FakeTokenStream(self.chunks, **self.stream_options)
        self.streams.append(stream)
        return stream
