"""Streaming chat relay core.

Forwards a conversation to the completion provider and streams tokens back.

Responsibilities:
    - Fail-fast credential check before any network call
    - System instruction injection and fixed generation parameters
    - Upstream failure classification into user-facing error categories
    - Passthrough streaming with upstream cleanup on every exit path

Maintains clean separation from the HTTP layer.
"""

from chat_relay.relay.chat_relay import SYSTEM_INSTRUCTION, ChatRelay, RelayedStream
from chat_relay.relay.config import GenerationConfig, RelayConfig, get_relay_config
from chat_relay.relay.errors import (
    AuthenticationError,
    ConfigurationError,
    ErrorKind,
    ProviderError,
    QuotaExceededError,
    RelayError,
    UnclassifiedUpstreamError,
    classify,
)
from chat_relay.relay.provider import CompletionProvider, CompletionRequest, OpenAIChatProvider

__all__ = [
    "SYSTEM_INSTRUCTION",
    "AuthenticationError",
    "ChatRelay",
    "CompletionProvider",
    "CompletionRequest",
    "ConfigurationError",
    "ErrorKind",
    "GenerationConfig",
    "OpenAIChatProvider",
    "ProviderError",
    "QuotaExceededError",
    "RelayConfig",
    "RelayError",
    "RelayedStream",
    "UnclassifiedUpstreamError",
    "classify",
    "get_relay_config",
]
