"""Unit tests for individual components in isolation.

Coverage:
    - relay/errors: Ordered error classification and status mapping
    - relay/config: Configuration loading and validation
    - relay/chat_relay: Fail-fast, passthrough, truncation, timeout, cancellation
    - relay/provider: OpenAI request payload, chunk parsing, error text
    - main: RUN_MODE dispatch

Uses scripted fakes, and the OpenAI SDK over an httpx MockTransport, instead
of network calls.
"""
