"""Test package for Chat Relay.

Unit tests for isolated logic and integration tests for the HTTP surface.

Structure:
    - unit/: Error classification, config, relay and provider adapter tests
    - integration/: End-to-end tests through the FastAPI app

The completion provider is replaced by a scripted fake (tests/fakes.py) or
by an httpx MockTransport standing in for the OpenAI API, so no network
access or API key is needed. Leverages pytest with pytest-check for soft
assertions.
"""
