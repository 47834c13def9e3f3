"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - relay_config: Config with a test credential
    - missing_key_config: Config without a credential
    - conversation: A one-turn user conversation
    - fake_provider: Scripted provider streaming "The answer is 4"
    - async_client: HTTPX client bound to an app using fake_provider
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from chat_relay.api.app import create_app
from chat_relay.models.schemas import Message
from chat_relay.relay.config import RelayConfig
from tests.fakes import FakeProvider


@pytest.fixture
def relay_config() -> RelayConfig:
    """Return relay configuration with a test API key."""
    return RelayConfig(openai_api_key="sk-test-key-12345", base_url="https://api.test/v1")


@pytest.fixture
def missing_key_config() -> RelayConfig:
    """Return relay configuration with no API key."""
    return RelayConfig(openai_api_key=None, base_url="https://api.test/v1")


@pytest.fixture
def conversation() -> list[Message]:
    """Return a single user turn."""
    return [Message(role="user", content="What is 2 + 2?", id="msg-1")]


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Return a provider streaming a short answer."""
    return FakeProvider(chunks=["The", " answer", " is 4"])


@pytest.fixture
async def async_client(
    relay_config: RelayConfig, fake_provider: FakeProvider
) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    app = create_app(config=relay_config, provider=fake_provider)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
