"""Relay configuration with environment variable loading.

Pydantic-based configuration for the streaming chat relay. The provider
credential is read once when the config is built and then passed around as a
read-only value; a missing credential is reported per request by the relay
rather than failing at startup.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file
load_dotenv()

API_KEY_ENV_VAR = "OPENAI_API_KEY"
DEFAULT_BASE_URL = "https://api.openai.com/v1"

# Allow streaming responses up to 30 seconds
REQUEST_TIMEOUT_SECONDS = 30.0


class GenerationConfig(BaseModel):
    """Fixed generation parameters attached to every completion request.

    Attributes:
        model: Model identifier sent to the provider.
        temperature: Sampling temperature (0.0 = deterministic, 1.0 = creative).
        max_output_tokens: Cap on generated tokens per response.
    """

    model_config = ConfigDict(frozen=True)

    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    max_output_tokens: int = Field(default=2000, ge=1)


class RelayConfig(BaseModel):
    """Process-wide configuration for the chat relay.

    Attributes:
        openai_api_key: Provider credential, None when not configured.
        base_url: Provider API base URL.
        request_timeout: Wall-clock ceiling for one relayed request, in seconds.
        generation: Fixed generation parameters.
    """

    model_config = ConfigDict(frozen=True)

    openai_api_key: str | None = Field(
        default_factory=lambda: os.getenv(API_KEY_ENV_VAR) or None,
        description="API key for the completion provider",
    )
    base_url: str = Field(
        default_factory=lambda: os.getenv("OPENAI_BASE_URL") or DEFAULT_BASE_URL,
        description="Completion provider API base URL",
    )
    request_timeout: float = Field(default=REQUEST_TIMEOUT_SECONDS, gt=0.0)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    @field_validator("openai_api_key")
    @classmethod
    def normalize_api_key(cls, v: str | None) -> str | None:
        """Strip whitespace and treat a blank key as missing."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def has_api_key(self) -> bool:
        return self.openai_api_key is not None


def get_relay_config() -> RelayConfig:
    """Create relay configuration from environment.

    Returns:
        Configured RelayConfig instance.
    """
    return RelayConfig()
