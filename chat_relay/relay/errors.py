"""Error taxonomy for the chat relay.

These are relay-level errors, not HTTP errors. Each carries the status code
and user-facing message it maps to; the API layer translates them into
``{"error": ...}`` responses.

Upstream failures arrive as free text, so they are sorted into categories by
``classify``, an ordered list of substring rules where the first match wins.
"""

from enum import Enum

from chat_relay.relay.config import API_KEY_ENV_VAR


class ErrorKind(str, Enum):
    """Closed set of relay failure categories."""

    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    QUOTA = "quota"
    UNCLASSIFIED = "unclassified"


class RelayError(Exception):
    """Base class for failures returned to the caller as structured errors.

    Attributes:
        kind: Failure category.
        status_code: HTTP status the failure is surfaced with.
        message: Remediation-oriented message shown to the caller.
        detail: Raw diagnostic detail, logged but never returned.
    """

    kind: ErrorKind = ErrorKind.UNCLASSIFIED
    status_code: int = 500
    message: str = "Failed to process your request. Please try again later."

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class ConfigurationError(RelayError):
    """Raised when the provider credential is not configured."""

    kind = ErrorKind.CONFIGURATION
    status_code = 400
    message = (
        f"OpenAI API key not found. Please add {API_KEY_ENV_VAR} to your .env file "
        "or environment."
    )


class AuthenticationError(RelayError):
    """Raised when the provider rejects the credential."""

    kind = ErrorKind.AUTHENTICATION
    status_code = 401
    message = (
        f"Invalid OpenAI API key. Please verify that {API_KEY_ENV_VAR} is set "
        "to a valid key."
    )


class QuotaExceededError(RelayError):
    """Raised when the provider account has hit its usage limit."""

    kind = ErrorKind.QUOTA
    status_code = 429
    message = "OpenAI API quota exceeded. Please check your OpenAI account usage and limits."


class UnclassifiedUpstreamError(RelayError):
    """Raised for any other provider-side failure."""

    kind = ErrorKind.UNCLASSIFIED
    status_code = 500
    message = (
        "Failed to process your request. Please try again or check your "
        "OpenAI API configuration."
    )


class ProviderError(Exception):
    """Raised by completion providers when the upstream call fails."""

    pass


# Order matters: a message mentioning both an API key and a quota is an
# authentication failure.
_CLASSIFICATION_RULES: tuple[tuple[str, ErrorKind], ...] = (
    ("API key", ErrorKind.AUTHENTICATION),
    ("quota", ErrorKind.QUOTA),
)

_ERRORS_BY_KIND: dict[ErrorKind, type[RelayError]] = {
    ErrorKind.CONFIGURATION: ConfigurationError,
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.QUOTA: QuotaExceededError,
    ErrorKind.UNCLASSIFIED: UnclassifiedUpstreamError,
}


def classify(raw_message: str) -> ErrorKind:
    """Classify an upstream failure by its message text.

    Args:
        raw_message: The error text reported by the provider.

    Returns:
        The first matching category, or UNCLASSIFIED.
    """
    for needle, kind in _CLASSIFICATION_RULES:
        if needle in raw_message:
            return kind
    return ErrorKind.UNCLASSIFIED


def error_for(kind: ErrorKind, detail: str | None = None) -> RelayError:
    """Build the relay error matching a category."""
    return _ERRORS_BY_KIND[kind](detail)


def from_upstream(exc: BaseException) -> RelayError:
    """Convert a provider failure into a classified relay error."""
    raw_message = str(exc) or type(exc).__name__
    return error_for(classify(raw_message), raw_message)
