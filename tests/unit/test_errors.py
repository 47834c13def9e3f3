"""Unit tests for upstream error classification."""

import pytest
import pytest_check as check

from chat_relay.relay.errors import (
    AuthenticationError,
    ConfigurationError,
    ErrorKind,
    ProviderError,
    QuotaExceededError,
    UnclassifiedUpstreamError,
    classify,
    error_for,
    from_upstream,
)


class TestClassify:
    """Tests for the ordered substring rules."""

    def test_api_key_message_is_authentication(self) -> None:
        assert classify("Incorrect API key provided: sk-abc***") == ErrorKind.AUTHENTICATION

    def test_quota_message_is_quota(self) -> None:
        assert classify("You exceeded your current quota") == ErrorKind.QUOTA

    def test_api_key_wins_over_quota(self) -> None:
        """A message mentioning both is an authentication failure."""
        assert classify("quota check failed: API key revoked") == ErrorKind.AUTHENTICATION

    def test_other_message_is_unclassified(self) -> None:
        assert classify("Connection reset by peer") == ErrorKind.UNCLASSIFIED

    def test_empty_message_is_unclassified(self) -> None:
        assert classify("") == ErrorKind.UNCLASSIFIED

    @pytest.mark.parametrize("message", ["api key invalid", "QUOTA reached"])
    def test_matching_is_case_sensitive(self, message: str) -> None:
        assert classify(message) == ErrorKind.UNCLASSIFIED


class TestErrorMapping:
    """Tests for error types, status codes and messages."""

    @pytest.mark.parametrize(
        ("kind", "error_type", "status_code"),
        [
            (ErrorKind.CONFIGURATION, ConfigurationError, 400),
            (ErrorKind.AUTHENTICATION, AuthenticationError, 401),
            (ErrorKind.QUOTA, QuotaExceededError, 429),
            (ErrorKind.UNCLASSIFIED, UnclassifiedUpstreamError, 500),
        ],
    )
    def test_error_for_kind(self, kind: ErrorKind, error_type: type, status_code: int) -> None:
        error = error_for(kind, "detail")

        check.is_instance(error, error_type)
        check.equal(error.status_code, status_code)
        check.equal(error.kind, kind)
        check.equal(error.detail, "detail")

    def test_configuration_message_names_the_key(self) -> None:
        assert "OPENAI_API_KEY" in ConfigurationError().message

    def test_user_messages_do_not_leak_detail(self) -> None:
        error = from_upstream(ProviderError("Incorrect API key provided: sk-secret"))

        check.is_instance(error, AuthenticationError)
        check.is_not_in("sk-secret", error.message)
        check.is_in("sk-secret", error.detail)

    def test_from_upstream_quota(self) -> None:
        error = from_upstream(ProviderError("You exceeded your current quota"))

        assert isinstance(error, QuotaExceededError)

    def test_from_upstream_uses_type_name_for_blank_messages(self) -> None:
        error = from_upstream(TimeoutError())

        check.is_instance(error, UnclassifiedUpstreamError)
        check.equal(error.detail, "TimeoutError")
