"""
Tests for the GovernsAI error taxonomy.
"""

import pytest

from governsai.exceptions import (
    AuthenticationError,
    BudgetError,
    ConfigurationError,
    ConfirmationError,
    ErrorCategory,
    GovernsAIError,
    PollTimeoutError,
    PrecheckError,
    ToolError,
    TransportError,
    TransportErrorKind,
    categorize_error,
    error_from_response,
    extract_error_details,
    format_error_message,
    is_retryable_error,
    is_retryable_status,
    retag_error,
)
from governsai.transport import HTTPResponse


def response(status, data=None, status_text=""):
    return HTTPResponse(status=status, status_text=status_text, data=data)


class TestRetryableStatus:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_transient_statuses_are_retryable(self, status):
        assert is_retryable_status(status) is True

    @pytest.mark.parametrize("status", [None, 0, 200, 400, 401, 403, 404, 409, 422, 501])
    def test_other_statuses_are_not(self, status):
        assert is_retryable_status(status) is False


class TestErrorFromResponse:
    def test_same_status_classifies_identically(self):
        first = error_from_response(response(503, {"error": "overloaded"}))
        second = error_from_response(response(503, {"error": "something else entirely"}))
        assert first.retryable is True
        assert second.retryable is True

    def test_not_found_is_never_retryable(self):
        for message in ("try again later", "timeout", "network"):
            error = error_from_response(response(404, {"error": message}))
            assert error.retryable is False
            assert error.status_code == 404

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_statuses_raise_authentication_error(self, status):
        error = error_from_response(response(status, {"error": "denied"}), PrecheckError)
        assert isinstance(error, AuthenticationError)
        assert error.retryable is False

    def test_error_class_applied(self):
        error = error_from_response(response(502, {}), BudgetError)
        assert isinstance(error, BudgetError)
        assert error.retryable is True

    def test_client_errors_not_retryable(self):
        assert error_from_response(response(400, {})).retryable is False
        assert error_from_response(response(422, {})).retryable is False

    def test_message_prefers_error_field(self):
        error = error_from_response(response(500, {"error": "boom", "message": "other"}))
        assert error.message == "boom"

    def test_message_falls_back_to_message_field(self):
        error = error_from_response(response(500, {"message": "bad gateway"}))
        assert error.message == "bad gateway"

    def test_message_falls_back_to_status_line(self):
        error = error_from_response(response(500, None, "Internal Server Error"))
        assert error.message == "HTTP 500 Internal Server Error"

    def test_response_attached(self):
        raw = response(429, {"error": "slow down"})
        error = error_from_response(raw)
        assert error.response is raw


class TestErrorConstruction:
    def test_retryable_derived_from_status(self):
        assert GovernsAIError("x", 503).retryable is True
        assert GovernsAIError("x", 400).retryable is False
        assert GovernsAIError("x").retryable is False

    def test_explicit_retryable_wins(self):
        assert GovernsAIError("x", 503, retryable=False).retryable is False

    def test_from_status(self):
        error = ToolError.from_status("tool down", 504)
        assert isinstance(error, ToolError)
        assert error.retryable is True

    def test_authentication_error_never_retryable(self):
        assert AuthenticationError("x", 503, retryable=True).retryable is False

    def test_poll_timeout_carries_details(self):
        error = PollTimeoutError("late", correlation_id="c", last_status="pending", timeout_ms=5)
        assert isinstance(error, ConfirmationError)
        assert error.retryable is False
        assert error.last_status == "pending"

    def test_configuration_error(self):
        error = ConfigurationError("bad", field="max_retries", value=11)
        assert error.retryable is False
        assert error.field == "max_retries"


class TestTransportError:
    @pytest.mark.parametrize(
        "kind,retryable",
        [
            (TransportErrorKind.TIMEOUT, True),
            (TransportErrorKind.CONNECTION, True),
            (TransportErrorKind.DNS, True),
            (TransportErrorKind.PROTOCOL, False),
            (TransportErrorKind.UNKNOWN, False),
        ],
    )
    def test_retryable_by_kind(self, kind, retryable):
        assert TransportError("failed", kind).retryable is retryable

    def test_kind_accepts_string(self):
        assert TransportError("failed", "dns").kind is TransportErrorKind.DNS


class TestRetagError:
    def test_generic_error_retagged(self):
        original = GovernsAIError("overloaded", 503)
        tagged = retag_error(original, PrecheckError)
        assert isinstance(tagged, PrecheckError)
        assert tagged.status_code == 503
        assert tagged.retryable is True
        assert tagged.__cause__ is original

    def test_transport_error_retagged(self):
        tagged = retag_error(TransportError("reset", TransportErrorKind.CONNECTION), ToolError)
        assert isinstance(tagged, ToolError)
        assert tagged.retryable is True

    def test_authentication_error_kept(self):
        original = AuthenticationError("nope", 401)
        assert retag_error(original, PrecheckError) is original

    def test_already_tagged_kept(self):
        original = BudgetError("x", 500)
        assert retag_error(original, BudgetError) is original


class TestIsRetryableError:
    def test_sdk_error_uses_flag(self):
        assert is_retryable_error(GovernsAIError("timeout", 400)) is False
        assert is_retryable_error(GovernsAIError("x", 502)) is True

    def test_foreign_error_uses_keywords(self):
        assert is_retryable_error(RuntimeError("network unreachable")) is True
        assert is_retryable_error(OSError("ECONNRESET")) is True
        assert is_retryable_error(ValueError("bad value")) is False


class TestCategorizeError:
    @pytest.mark.parametrize(
        "error,category",
        [
            (AuthenticationError("x", 401), ErrorCategory.AUTHENTICATION),
            (AuthenticationError("x"), ErrorCategory.AUTHENTICATION),
            (AuthenticationError("x", 403), ErrorCategory.AUTHORIZATION),
            (GovernsAIError("x", 400), ErrorCategory.VALIDATION),
            (GovernsAIError("x", 422), ErrorCategory.VALIDATION),
            (GovernsAIError("x", 429), ErrorCategory.RATE_LIMIT),
            (GovernsAIError("x", 503), ErrorCategory.SERVER_ERROR),
            (GovernsAIError("x", 404), ErrorCategory.CLIENT_ERROR),
            (TransportError("x", TransportErrorKind.TIMEOUT), ErrorCategory.NETWORK),
            (RuntimeError("network down"), ErrorCategory.NETWORK),
            (RuntimeError("weird"), ErrorCategory.UNKNOWN),
        ],
    )
    def test_categories(self, error, category):
        assert categorize_error(error) is category


class TestErrorDetails:
    def test_extract_sdk_error(self):
        error = error_from_response(response(503, {"error": "busy"}))
        details = extract_error_details(error)
        assert details == {
            "message": "busy",
            "retryable": True,
            "category": "server_error",
            "status_code": 503,
            "context": {"error": "busy"},
        }

    def test_extract_foreign_error(self):
        details = extract_error_details(ValueError("bad"))
        assert details["message"] == "bad"
        assert details["retryable"] is False

    def test_format_error_message(self):
        message = format_error_message("record usage", GovernsAIError("boom"), {"model": "gpt"})
        assert message == 'record usage failed ({"model": "gpt"}): boom'

    def test_format_error_message_without_context(self):
        assert format_error_message("op", ValueError("x")) == "op failed: x"
