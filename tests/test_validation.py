"""
Tests for GovernsAI SDK validation module.
"""

import pytest

from governsai.exceptions import ConfigurationError, GovernsAIError
from governsai.validation import (
    InputValidationError,
    validate_in_list,
    validate_int_range,
    validate_non_negative,
    validate_required,
    validate_url,
)


class TestExceptionInheritance:
    """Tests that InputValidationError inherits from GovernsAIError."""

    def test_inherits_from_sdk_error(self):
        assert issubclass(InputValidationError, GovernsAIError)

    def test_never_retryable(self):
        assert InputValidationError("bad", field="x").retryable is False


class TestValidateRequired:
    """Tests for validate_required function."""

    def test_none_value_raises(self):
        with pytest.raises(InputValidationError) as exc:
            validate_required(None, "field")
        assert "field is required" in str(exc.value)
        assert exc.value.field == "field"

    def test_empty_string_raises(self):
        with pytest.raises(InputValidationError) as exc:
            validate_required("", "field")
        assert "cannot be empty" in str(exc.value)

    def test_whitespace_only_raises(self):
        with pytest.raises(InputValidationError):
            validate_required("   ", "field")

    def test_valid_values_pass(self):
        validate_required("value", "field")
        validate_required(0, "field")

    def test_custom_error_class(self):
        with pytest.raises(ConfigurationError):
            validate_required("", "api_key", error_cls=ConfigurationError)


class TestValidateUrl:
    """Tests for validate_url function."""

    @pytest.mark.parametrize(
        "url",
        [
            "https://api.governs.ai",
            "http://localhost:3000",
            "http://127.0.0.1:8080/api/v1",
            "https://precheck.governs.test/",
        ],
    )
    def test_valid_urls(self, url):
        validate_url(url, "base_url")

    @pytest.mark.parametrize("url", ["ftp://governs.ai", "governs.ai", "https://", "http:// x"])
    def test_invalid_urls(self, url):
        with pytest.raises(InputValidationError) as exc:
            validate_url(url, "base_url")
        assert "must be a valid URL" in str(exc.value)

    def test_none_is_skipped(self):
        validate_url(None, "precheck_base_url")


class TestValidateIntRange:
    """Tests for validate_int_range function."""

    def test_bounds_inclusive(self):
        validate_int_range(0, "max_retries", 0, 10)
        validate_int_range(10, "max_retries", 0, 10)

    def test_out_of_range(self):
        with pytest.raises(InputValidationError) as exc:
            validate_int_range(11, "max_retries", 0, 10)
        assert "between 0 and 10" in str(exc.value)
        assert exc.value.value == 11

    @pytest.mark.parametrize("value", ["3", 2.5, True])
    def test_non_integer(self, value):
        with pytest.raises(InputValidationError) as exc:
            validate_int_range(value, "timeout_ms", 1000, 300000)
        assert "must be an integer" in str(exc.value)


class TestValidateNonNegative:
    """Tests for validate_non_negative function."""

    def test_zero_and_positive_pass(self):
        validate_non_negative(0, "cost")
        validate_non_negative(1.5, "cost")

    def test_negative_raises(self):
        with pytest.raises(InputValidationError) as exc:
            validate_non_negative(-0.01, "cost")
        assert "cannot be negative" in str(exc.value)

    def test_non_number_raises(self):
        with pytest.raises(InputValidationError):
            validate_non_negative("1", "cost")


class TestValidateInList:
    """Tests for validate_in_list function."""

    def test_allowed(self):
        validate_in_list("user", "type", ["organization", "user"])

    def test_not_allowed(self):
        with pytest.raises(InputValidationError) as exc:
            validate_in_list("team", "type", ["organization", "user"])
        assert "must be one of: organization, user" in str(exc.value)
