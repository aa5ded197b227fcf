"""
GovernsAI SDK - Input validation helpers.

Provides validation functions for client-side parameter checking before API calls.
"""

import re
from typing import Any, Optional

from .exceptions import GovernsAIError


class InputValidationError(GovernsAIError):
    """Raised when input validation fails before making an API request."""

    def __init__(self, message: str, field: str = None, value: Any = None):
        super().__init__(message, status_code=None, response=None, retryable=False)
        self.field = field
        self.value = value


ValidationError = InputValidationError

_URL_PATTERN = re.compile(
    r'^https?://'
    r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,63}\.?|'
    r'localhost|'
    r'[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?|'
    r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})'
    r'(?::\d+)?'
    r'(?:/?|[/?]\S+)$',
    re.IGNORECASE
)


def validate_required(value: Any, field_name: str, error_cls: type = ValidationError) -> None:
    """Validate that a required field is not None or empty."""
    if value is None:
        raise error_cls(f"{field_name} is required", field=field_name)
    if isinstance(value, str) and not value.strip():
        raise error_cls(f"{field_name} cannot be empty", field=field_name, value=value)


def validate_url(value: str, field_name: str, error_cls: type = ValidationError) -> None:
    """Validate URL format (http or https with a host)."""
    if value is None:
        return

    if not isinstance(value, str) or not _URL_PATTERN.match(value):
        raise error_cls(
            f"{field_name} must be a valid URL",
            field=field_name,
            value=value
        )


def validate_int_range(
    value: int,
    field_name: str,
    min_value: Optional[int] = None,
    max_value: Optional[int] = None,
    error_cls: type = ValidationError,
) -> None:
    """Validate that an integer lies within ``[min_value, max_value]``."""
    if value is None:
        return

    if not isinstance(value, int) or isinstance(value, bool):
        raise error_cls(
            f"{field_name} must be an integer",
            field=field_name,
            value=value
        )

    if (min_value is not None and value < min_value) or (
        max_value is not None and value > max_value
    ):
        raise error_cls(
            f"{field_name} must be between {min_value} and {max_value}",
            field=field_name,
            value=value
        )


def validate_non_negative(value: float, field_name: str, error_cls: type = ValidationError) -> None:
    """Validate that a number is non-negative."""
    if value is None:
        return

    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise error_cls(
            f"{field_name} must be a number",
            field=field_name,
            value=value
        )

    if value < 0:
        raise error_cls(
            f"{field_name} cannot be negative",
            field=field_name,
            value=value
        )


def validate_in_list(value: Any, field_name: str, allowed_values: list) -> None:
    """Validate that a value is in a list of allowed values."""
    if value is None:
        return

    if value not in allowed_values:
        raise ValidationError(
            f"{field_name} must be one of: {', '.join(str(v) for v in allowed_values)}",
            field=field_name,
            value=value
        )
