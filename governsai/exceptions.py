"""
GovernsAI SDK - Error taxonomy.

Every failure surfaced by the SDK is a ``GovernsAIError`` (or a subclass)
carrying a human-readable message, an optional HTTP status, the raw
response and a ``retryable`` flag that is fixed at construction time.
"""

import json
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .transport import HTTPResponse

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})

NETWORK_KEYWORDS = ("fetch", "network", "timeout", "ECONNRESET", "ENOTFOUND")


def is_retryable_status(status: Optional[int]) -> bool:
    """Return True for rate limiting and transient server statuses."""
    if not status:
        return False
    return status in RETRYABLE_STATUSES


class GovernsAIError(Exception):
    """Base exception for all GovernsAI SDK errors."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional["HTTPResponse"] = None,
        retryable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response = response
        self.retryable = (
            retryable if retryable is not None else is_retryable_status(status_code)
        )

    @classmethod
    def from_status(
        cls,
        message: str,
        status_code: Optional[int] = None,
        response: Optional["HTTPResponse"] = None,
    ) -> "GovernsAIError":
        """Build an error whose retryability is derived from ``status_code``."""
        return cls(message, status_code, response, is_retryable_status(status_code))

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, status_code={self.status_code!r}, "
            f"retryable={self.retryable!r})"
        )


class PrecheckError(GovernsAIError):
    """Raised when a governance precheck call fails."""

    pass


class ConfirmationError(GovernsAIError):
    """Raised when a confirmation workflow call fails."""

    pass


class PollTimeoutError(ConfirmationError):
    """Raised when polling a confirmation exceeds its deadline."""

    def __init__(
        self,
        message: str,
        correlation_id: Optional[str] = None,
        last_status: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> None:
        super().__init__(message, retryable=False)
        self.correlation_id = correlation_id
        self.last_status = last_status
        self.timeout_ms = timeout_ms


class ConfirmationRejectedError(ConfirmationError):
    """Raised when a confirmation reaches a terminal state other than approved."""

    def __init__(self, message: str, status: str, record: Any = None) -> None:
        super().__init__(message, retryable=False)
        self.status = status
        self.record = record


class BudgetError(GovernsAIError):
    """Raised when a budget or usage call fails."""

    pass


class AuthenticationError(GovernsAIError):
    """Raised when authentication fails or the API key lacks permission."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response: Optional["HTTPResponse"] = None,
        retryable: Optional[bool] = None,
    ) -> None:
        super().__init__(message, status_code, response, retryable=False)


class ToolError(GovernsAIError):
    """Raised when a tool registration or execution call fails."""

    pass


class AnalyticsError(GovernsAIError):
    """Raised when an analytics call fails."""

    pass


class ContextError(GovernsAIError):
    """Raised when a context memory call fails."""

    pass


class DocumentError(GovernsAIError):
    """Raised when a document call fails."""

    pass


class ConfigurationError(GovernsAIError):
    """Raised when the client configuration is invalid."""

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None) -> None:
        super().__init__(message, retryable=False)
        self.field = field
        self.value = value


class TransportErrorKind(str, Enum):
    """Transport-level failure kinds, for requests that never got a status."""

    TIMEOUT = "timeout"
    CONNECTION = "connection"
    DNS = "dns"
    PROTOCOL = "protocol"
    UNKNOWN = "unknown"


_RETRYABLE_TRANSPORT_KINDS = frozenset(
    {TransportErrorKind.TIMEOUT, TransportErrorKind.CONNECTION, TransportErrorKind.DNS}
)


class TransportError(GovernsAIError):
    """Raised when a request fails before an HTTP response is received."""

    def __init__(
        self,
        message: str,
        kind: TransportErrorKind = TransportErrorKind.UNKNOWN,
    ) -> None:
        kind = TransportErrorKind(kind)
        super().__init__(message, retryable=kind in _RETRYABLE_TRANSPORT_KINDS)
        self.kind = kind


# ==================== Factories ====================


def _response_message(response: "HTTPResponse") -> str:
    data = response.data
    if isinstance(data, dict):
        message = data.get("error") or data.get("message")
        if isinstance(message, str) and message:
            return message
        if message:
            return json.dumps(message)
    return f"HTTP {response.status} {response.status_text}".rstrip()


def error_from_response(
    response: "HTTPResponse",
    error_cls: type = GovernsAIError,
) -> GovernsAIError:
    """
    Classify a non-2xx response.

    401 and 403 always produce an ``AuthenticationError``. Everything else is
    an ``error_cls`` whose retryability follows the status code alone.
    """
    message = _response_message(response)
    status = response.status

    if status in (401, 403):
        return AuthenticationError(message, status, response)
    if status == 404:
        return error_cls(message, status, response, False)
    return error_cls(message, status, response, is_retryable_status(status))


def retag_error(error: GovernsAIError, error_cls: type) -> GovernsAIError:
    """
    Re-express a generic transport error as ``error_cls``.

    Status, response and retryability are carried over unchanged. Errors that
    already belong to a specific kind (authentication, another feature) are
    returned as-is.
    """
    if isinstance(error, error_cls):
        return error
    if type(error) not in (GovernsAIError, TransportError):
        return error
    tagged = error_cls(error.message, error.status_code, error.response, error.retryable)
    tagged.__cause__ = error
    return tagged


# ==================== Retryability and categories ====================


def is_retryable_error(error: BaseException) -> bool:
    """
    Decide whether ``error`` is worth retrying.

    SDK errors answer with their own flag. Foreign exceptions fall back to a
    keyword match on the message.
    """
    if isinstance(error, GovernsAIError):
        return error.retryable is True
    message = str(error)
    return any(keyword in message for keyword in NETWORK_KEYWORDS)


class ErrorCategory(str, Enum):
    """Coarse error categories used for reporting."""

    NETWORK = "network"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    SERVER_ERROR = "server_error"
    CLIENT_ERROR = "client_error"
    UNKNOWN = "unknown"


def categorize_error(error: BaseException) -> ErrorCategory:
    """Map an error to a single ``ErrorCategory``."""
    if isinstance(error, GovernsAIError):
        status = error.status_code
        if status == 403:
            return ErrorCategory.AUTHORIZATION
        if isinstance(error, AuthenticationError) or status == 401:
            return ErrorCategory.AUTHENTICATION
        if status in (400, 422):
            return ErrorCategory.VALIDATION
        if status == 429:
            return ErrorCategory.RATE_LIMIT
        if status and status >= 500:
            return ErrorCategory.SERVER_ERROR
        if status and status >= 400:
            return ErrorCategory.CLIENT_ERROR
        if isinstance(error, TransportError):
            return ErrorCategory.NETWORK

    message = str(error)
    if "fetch" in message or "network" in message:
        return ErrorCategory.NETWORK
    return ErrorCategory.UNKNOWN


def extract_error_details(error: BaseException) -> dict[str, Any]:
    """Flatten an error into a loggable dict."""
    if isinstance(error, GovernsAIError):
        details: dict[str, Any] = {
            "message": error.message,
            "retryable": bool(error.retryable),
            "category": categorize_error(error).value,
        }
        if error.status_code is not None:
            details["status_code"] = error.status_code
        if error.response is not None and error.response.data is not None:
            details["context"] = error.response.data
        return details

    return {
        "message": str(error) or "Unknown error",
        "retryable": is_retryable_error(error),
        "category": categorize_error(error).value,
    }


def format_error_message(
    operation: str,
    error: BaseException,
    context: Optional[dict[str, Any]] = None,
) -> str:
    """Build ``"<operation> failed (<context>): <message>"``."""
    context_str = f" ({json.dumps(context, default=str)})" if context else ""
    return f"{operation} failed{context_str}: {str(error) or 'Unknown error'}"
