"""
GovernsAI SDK - Python client for the GovernsAI governance platform.

Prechecks, human confirmations, budgets, tools, analytics, context memory
and documents, with bounded retries on every call.
"""

from .analytics import AnalyticsClient, UsageStats
from .budget import BudgetClient
from .client import GovernsAIClient
from .config import ConfigHolder, GovernsAIConfig
from .confirmation import (
    ConfirmationClient,
    Failed,
    PollOutcome,
    PollSession,
    Resolved,
    TimedOut,
    is_final_status,
)
from .context import ContextClient
from .documents import DocumentClient
from .exceptions import (
    AnalyticsError,
    AuthenticationError,
    BudgetError,
    ConfigurationError,
    ConfirmationError,
    ConfirmationRejectedError,
    ContextError,
    DocumentError,
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
)
from .models import (
    TERMINAL_STATUSES,
    BatchItemResult,
    BudgetContext,
    BudgetLimit,
    BudgetStatus,
    ConfirmationRecord,
    ConfirmationRequest,
    ConfirmationStatus,
    ContentType,
    ContextSaveInput,
    ContextSearchResult,
    ConversationItem,
    ConversationSummary,
    Decision,
    DocumentDetails,
    DocumentSearchHit,
    PrecheckRequest,
    PrecheckResponse,
    PurchaseRecord,
    RequestType,
    ServiceStatus,
    SuggestedAction,
    Tool,
    ToolMetadata,
    ToolResult,
    UsageRecord,
)
from .precheck import PrecheckClient, merge_precheck_defaults, transform_policy_config
from .retry import (
    Err,
    Ok,
    RetryPolicy,
    attempt_with_retry,
    execute_with_retry,
    get_retry_delay,
)
from .tools import ToolClient, validate_tool_arguments
from .transport import AsyncHTTPTransport, HTTPResponse
from .utils import build_query_params, deep_merge, generate_correlation_id, get_time_range
from .validation import InputValidationError

__version__ = "0.1.0"
__all__ = [
    # Client
    "GovernsAIClient",
    "GovernsAIConfig",
    "ConfigHolder",
    "AsyncHTTPTransport",
    "HTTPResponse",
    # Feature clients
    "PrecheckClient",
    "ConfirmationClient",
    "BudgetClient",
    "ToolClient",
    "AnalyticsClient",
    "ContextClient",
    "DocumentClient",
    # Confirmation polling
    "PollSession",
    "PollOutcome",
    "Resolved",
    "TimedOut",
    "Failed",
    "is_final_status",
    # Retry
    "RetryPolicy",
    "execute_with_retry",
    "attempt_with_retry",
    "get_retry_delay",
    "Ok",
    "Err",
    # Models
    "Decision",
    "ConfirmationStatus",
    "TERMINAL_STATUSES",
    "RequestType",
    "ContentType",
    "PrecheckRequest",
    "PrecheckResponse",
    "SuggestedAction",
    "BudgetContext",
    "BudgetStatus",
    "BudgetLimit",
    "UsageRecord",
    "PurchaseRecord",
    "UsageStats",
    "ConfirmationRequest",
    "ConfirmationRecord",
    "Tool",
    "ToolMetadata",
    "ToolResult",
    "BatchItemResult",
    "ServiceStatus",
    "ContextSaveInput",
    "ContextSearchResult",
    "ConversationSummary",
    "ConversationItem",
    "DocumentDetails",
    "DocumentSearchHit",
    # Exceptions
    "GovernsAIError",
    "PrecheckError",
    "ConfirmationError",
    "ConfirmationRejectedError",
    "PollTimeoutError",
    "BudgetError",
    "AuthenticationError",
    "ToolError",
    "AnalyticsError",
    "ContextError",
    "DocumentError",
    "ConfigurationError",
    "TransportError",
    "TransportErrorKind",
    "InputValidationError",
    "ErrorCategory",
    "categorize_error",
    "error_from_response",
    "extract_error_details",
    "format_error_message",
    "is_retryable_error",
    "is_retryable_status",
    # Helpers
    "merge_precheck_defaults",
    "transform_policy_config",
    "validate_tool_arguments",
    "generate_correlation_id",
    "build_query_params",
    "get_time_range",
    "deep_merge",
]
