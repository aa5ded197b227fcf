"""
GovernsAI SDK - Data models for the governance platform API.

The platform mixes snake_case and camelCase keys; ``from_dict`` accepts
both, ``to_dict`` emits what the corresponding endpoint expects.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class Decision(str, Enum):
    """Outcome of a governance precheck."""

    ALLOW = "allow"
    DENY = "deny"
    BLOCK = "block"
    CONFIRM = "confirm"
    REDACT = "redact"


class ConfirmationStatus(str, Enum):
    """
    Lifecycle state of a confirmation.

    ``ERROR`` never comes from the server; it marks a record the client could
    not create or fetch.
    """

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    EXPIRED = "expired"
    CANCELLED = "cancelled"
    ERROR = "error"


TERMINAL_STATUSES = frozenset(
    {
        ConfirmationStatus.APPROVED,
        ConfirmationStatus.DENIED,
        ConfirmationStatus.EXPIRED,
        ConfirmationStatus.CANCELLED,
    }
)


class RequestType(str, Enum):
    """Kind of action a confirmation gates."""

    TOOL_CALL = "tool_call"
    CHAT = "chat"
    MCP = "mcp"


class ContentType(str, Enum):
    """Kinds of content stored in context memory."""

    USER_MESSAGE = "user_message"
    AGENT_MESSAGE = "agent_message"
    DOCUMENT = "document"
    DECISION = "decision"
    TOOL_RESULT = "tool_result"


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ==================== Precheck ====================


@dataclass
class SuggestedAction:
    """Follow-up action suggested by a precheck, e.g. ``context.save``."""

    type: str
    content: Optional[str] = None
    reason: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "type": self.type,
                "content": self.content,
                "reason": self.reason,
                "metadata": self.metadata or None,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SuggestedAction":
        return cls(
            type=data.get("type", ""),
            content=data.get("content"),
            reason=data.get("reason"),
            metadata=data.get("metadata") or {},
        )


@dataclass
class PrecheckRequest:
    """
    Request submitted to the precheck endpoint.

    ``policy_config``, ``tool_config`` and ``budget_context`` are optional;
    when absent the precheck client tries to fill them from the platform.
    """

    tool: str
    scope: str
    raw_text: Optional[str] = None
    payload: Any = None
    tags: list[str] = field(default_factory=list)
    corr_id: Optional[str] = None
    policy_config: Optional[dict[str, Any]] = None
    tool_config: Optional[dict[str, Any]] = None
    budget_context: Optional[dict[str, Any]] = None
    user_id: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "tool": self.tool,
                "scope": self.scope,
                "raw_text": self.raw_text,
                "payload": self.payload,
                "tags": self.tags or None,
                "corr_id": self.corr_id,
                "policy_config": self.policy_config,
                "tool_config": self.tool_config,
                "budget_context": self.budget_context,
                "userId": self.user_id,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrecheckRequest":
        return cls(
            tool=data["tool"],
            scope=data.get("scope", "net.external"),
            raw_text=data.get("raw_text"),
            payload=data.get("payload"),
            tags=list(data.get("tags") or []),
            corr_id=data.get("corr_id", data.get("correlationId")),
            policy_config=data.get("policy_config"),
            tool_config=data.get("tool_config"),
            budget_context=data.get("budget_context"),
            user_id=data.get("userId", data.get("user_id")),
        )


@dataclass
class PrecheckResponse:
    """Governance decision for a precheck request."""

    decision: Decision
    content: dict[str, Any] = field(default_factory=dict)
    reasons: list[str] = field(default_factory=list)
    pii_findings: list[Any] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    policy_id: Optional[str] = None
    ts: Optional[float] = None
    budget_status: Optional[dict[str, Any]] = None
    budget_info: Optional[dict[str, Any]] = None
    intent: Optional[dict[str, Any]] = None
    suggested_actions: list[SuggestedAction] = field(default_factory=list)

    @property
    def messages(self) -> list[dict[str, Any]]:
        return list(self.content.get("messages") or [])

    @property
    def is_error(self) -> bool:
        """True when this response stands in for a failed precheck."""
        return bool(self.metadata.get("error"))

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "decision": self.decision.value,
                "content": self.content or None,
                "reasons": self.reasons,
                "pii_findings": self.pii_findings or None,
                "metadata": self.metadata or None,
                "policy_id": self.policy_id,
                "ts": self.ts,
                "budget_status": self.budget_status,
                "budget_info": self.budget_info,
                "intent": self.intent,
                "suggestedActions": [a.to_dict() for a in self.suggested_actions] or None,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrecheckResponse":
        return cls(
            decision=Decision(data["decision"]),
            content=data.get("content") or {},
            reasons=list(data.get("reasons") or []),
            pii_findings=list(data.get("pii_findings") or []),
            metadata=data.get("metadata") or {},
            policy_id=data.get("policy_id"),
            ts=data.get("ts"),
            budget_status=data.get("budget_status"),
            budget_info=data.get("budget_info"),
            intent=data.get("intent"),
            suggested_actions=[
                SuggestedAction.from_dict(a)
                for a in data.get("suggestedActions", data.get("suggested_actions")) or []
            ],
        )


# ==================== Budget ====================


@dataclass
class BudgetContext:
    """Spend limits and remaining allowance for a user or organization."""

    monthly_limit: float
    current_spend: float
    remaining_budget: float
    llm_spend: float = 0.0
    purchase_spend: float = 0.0
    budget_type: str = "organization"

    @property
    def percent_used(self) -> float:
        if not self.monthly_limit:
            return 0.0
        return (self.current_spend / self.monthly_limit) * 100

    @property
    def is_over_budget(self) -> bool:
        return self.current_spend > self.monthly_limit

    def to_dict(self) -> dict[str, Any]:
        return {
            "monthly_limit": self.monthly_limit,
            "current_spend": self.current_spend,
            "llm_spend": self.llm_spend,
            "purchase_spend": self.purchase_spend,
            "remaining_budget": self.remaining_budget,
            "budget_type": self.budget_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BudgetContext":
        return cls(
            monthly_limit=data.get("monthly_limit", data.get("monthlyLimit", 0)),
            current_spend=data.get("current_spend", data.get("currentSpend", 0)),
            remaining_budget=data.get("remaining_budget", data.get("remainingBudget", 0)),
            llm_spend=data.get("llm_spend", data.get("llmSpend", 0)),
            purchase_spend=data.get("purchase_spend", data.get("purchaseSpend", 0)),
            budget_type=data.get("budget_type", data.get("budgetType", "organization")),
        )


@dataclass
class BudgetStatus:
    """Result of checking an estimated cost against the budget."""

    allowed: bool
    current_spend: float
    limit: float
    remaining: float
    percent_used: float
    reason: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "allowed": self.allowed,
                "currentSpend": self.current_spend,
                "limit": self.limit,
                "remaining": self.remaining,
                "percentUsed": self.percent_used,
                "reason": self.reason,
            }
        )


@dataclass
class UsageRecord:
    """Usage of a model or tool, reported after the call completes."""

    user_id: str
    org_id: str
    provider: str
    model: str
    input_tokens: int
    output_tokens: int
    cost: float
    cost_type: str = "external"
    tool: Optional[str] = None
    correlation_id: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    api_key_id: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        """Body for ``POST /api/v1/usage``."""
        return _drop_none(
            {
                "toolId": self.tool,
                "model": self.model,
                "tokensIn": self.input_tokens,
                "tokensOut": self.output_tokens,
                "cost": self.cost,
                "metadata": self.metadata or None,
            }
        )

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "userId": self.user_id,
                "orgId": self.org_id,
                "provider": self.provider,
                "model": self.model,
                "inputTokens": self.input_tokens,
                "outputTokens": self.output_tokens,
                "cost": self.cost,
                "costType": self.cost_type,
                "tool": self.tool,
                "correlationId": self.correlation_id,
                "metadata": self.metadata or None,
                "apiKeyId": self.api_key_id,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UsageRecord":
        return cls(
            user_id=data.get("userId", data.get("user_id", "")),
            org_id=data.get("orgId", data.get("org_id", "")),
            provider=data.get("provider", ""),
            model=data.get("model", ""),
            input_tokens=data.get("inputTokens", data.get("tokensIn", 0)),
            output_tokens=data.get("outputTokens", data.get("tokensOut", 0)),
            cost=data.get("cost", 0.0),
            cost_type=data.get("costType", data.get("cost_type", "external")),
            tool=data.get("tool", data.get("toolId")),
            correlation_id=data.get("correlationId"),
            metadata=data.get("metadata") or {},
            api_key_id=data.get("apiKeyId"),
        )


@dataclass
class PurchaseRecord:
    """A purchase made on behalf of a user."""

    user_id: str
    org_id: str
    amount: float
    currency: str
    description: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "userId": self.user_id,
                "orgId": self.org_id,
                "amount": self.amount,
                "currency": self.currency,
                "description": self.description,
                "metadata": self.metadata or None,
            }
        )


@dataclass
class BudgetLimit:
    """A monthly spend limit for a user or the whole organization."""

    id: str
    org_id: str
    monthly_limit: float
    type: str = "organization"
    user_id: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BudgetLimit":
        return cls(
            id=data["id"],
            org_id=data.get("orgId", data.get("org_id", "")),
            monthly_limit=data.get("monthlyLimit", data.get("monthly_limit", 0)),
            type=data.get("type", "organization"),
            user_id=data.get("userId", data.get("user_id")),
            is_active=data.get("isActive", data.get("is_active", True)),
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
        )


# ==================== Confirmation ====================


@dataclass
class ConfirmationRequest:
    """A request for human approval of a sensitive action."""

    correlation_id: str
    request_type: RequestType
    request_desc: str
    request_payload: Any = None
    decision: Optional[str] = None
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "correlationId": self.correlation_id,
                "requestType": RequestType(self.request_type).value,
                "requestDesc": self.request_desc,
                "requestPayload": self.request_payload,
                "decision": self.decision,
                "reasons": self.reasons,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConfirmationRequest":
        return cls(
            correlation_id=data.get("correlationId", data.get("correlation_id", "")),
            request_type=data.get("requestType", data.get("request_type", "")),
            request_desc=data.get("requestDesc", data.get("request_desc", "")),
            request_payload=data.get("requestPayload", data.get("request_payload")),
            decision=data.get("decision"),
            reasons=list(data.get("reasons") or []),
        )


@dataclass
class ConfirmationRecord:
    """
    Server-side confirmation as observed by the client.

    Transitions pending -> approved | denied | expired | cancelled exactly
    once; the client only reads it.
    """

    id: str
    correlation_id: str
    status: ConfirmationStatus
    request_type: str = ""
    request_desc: str = ""
    request_payload: Any = None
    reasons: list[str] = field(default_factory=list)
    decision: Optional[str] = None
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    user_id: Optional[str] = None
    org_id: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_approved(self) -> bool:
        return self.status == ConfirmationStatus.APPROVED

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "correlationId": self.correlation_id,
                "status": self.status.value,
                "requestType": self.request_type,
                "requestDesc": self.request_desc,
                "requestPayload": self.request_payload,
                "reasons": self.reasons,
                "decision": self.decision,
                "createdAt": _isoformat(self.created_at),
                "expiresAt": _isoformat(self.expires_at),
                "approvedAt": _isoformat(self.approved_at),
                "userId": self.user_id,
                "orgId": self.org_id,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConfirmationRecord":
        """Accepts the bare record or the ``{"confirmation": {...}}`` envelope."""
        if isinstance(data.get("confirmation"), dict):
            data = data["confirmation"]
        return cls(
            id=data.get("id", ""),
            correlation_id=data.get("correlationId", data.get("correlation_id", "")),
            status=ConfirmationStatus(data.get("status", "pending")),
            request_type=data.get("requestType", data.get("request_type", "")),
            request_desc=data.get("requestDesc", data.get("request_desc", "")),
            request_payload=data.get("requestPayload", data.get("request_payload")),
            reasons=list(data.get("reasons") or []),
            decision=data.get("decision"),
            created_at=parse_datetime(data.get("createdAt", data.get("created_at"))),
            expires_at=parse_datetime(data.get("expiresAt", data.get("expires_at"))),
            approved_at=parse_datetime(data.get("approvedAt", data.get("approved_at"))),
            user_id=data.get("userId"),
            org_id=data.get("orgId"),
        )


# ==================== Tools ====================


@dataclass
class Tool:
    """A function-style tool definition."""

    name: str
    description: str = ""
    parameters: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    @property
    def required(self) -> list[str]:
        return list(self.parameters.get("required") or [])

    @property
    def properties(self) -> dict[str, Any]:
        return self.parameters.get("properties") or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Tool":
        fn = data.get("function", data)
        return cls(
            name=fn["name"],
            description=fn.get("description", ""),
            parameters=fn.get("parameters") or {"type": "object", "properties": {}},
        )


@dataclass
class ToolMetadata:
    """Governance metadata registered for a tool."""

    tool_name: str
    scope: str
    direction: str = "both"
    category: str = "general"
    risk_level: str = "low"
    requires_approval: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool_name": self.tool_name,
            "scope": self.scope,
            "direction": self.direction,
            "metadata": {
                "category": self.category,
                "risk_level": self.risk_level,
                "requires_approval": self.requires_approval,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolMetadata":
        meta = data.get("metadata") or {}
        return cls(
            tool_name=data.get("tool_name", data.get("toolName", "")),
            scope=data.get("scope", ""),
            direction=data.get("direction", "both"),
            category=meta.get("category", "general"),
            risk_level=meta.get("risk_level", meta.get("riskLevel", "low")),
            requires_approval=bool(
                meta.get("requires_approval", meta.get("requiresApproval", False))
            ),
        )


@dataclass
class ToolResult:
    """Outcome of a governed tool execution."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    decision: Optional[Decision] = None
    reasons: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "success": self.success,
                "data": self.data,
                "error": self.error,
                "decision": self.decision.value if self.decision else None,
                "reasons": self.reasons or None,
            }
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolResult":
        return cls(
            success=bool(data.get("success", False)),
            data=data.get("data"),
            error=data.get("error"),
            decision=Decision(data["decision"]) if data.get("decision") else None,
            reasons=list(data.get("reasons") or []),
        )


@dataclass
class BatchItemResult:
    """Per-item outcome of a best-effort batch operation."""

    index: int
    success: bool
    error: Optional[str] = None


@dataclass
class ServiceStatus:
    """Reachability of a platform service."""

    available: bool
    response_time_ms: Optional[float] = None
    last_error: Optional[str] = None


# ==================== Context memory ====================


@dataclass
class ContextSaveInput:
    """Content to store in context memory."""

    content: str
    content_type: ContentType
    agent_id: str
    agent_name: Optional[str] = None
    conversation_id: Optional[str] = None
    parent_id: Optional[str] = None
    correlation_id: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    scope: Optional[str] = None
    visibility: Optional[str] = None
    expires_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return _drop_none(
            {
                "content": self.content,
                "contentType": ContentType(self.content_type).value,
                "agentId": self.agent_id,
                "agentName": self.agent_name,
                "conversationId": self.conversation_id,
                "parentId": self.parent_id,
                "correlationId": self.correlation_id,
                "metadata": self.metadata or None,
                "scope": self.scope,
                "visibility": self.visibility,
                "expiresAt": _isoformat(self.expires_at),
            }
        )


@dataclass
class ContextSearchResult:
    """A context memory entry matched by semantic search."""

    id: str
    content: str
    content_type: str
    similarity: float
    created_at: Optional[datetime] = None
    user_id: Optional[str] = None
    org_id: Optional[str] = None
    agent_id: Optional[str] = None
    agent_name: Optional[str] = None
    conversation_id: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ContextSearchResult":
        return cls(
            id=data["id"],
            content=data.get("content", ""),
            content_type=data.get("contentType", ""),
            similarity=data.get("similarity", 0.0),
            created_at=parse_datetime(data.get("createdAt")),
            user_id=data.get("userId"),
            org_id=data.get("orgId"),
            agent_id=data.get("agentId"),
            agent_name=data.get("agentName"),
            conversation_id=data.get("conversationId"),
            metadata=data.get("metadata") or {},
        )


@dataclass
class ConversationSummary:
    """A conversation thread in context memory."""

    id: str
    message_count: int = 0
    token_count: int = 0
    scope: str = "user"
    title: Optional[str] = None
    last_message_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConversationSummary":
        return cls(
            id=data["id"],
            message_count=data.get("messageCount", 0),
            token_count=data.get("tokenCount", 0),
            scope=data.get("scope", "user"),
            title=data.get("title"),
            last_message_at=parse_datetime(data.get("lastMessageAt")),
        )


@dataclass
class ConversationItem:
    """A single entry of a conversation."""

    id: str
    content: str
    content_type: str
    created_at: Optional[datetime] = None
    agent_id: Optional[str] = None
    parent_id: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConversationItem":
        return cls(
            id=data["id"],
            content=data.get("content", ""),
            content_type=data.get("contentType", ""),
            created_at=parse_datetime(data.get("createdAt")),
            agent_id=data.get("agentId"),
            parent_id=data.get("parentId"),
            metadata=data.get("metadata") or {},
        )


# ==================== Documents ====================


@dataclass
class DocumentDetails:
    """A stored document and its processing state."""

    id: str
    filename: str = ""
    status: str = ""
    content_type: Optional[str] = None
    file_size: Optional[int] = None
    chunk_count: int = 0
    external_user_id: Optional[str] = None
    external_source: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    content: Optional[str] = None
    chunks: list[dict[str, Any]] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentDetails":
        return cls(
            id=data.get("id", data.get("documentId", "")),
            filename=data.get("filename", ""),
            status=data.get("status", ""),
            content_type=data.get("contentType"),
            file_size=data.get("fileSize"),
            chunk_count=data.get("chunkCount", 0),
            external_user_id=data.get("externalUserId"),
            external_source=data.get("externalSource"),
            metadata=data.get("metadata") or {},
            content=data.get("content"),
            chunks=list(data.get("chunks") or []),
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
        )


@dataclass
class DocumentSearchHit:
    """A document chunk matched by vector search."""

    document: DocumentDetails
    content: str
    similarity: float
    chunk_index: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentSearchHit":
        return cls(
            document=DocumentDetails.from_dict(data.get("document") or {}),
            content=data.get("content", ""),
            similarity=data.get("similarity", 0.0),
            chunk_index=data.get("chunkIndex"),
        )
