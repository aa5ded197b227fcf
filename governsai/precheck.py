"""
GovernsAI SDK - Governance prechecks.

Requests are sent to the precheck service, optionally after being enriched
with the organization's policy, the tool's metadata and the budget context
fetched from the platform.
"""

import asyncio
import dataclasses
import json
import logging
from typing import Any, Optional, Union

from .base import FeatureClient
from .exceptions import PrecheckError, extract_error_details
from .models import Decision, PrecheckRequest, PrecheckResponse
from .transport import AsyncHTTPTransport
from .utils import generate_correlation_id

logger = logging.getLogger("governsai.precheck")

DEFAULT_SCOPE = "net.external"

ENRICHABLE_FIELDS = ("policy_config", "tool_config", "budget_context")

_TECHNICAL_REASON_MARKERS = (
    "Precheck service",
    "connection failed",
    "service not available",
)


def merge_precheck_defaults(
    request: PrecheckRequest, defaults: dict[str, Any]
) -> PrecheckRequest:
    """
    Fill the enrichable fields of ``request`` from ``defaults``.

    A field the caller already set is never overwritten; a default of None
    leaves the field unset.
    """
    changes = {
        name: defaults[name]
        for name in ENRICHABLE_FIELDS
        if getattr(request, name) is None and defaults.get(name) is not None
    }
    return dataclasses.replace(request, **changes) if changes else request


def transform_policy_config(raw: Any) -> Any:
    """Convert a platform policy (camelCase) to the precheck schema (snake_case)."""
    if not isinstance(raw, dict):
        return raw

    policy: dict[str, Any] = {"version": raw.get("version")}
    if raw.get("model"):
        policy["model"] = raw["model"]

    if raw.get("defaults"):
        policy["defaults"] = {
            "ingress": raw["defaults"].get("ingress"),
            "egress": raw["defaults"].get("egress"),
        }

    tool_access = raw.get("tool_access") or raw.get("toolAccess")
    if isinstance(tool_access, dict):
        policy["tool_access"] = {}
        for tool_name, rule in tool_access.items():
            entry = {"direction": rule.get("direction"), "action": rule.get("action")}
            if rule.get("allow_pii"):
                entry["allow_pii"] = rule["allow_pii"]
            policy["tool_access"][tool_name] = entry

    policy["deny_tools"] = raw.get("deny_tools") or raw.get("denyTools") or []
    allow_tools = raw.get("allow_tools") or raw.get("allowTools")
    if allow_tools:
        policy["allow_tools"] = allow_tools
    policy["network_scopes"] = raw.get("network_scopes") or raw.get("networkScopes") or []
    policy["network_tools"] = raw.get("network_tools") or raw.get("networkTools") or []
    policy["on_error"] = raw.get("on_error") or raw.get("onError")
    return policy


def _last_user_message(messages: list[dict[str, Any]]) -> str:
    for message in reversed(messages):
        if message.get("role") == "user":
            return message.get("content") or ""
    return ""


class PrecheckClient(FeatureClient):
    """
    Client for governance prechecks.

    Precheck calls go to ``precheck_base_url`` when configured; enrichment
    lookups always go to the platform.
    """

    error_cls = PrecheckError
    status_path = "/api/v1/precheck"

    def __init__(
        self,
        http: AsyncHTTPTransport,
        config,
        sleep=None,
        platform_http: Optional[AsyncHTTPTransport] = None,
    ):
        super().__init__(http, config, sleep)
        self._platform_http = platform_http or http

    def use_transport(
        self, http: AsyncHTTPTransport, platform_http: Optional[AsyncHTTPTransport] = None
    ) -> None:
        super().use_transport(http)
        self._platform_http = platform_http or http

    # ==================== Core checks ====================

    async def check_request(
        self, request: PrecheckRequest, user_id: Optional[str] = None
    ) -> PrecheckResponse:
        """Enrich ``request`` and submit it for a governance decision."""
        if user_id:
            request = dataclasses.replace(request, user_id=user_id)
        logger.debug(
            "Checking request tool=%s scope=%s corr_id=%s",
            request.tool,
            request.scope,
            request.corr_id,
        )

        request = await self.enrich_request(request)
        data = await self._request(
            "POST", "/api/v1/precheck", "precheck request", body=request.to_dict()
        )
        response = self.validate_precheck_response(data)
        logger.debug("Precheck decision for %s: %s", request.tool, response.decision.value)
        return response

    async def enrich_request(self, request: PrecheckRequest) -> PrecheckRequest:
        """
        Fetch missing policy, tool and budget context concurrently.

        Each lookup is best effort: a failure is logged and the field stays
        unset.
        """
        lookups = {}
        if request.policy_config is None:
            lookups["policy_config"] = self._fetch_policy()
        if request.tool_config is None and request.tool:
            lookups["tool_config"] = self._fetch_tool_metadata(request.tool)
        if request.budget_context is None:
            lookups["budget_context"] = self._fetch_budget_context()
        if not lookups:
            return request

        results = await asyncio.gather(*lookups.values(), return_exceptions=True)
        defaults: dict[str, Any] = {}
        for name, result in zip(lookups, results):
            if isinstance(result, Exception):
                logger.warning("Precheck enrichment of %s failed: %s", name, result)
                continue
            defaults[name] = result
        return merge_precheck_defaults(request, defaults)

    async def _fetch_policy(self) -> Any:
        data = await self._platform_http.get("/api/v1/policies")
        policies = data.get("policies") if isinstance(data, dict) else None
        raw = policies[0] if policies else data
        return transform_policy_config(raw)

    async def _fetch_tool_metadata(self, tool: str) -> Optional[dict[str, Any]]:
        data = await self._platform_http.get(f"/api/v1/tools/{tool}/metadata")
        return data.get("metadata") if isinstance(data, dict) else None

    async def _fetch_budget_context(self) -> Optional[dict[str, Any]]:
        data = await self._platform_http.get("/api/v1/budget/context")
        return data or None

    async def check_tool_call(
        self,
        tool: str,
        args: dict[str, Any],
        scope: str = DEFAULT_SCOPE,
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> PrecheckResponse:
        request = PrecheckRequest(
            tool=tool,
            scope=scope,
            raw_text=f"Tool call: {tool} with arguments: {json.dumps(args, default=str)}",
            payload={"tool": tool, "args": args},
            tags=["sdk", "tool_call"],
            corr_id=correlation_id or generate_correlation_id(),
        )
        return await self.check_request(request, user_id)

    async def check_chat_message(
        self,
        messages: list[dict[str, Any]],
        provider: str = "openai",
        correlation_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> PrecheckResponse:
        """Precheck a chat exchange; only the last user message is inspected."""
        request = self.chat_precheck_request(messages, provider, correlation_id)
        return await self.check_request(request, user_id)

    async def check_mcp_call(
        self,
        tool: str,
        args: dict[str, Any],
        scope: str = DEFAULT_SCOPE,
        correlation_id: Optional[str] = None,
        budget_context: Optional[dict[str, Any]] = None,
    ) -> PrecheckResponse:
        request = self.mcp_precheck_request(tool, args, correlation_id)
        request = dataclasses.replace(request, scope=scope, budget_context=budget_context)
        return await self.check_request(request)

    async def check_batch(self, requests: list[PrecheckRequest]) -> list[PrecheckResponse]:
        """
        Check requests one by one.

        A failed item yields a ``block`` response flagged with
        ``metadata["error"]`` so the result list stays aligned with the input.
        """
        results: list[PrecheckResponse] = []
        for request in requests:
            try:
                results.append(await self.check_request(request))
            except Exception as e:
                message = extract_error_details(e)["message"]
                logger.error("Batch precheck failed for %s: %s", request.tool, e)
                results.append(
                    PrecheckResponse(
                        decision=Decision.BLOCK,
                        reasons=[f"Precheck failed: {message}"],
                        metadata={"error": True, "originalError": message},
                    )
                )
        return results

    # ==================== Request builders ====================

    @staticmethod
    def chat_precheck_request(
        messages: list[dict[str, Any]],
        provider: str = "openai",
        correlation_id: Optional[str] = None,
    ) -> PrecheckRequest:
        return PrecheckRequest(
            tool="model.chat",
            scope=DEFAULT_SCOPE,
            raw_text=_last_user_message(messages),
            payload={"messages": messages, "provider": provider},
            tags=["sdk", "chat"],
            corr_id=correlation_id or generate_correlation_id(),
        )

    @staticmethod
    def mcp_precheck_request(
        tool: str, args: dict[str, Any], correlation_id: Optional[str] = None
    ) -> PrecheckRequest:
        return PrecheckRequest(
            tool=tool,
            scope=DEFAULT_SCOPE,
            raw_text=f"MCP Tool Call: {tool} with arguments: {json.dumps(args, default=str)}",
            payload={"tool": tool, "args": args},
            tags=["sdk", "mcp"],
            corr_id=correlation_id or generate_correlation_id(),
        )

    # ==================== Decision helpers ====================

    @staticmethod
    def validate_precheck_response(response: Any) -> PrecheckResponse:
        """Parse a raw precheck body, rejecting malformed decisions."""
        if not isinstance(response, dict):
            raise PrecheckError("Invalid precheck response format", retryable=False)
        decision = response.get("decision")
        if not decision:
            raise PrecheckError("Missing decision in precheck response", retryable=False)
        try:
            Decision(decision)
        except ValueError:
            raise PrecheckError(f"Invalid decision: {decision}", retryable=False) from None
        return PrecheckResponse.from_dict(response)

    @staticmethod
    def requires_confirmation(decision: Union[str, Decision]) -> bool:
        return decision == Decision.CONFIRM

    @staticmethod
    def is_blocked(decision: Union[str, Decision]) -> bool:
        return decision in (Decision.BLOCK, Decision.DENY)

    @staticmethod
    def is_allowed(decision: Union[str, Decision]) -> bool:
        return decision == Decision.ALLOW

    @staticmethod
    def user_friendly_error(response: PrecheckResponse) -> str:
        """Join the policy reasons, leaving out precheck service internals."""
        reasons = [
            reason
            for reason in response.reasons
            if not any(marker in reason for marker in _TECHNICAL_REASON_MARKERS)
        ]
        return ", ".join(reasons) if reasons else "Request blocked by policy"
