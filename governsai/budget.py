"""
GovernsAI SDK - Budget tracking and usage reporting.
"""

import logging
from typing import Any, Optional, Union

from .base import FeatureClient
from .exceptions import BudgetError, GovernsAIError, extract_error_details
from .models import (
    BatchItemResult,
    BudgetContext,
    BudgetLimit,
    BudgetStatus,
    PurchaseRecord,
    UsageRecord,
)
from .utils import build_query_params
from .validation import validate_in_list, validate_non_negative

logger = logging.getLogger("governsai.budget")

BASE_TOKEN_COST = 0.0001
OUTPUT_TOKEN_MULTIPLIER = 2

BUDGET_LIMIT_TYPES = ["organization", "user"]


def _usage_payload(usage: Union[UsageRecord, dict[str, Any]]) -> dict[str, Any]:
    if isinstance(usage, UsageRecord):
        return usage.to_payload()
    payload = {
        "toolId": usage.get("toolId") or usage.get("tool"),
        "model": usage.get("model"),
        "tokensIn": usage.get("tokensIn", usage.get("inputTokens")),
        "tokensOut": usage.get("tokensOut", usage.get("outputTokens")),
        "cost": usage.get("cost"),
        "metadata": usage.get("metadata"),
    }
    return {k: v for k, v in payload.items() if v is not None}


class BudgetClient(FeatureClient):
    """Client for budget context, spend limits and usage records."""

    error_cls = BudgetError
    status_path = "/api/v1/budget/context"

    async def get_budget_context(self, user_id: Optional[str] = None) -> BudgetContext:
        """Fetch limits and current spend for the key's organization or user."""
        data = await self._request("GET", "/api/v1/budget/context", "get budget context")
        context = BudgetContext.from_dict(data)
        logger.debug(
            "Budget context: spend=%s limit=%s remaining=%s",
            context.current_spend,
            context.monthly_limit,
            context.remaining_budget,
        )
        return context

    async def check_budget(
        self, estimated_cost: float, user_id: Optional[str] = None
    ) -> BudgetStatus:
        """Decide whether ``estimated_cost`` fits in the remaining budget."""
        context = await self.get_budget_context(user_id)
        allowed = context.remaining_budget >= estimated_cost
        return BudgetStatus(
            allowed=allowed,
            current_spend=context.current_spend,
            limit=context.monthly_limit,
            remaining=context.remaining_budget,
            percent_used=context.percent_used,
            reason=None if allowed else "Insufficient budget remaining",
        )

    async def record_usage(self, usage: Union[UsageRecord, dict[str, Any]]) -> None:
        payload = _usage_payload(usage)
        await self._request("POST", "/api/v1/usage", "record usage", body=payload)
        logger.info(
            "Usage recorded: model=%s cost=%s", payload.get("model"), payload.get("cost")
        )

    async def record_purchase(self, purchase: PurchaseRecord) -> None:
        await self._request(
            "POST", "/api/purchases", "record purchase", body=purchase.to_dict()
        )
        logger.info("Purchase recorded: %s %s", purchase.amount, purchase.currency)

    async def record_batch_usage(
        self, records: list[Union[UsageRecord, dict[str, Any]]]
    ) -> list[BatchItemResult]:
        """Record each usage entry; failures are reported per item."""
        results = []
        for index, usage in enumerate(records):
            try:
                await self.record_usage(usage)
            except Exception as e:
                logger.error("Failed to record usage item %d: %s", index, e)
                results.append(
                    BatchItemResult(
                        index=index, success=False, error=extract_error_details(e)["message"]
                    )
                )
            else:
                results.append(BatchItemResult(index=index, success=True))
        logger.info("Batch usage recording completed: %d item(s)", len(records))
        return results

    # ==================== Budget limits ====================

    async def get_budget_limits(self) -> list[BudgetLimit]:
        data = await self._request("GET", "/api/spend/budget-limits", "get budget limits")
        return [BudgetLimit.from_dict(item) for item in data.get("limits", [])]

    async def create_budget_limit(
        self,
        monthly_limit: float,
        type: str = "organization",
        user_id: Optional[str] = None,
    ) -> BudgetLimit:
        validate_non_negative(monthly_limit, "monthly_limit")
        validate_in_list(type, "type", BUDGET_LIMIT_TYPES)
        body = {"type": type, "monthlyLimit": monthly_limit}
        if user_id:
            body["userId"] = user_id
        data = await self._request(
            "POST", "/api/spend/budget-limits", "create budget limit", body=body
        )
        limit = BudgetLimit.from_dict(data.get("limit", data))
        logger.info("Budget limit created: %s", limit.id)
        return limit

    async def update_budget_limit(self, limit_id: str, **updates: Any) -> BudgetLimit:
        """Update a limit; keyword names follow the API (``monthlyLimit``, ``isActive``)."""
        data = await self._request(
            "PUT",
            f"/api/spend/budget-limits/{limit_id}",
            "update budget limit",
            body=updates,
        )
        return BudgetLimit.from_dict(data.get("limit", data))

    async def delete_budget_limit(self, limit_id: str) -> None:
        await self._request(
            "DELETE", f"/api/spend/budget-limits/{limit_id}", "delete budget limit"
        )
        logger.info("Budget limit deleted: %s", limit_id)

    async def get_usage_records(
        self,
        user_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        tool: Optional[str] = None,
        model: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[UsageRecord]:
        params = build_query_params(
            {
                "userId": user_id,
                "startDate": start_date,
                "endDate": end_date,
                "tool": tool,
                "model": model,
                "limit": limit,
                "offset": offset,
            }
        )
        data = await self._request("GET", "/api/usage", "get usage records", params=params)
        return [UsageRecord.from_dict(item) for item in data.get("records", [])]

    # ==================== Helpers ====================

    async def is_over_budget(self, user_id: Optional[str] = None) -> bool:
        """Best effort: False when the budget cannot be fetched."""
        try:
            context = await self.get_budget_context(user_id)
        except GovernsAIError as e:
            logger.error("Failed to check budget status: %s", e)
            return False
        return context.is_over_budget

    async def get_budget_utilization(self, user_id: Optional[str] = None) -> float:
        """Percentage of the monthly limit spent; 0.0 when it cannot be fetched."""
        try:
            context = await self.get_budget_context(user_id)
        except GovernsAIError as e:
            logger.error("Failed to get budget utilization: %s", e)
            return 0.0
        return context.percent_used

    @staticmethod
    def calculate_estimated_cost(model: str, input_tokens: int, output_tokens: int) -> float:
        """Flat per-token estimate; output tokens cost twice as much."""
        return (
            input_tokens * BASE_TOKEN_COST
            + output_tokens * BASE_TOKEN_COST * OUTPUT_TOKEN_MULTIPLIER
        )

    def create_usage_record(
        self,
        user_id: str,
        org_id: str,
        provider: str,
        model: str,
        input_tokens: int,
        output_tokens: int,
        tool: Optional[str] = None,
        correlation_id: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> UsageRecord:
        return UsageRecord(
            user_id=user_id,
            org_id=org_id,
            provider=provider,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=self.calculate_estimated_cost(model, input_tokens, output_tokens),
            tool=tool,
            correlation_id=correlation_id,
            metadata=metadata or {},
        )
