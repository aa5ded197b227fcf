"""
GovernsAI SDK - Governance analytics.

Decision, tool-call, spend and usage reports. Most endpoints return report
dicts as the platform shapes them; usage statistics are aggregated locally.
"""

import asyncio
import csv
import io
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Optional

from .base import FeatureClient
from .exceptions import AnalyticsError
from .models import UsageRecord
from .utils import DEFAULT_TIME_RANGE, build_query_params, get_time_range

logger = logging.getLogger("governsai.analytics")


@dataclass
class UsageStats:
    """Usage cost aggregated over a time range."""

    total_records: int = 0
    total_cost: float = 0.0
    average_cost: float = 0.0
    by_tool: dict[str, float] = field(default_factory=dict)
    by_model: dict[str, float] = field(default_factory=dict)
    by_user: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: list[UsageRecord]) -> "UsageStats":
        by_tool: dict[str, float] = defaultdict(float)
        by_model: dict[str, float] = defaultdict(float)
        by_user: dict[str, float] = defaultdict(float)
        total = 0.0
        for record in records:
            total += record.cost
            if record.tool:
                by_tool[record.tool] += record.cost
            if record.model:
                by_model[record.model] += record.cost
            if record.user_id:
                by_user[record.user_id] += record.cost
        return cls(
            total_records=len(records),
            total_cost=total,
            average_cost=total / len(records) if records else 0.0,
            by_tool=dict(by_tool),
            by_model=dict(by_model),
            by_user=dict(by_user),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalRecords": self.total_records,
            "totalCost": self.total_cost,
            "averageCost": self.average_cost,
            "byTool": self.by_tool,
            "byModel": self.by_model,
            "byUser": self.by_user,
        }


def export_to_csv(rows: list[dict[str, Any]]) -> str:
    """Render ``rows`` as CSV, using the keys of the first row as the header."""
    if not rows:
        return ""
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=list(rows[0].keys()),
        extrasaction="ignore",
        quoting=csv.QUOTE_NONNUMERIC,
        lineterminator="\n",
    )
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().rstrip("\n")


def format_analytics_data(data: Any) -> Any:
    """Round every float in ``data`` to two decimals, recursively."""
    if isinstance(data, bool):
        return data
    if isinstance(data, float):
        return round(data, 2)
    if isinstance(data, dict):
        return {key: format_analytics_data(value) for key, value in data.items()}
    if isinstance(data, list):
        return [format_analytics_data(item) for item in data]
    return data


class AnalyticsClient(FeatureClient):
    """Client for governance analytics."""

    error_cls = AnalyticsError
    status_path = "/api/v1/decisions"

    async def get_decisions(
        self,
        time_range: Optional[str] = None,
        decision: Optional[str] = None,
        tool: Optional[str] = None,
        user_id: Optional[str] = None,
        include_stats: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> dict[str, Any]:
        """Returns ``{"decisions": [...], "stats": {...}, "pagination": {...}}``."""
        params = build_query_params(
            {
                "timeRange": time_range,
                "decision": decision,
                "tool": tool,
                "userId": user_id,
                "includeStats": include_stats,
                "limit": limit,
                "offset": offset,
            }
        )
        return await self._request(
            "GET", "/api/v1/decisions", "get decision analytics", params=params
        )

    async def get_decision_stats(self, time_range: str = DEFAULT_TIME_RANGE) -> dict[str, Any]:
        data = await self.get_decisions(time_range=time_range, include_stats=True)
        return data.get("stats", {})

    async def get_tool_calls(
        self,
        time_range: Optional[str] = None,
        tool: Optional[str] = None,
        status: Optional[str] = None,
        user_id: Optional[str] = None,
        include_stats: Optional[bool] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> dict[str, Any]:
        """Returns ``{"toolCalls": [...], "stats": {...}, "pagination": {...}}``."""
        params = build_query_params(
            {
                "timeRange": time_range,
                "tool": tool,
                "status": status,
                "userId": user_id,
                "includeStats": include_stats,
                "limit": limit,
                "offset": offset,
            }
        )
        return await self._request(
            "GET", "/api/v1/toolcalls", "get tool call analytics", params=params
        )

    async def get_spend_analytics(self, time_range: str = DEFAULT_TIME_RANGE) -> dict[str, Any]:
        return await self._request(
            "GET",
            "/api/v1/spend",
            "get spend analytics",
            params=build_query_params({"timeRange": time_range}),
        )

    async def get_spend_by_tool(self, time_range: str = DEFAULT_TIME_RANGE) -> dict[str, float]:
        data = await self._request(
            "GET",
            "/api/v1/spend/tool-costs",
            "get spend by tool",
            params=build_query_params({"timeRange": time_range}),
        )
        return data.get("costs", {})

    async def get_spend_by_model(self, time_range: str = DEFAULT_TIME_RANGE) -> dict[str, float]:
        data = await self._request(
            "GET",
            "/api/v1/spend/model-costs",
            "get spend by model",
            params=build_query_params({"timeRange": time_range}),
        )
        return data.get("costs", {})

    async def get_usage_records(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        user_id: Optional[str] = None,
        tool: Optional[str] = None,
        model: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[UsageRecord]:
        params = build_query_params(
            {
                "startDate": start_date,
                "endDate": end_date,
                "userId": user_id,
                "tool": tool,
                "model": model,
                "limit": limit,
                "offset": offset,
            }
        )
        data = await self._request("GET", "/api/v1/usage", "get usage records", params=params)
        return [UsageRecord.from_dict(item) for item in data.get("records", [])]

    async def get_usage_stats(self, time_range: str = DEFAULT_TIME_RANGE) -> UsageStats:
        start, end = get_time_range(time_range)
        records = await self.get_usage_records(
            start_date=start.isoformat(), end_date=end.isoformat()
        )
        stats = UsageStats.from_records(records)
        logger.debug(
            "Usage statistics: %d record(s), total cost %.4f",
            stats.total_records,
            stats.total_cost,
        )
        return stats

    async def get_dashboard_data(self, time_range: str = DEFAULT_TIME_RANGE) -> dict[str, Any]:
        """Fetch decisions, tool calls, spend and usage concurrently."""
        decisions, tool_calls, spend, usage = await asyncio.gather(
            self.get_decisions(time_range=time_range, include_stats=True),
            self.get_tool_calls(time_range=time_range, include_stats=True),
            self.get_spend_analytics(time_range),
            self.get_usage_stats(time_range),
        )
        return {
            "decisions": decisions,
            "toolCalls": tool_calls,
            "spend": spend,
            "usage": {
                "totalRecords": usage.total_records,
                "totalCost": usage.total_cost,
                "averageCost": usage.average_cost,
            },
        }

    async def get_user_profile(self) -> dict[str, Any]:
        """Returns ``{"id", "email", "name", "organizations": [...]}``."""
        return await self._request("GET", "/api/v1/profile", "get user profile")

    @staticmethod
    def export_to_csv(rows: list[dict[str, Any]]) -> str:
        return export_to_csv(rows)

    @staticmethod
    def format_analytics_data(data: Any) -> Any:
        return format_analytics_data(data)
