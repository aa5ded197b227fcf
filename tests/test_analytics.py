"""
Tests for analytics reports and local aggregation.
"""

from datetime import datetime

import pytest

from governsai.analytics import (
    AnalyticsClient,
    UsageStats,
    export_to_csv,
    format_analytics_data,
)
from governsai.exceptions import AnalyticsError, AuthenticationError
from governsai.models import UsageRecord

USAGE = {
    "records": [
        {"userId": "u1", "model": "gpt-4o", "tool": "web_search", "cost": 1.5},
        {"userId": "u1", "model": "gpt-4o", "cost": 0.5},
        {"userId": "u2", "model": "claude", "tool": "web_search", "cost": 1.0},
    ]
}


@pytest.fixture
def client(http, config, clock):
    return AnalyticsClient(http, config, sleep=clock.sleep)


def record(user, model, cost, tool=None):
    return UsageRecord(user, "org-1", "openai", model, 0, 0, cost, tool=tool)


class TestUsageStats:
    def test_aggregation(self):
        stats = UsageStats.from_records(
            [
                record("u1", "gpt-4o", 1.5, "web_search"),
                record("u1", "gpt-4o", 0.5),
                record("u2", "claude", 1.0, "web_search"),
            ]
        )
        assert stats.total_records == 3
        assert stats.total_cost == pytest.approx(3.0)
        assert stats.average_cost == pytest.approx(1.0)
        assert stats.by_tool == {"web_search": 2.5}
        assert stats.by_model == {"gpt-4o": 2.0, "claude": 1.0}
        assert stats.by_user == {"u1": 2.0, "u2": 1.0}

    def test_empty(self):
        stats = UsageStats.from_records([])
        assert stats.average_cost == 0.0
        assert stats.to_dict()["totalRecords"] == 0


class TestFormatting:
    def test_export_to_csv(self):
        rows = [{"tool": "web_search", "cost": 1.5}, {"tool": "files, read", "cost": 2}]
        assert export_to_csv(rows) == (
            '"tool","cost"\n"web_search",1.5\n"files, read",2'
        )

    def test_export_empty(self):
        assert export_to_csv([]) == ""

    def test_format_rounds_nested_floats(self):
        data = {"cost": 1.23456, "items": [{"v": 2.999}], "ok": True, "n": 3}
        assert format_analytics_data(data) == {
            "cost": 1.23,
            "items": [{"v": 3.0}],
            "ok": True,
            "n": 3,
        }
        assert AnalyticsClient.format_analytics_data([1.004]) == [1.0]


class TestReports:
    @pytest.mark.asyncio
    async def test_get_decisions_params(self, client, router):
        router.add("GET", "/api/v1/decisions", {"decisions": [], "stats": {"total": 0}})
        data = await client.get_decisions(
            time_range="7d", decision="deny", include_stats=True, limit=50
        )
        assert data["stats"] == {"total": 0}
        params = router.requests[0].url.params
        assert params["timeRange"] == "7d"
        assert params["decision"] == "deny"
        assert params["includeStats"] == "true"
        assert params["limit"] == "50"
        assert "tool" not in params

    @pytest.mark.asyncio
    async def test_decision_stats(self, client, router):
        router.add("GET", "/api/v1/decisions", {"decisions": [], "stats": {"allow": 4}})
        assert await client.get_decision_stats("24h") == {"allow": 4}

    @pytest.mark.asyncio
    async def test_spend_breakdowns(self, client, router):
        router.add("GET", "/api/v1/spend/tool-costs", {"costs": {"web_search": 2.5}})
        router.add("GET", "/api/v1/spend/model-costs", {"costs": {"gpt-4o": 2.0}})
        assert await client.get_spend_by_tool() == {"web_search": 2.5}
        assert await client.get_spend_by_model("7d") == {"gpt-4o": 2.0}
        assert router.requests[0].url.params["timeRange"] == "30d"

    @pytest.mark.asyncio
    async def test_usage_stats_queries_time_range(self, client, router):
        router.add("GET", "/api/v1/usage", USAGE)
        stats = await client.get_usage_stats("7d")
        assert stats.total_records == 3
        params = router.requests[0].url.params
        start = datetime.fromisoformat(params["startDate"])
        end = datetime.fromisoformat(params["endDate"])
        assert (end - start).days == 7

    @pytest.mark.asyncio
    async def test_dashboard(self, client, router):
        router.add("GET", "/api/v1/decisions", {"decisions": [1]})
        router.add("GET", "/api/v1/toolcalls", {"toolCalls": [2]})
        router.add("GET", "/api/v1/spend", {"totalSpend": 3.0})
        router.add("GET", "/api/v1/usage", USAGE)

        data = await client.get_dashboard_data("24h")

        assert data["decisions"] == {"decisions": [1]}
        assert data["toolCalls"] == {"toolCalls": [2]}
        assert data["spend"] == {"totalSpend": 3.0}
        assert data["usage"]["totalRecords"] == 3
        assert data["usage"]["totalCost"] == pytest.approx(3.0)

    @pytest.mark.asyncio
    async def test_dashboard_failure_raises(self, client, router):
        router.add("GET", "/api/v1/decisions", {"decisions": []})
        router.add("GET", "/api/v1/toolcalls", (403, {"error": "forbidden"}))
        router.add("GET", "/api/v1/spend", {})
        router.add("GET", "/api/v1/usage", USAGE)
        with pytest.raises(AuthenticationError):
            await client.get_dashboard_data()

    @pytest.mark.asyncio
    async def test_profile_error_type(self, client, router):
        router.add("GET", "/api/v1/profile", (404, {"error": "no profile"}))
        with pytest.raises(AnalyticsError):
            await client.get_user_profile()
