"""
Tests for shared helpers.
"""

import re
from datetime import datetime, timedelta, timezone

import pytest

from governsai.utils import (
    build_query_params,
    deep_merge,
    generate_correlation_id,
    get_time_range,
)


class TestCorrelationId:
    def test_format(self):
        assert re.fullmatch(r"corr_\d{13}_[0-9a-z]{9}", generate_correlation_id())

    def test_unique(self):
        assert len({generate_correlation_id() for _ in range(100)}) == 100


class TestBuildQueryParams:
    def test_conversion(self):
        when = datetime(2026, 1, 2, tzinfo=timezone.utc)
        assert build_query_params(
            {
                "limit": 10,
                "includeStats": False,
                "startDate": when,
                "tags": ["a", 1],
                "tool": None,
            }
        ) == {
            "limit": "10",
            "includeStats": "false",
            "startDate": "2026-01-02T00:00:00+00:00",
            "tags": ["a", "1"],
        }

    def test_none(self):
        assert build_query_params(None) == {}


class TestTimeRange:
    NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize(
        "name,delta",
        [("1h", timedelta(hours=1)), ("24h", timedelta(days=1)), ("7d", timedelta(days=7)),
         ("90d", timedelta(days=90))],
    )
    def test_known_ranges(self, name, delta):
        start, end = get_time_range(name, now=self.NOW)
        assert end == self.NOW
        assert end - start == delta

    def test_unknown_range_defaults_to_thirty_days(self):
        start, end = get_time_range("fortnight", now=self.NOW)
        assert end - start == timedelta(days=30)


class TestDeepMerge:
    def test_nested(self):
        target = {"a": {"x": 1, "y": 2}, "b": 1}
        merged = deep_merge(target, {"a": {"y": 3}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
        assert target["a"]["y"] == 2
