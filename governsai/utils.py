"""
GovernsAI SDK - Small shared helpers.
"""

import random
import string
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

_BASE36 = string.digits + string.ascii_lowercase

TIME_RANGES = {
    "1h": timedelta(hours=1),
    "24h": timedelta(days=1),
    "1d": timedelta(days=1),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
    "1y": timedelta(days=365),
}

DEFAULT_TIME_RANGE = "30d"


def generate_correlation_id() -> str:
    """Return ``corr_<epoch ms>_<9 random base36 chars>``."""
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"corr_{int(time.time() * 1000)}_{suffix}"


def build_query_params(params: Optional[dict[str, Any]]) -> dict[str, Any]:
    """
    Prepare ``params`` for the query string.

    None values are dropped, booleans become ``true``/``false``, datetimes
    are ISO formatted and lists are kept so httpx repeats the key.
    """
    query: dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        elif isinstance(value, datetime):
            query[key] = value.isoformat()
        elif isinstance(value, (list, tuple)):
            query[key] = [str(v) for v in value]
        else:
            query[key] = str(value)
    return query


def get_time_range(
    time_range: str = DEFAULT_TIME_RANGE, now: Optional[datetime] = None
) -> tuple[datetime, datetime]:
    """Resolve ``1h``/``24h``/``7d``/... to ``(start, end)``; unknown ranges mean 30 days."""
    end = now or datetime.now(timezone.utc)
    delta = TIME_RANGES.get(time_range, TIME_RANGES[DEFAULT_TIME_RANGE])
    return end - delta, end


def deep_merge(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``source`` into a copy of ``target``; ``source`` wins."""
    result = dict(target)
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
