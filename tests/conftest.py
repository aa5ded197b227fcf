"""
Shared fixtures for GovernsAI SDK tests.
"""

import json

import httpx
import pytest

from governsai.config import GovernsAIConfig
from governsai.transport import AsyncHTTPTransport


class FakeClock:
    """Virtual monotonic clock; ``sleep`` advances it instantly."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class Router:
    """
    Scripted responses for ``httpx.MockTransport``.

    Each route holds a queue; the last entry repeats once the others are
    used up. Entries are a dict (200 JSON), a ``(status, body)`` tuple, an
    exception to raise, or a callable taking the request.
    """

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, *responses):
        self.routes[(method, path)] = list(responses)
        return self

    def handler(self, request):
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(404, json={"error": f"No route for {request.url.path}"})
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(request)
        if isinstance(item, tuple):
            status, body = item
            return httpx.Response(status, json=body)
        return httpx.Response(200, json=item)

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)

    def calls(self, method, path):
        return [
            r for r in self.requests if r.method == method and r.url.path == path
        ]

    def body(self, method, path, index=-1):
        return json.loads(self.calls(method, path)[index].content)


def confirmation(status, correlation_id="corr-1"):
    return {
        "success": True,
        "confirmation": {
            "id": f"conf-{correlation_id}",
            "correlationId": correlation_id,
            "status": status,
            "requestType": "tool_call",
            "requestDesc": "Execute tool: payment_process",
            "requestPayload": {"tool": "payment_process"},
            "reasons": ["High risk operation"],
            "createdAt": "2026-01-01T00:00:00Z",
            "expiresAt": "2026-01-01T00:05:00Z",
        },
    }


@pytest.fixture
def config():
    return GovernsAIConfig(
        api_key="test-key",
        base_url="https://api.governs.test",
        org_id="org-1",
        retry_base_delay_ms=10,
    )


@pytest.fixture
def router():
    return Router()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def http(config, router):
    return AsyncHTTPTransport(config, transport=router.transport)
