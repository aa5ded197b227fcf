"""
GovernsAI SDK - Top-level client.

Builds the transports and feature clients around one shared configuration
holder and offers shortcuts for the most common calls.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

from .analytics import AnalyticsClient
from .base import FeatureClient
from .budget import BudgetClient
from .config import ConfigHolder, GovernsAIConfig
from .confirmation import ConfirmationClient, StatusCallback
from .context import ContextClient
from .documents import DocumentClient
from .exceptions import GovernsAIError
from .models import (
    BudgetContext,
    ConfirmationRecord,
    ConfirmationRequest,
    ContextSearchResult,
    PrecheckRequest,
    PrecheckResponse,
    RequestType,
    UsageRecord,
)
from .precheck import PrecheckClient
from .tools import ToolClient
from .transport import AsyncHTTPTransport

logger = logging.getLogger("governsai.client")

HEALTHY = "healthy"
DEGRADED = "degraded"
UNHEALTHY = "unhealthy"


class GovernsAIClient:
    """
    Asynchronous client for the GovernsAI governance platform.

    Example:
        ```python
        async with GovernsAIClient(
            api_key="your-api-key",
            base_url="https://api.governs.ai",
            org_id="org-123",
        ) as client:
            decision = await client.precheck_client.check_tool_call(
                "weather_current", {"location": "Berlin"}
            )
            if client.precheck_client.requires_confirmation(decision.decision):
                ...
        ```
    """

    def __init__(
        self,
        config: Optional[GovernsAIConfig] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
        clock: Optional[Callable[[], float]] = None,
        **options: Any,
    ):
        """
        Either pass a ``GovernsAIConfig`` or its fields as keyword arguments.

        The configuration is validated before any transport is created.
        ``transport`` replaces the network layer of every request (tests use
        ``httpx.MockTransport``).
        """
        if config is None:
            config = GovernsAIConfig(**options)
        elif options:
            config = config.replace(**options)

        self._holder = ConfigHolder(config)
        self._transport = transport
        self._retired: list[AsyncHTTPTransport] = []
        self._closing: set[asyncio.Task] = set()
        self._http, self._precheck_http = self._build_transports(config)

        self._platform = FeatureClient(self._http, self._holder, sleep)
        self.precheck_client = PrecheckClient(
            self._precheck_http, self._holder, sleep, platform_http=self._http
        )
        self.confirmation_client = ConfirmationClient(self._http, self._holder, sleep, clock)
        self.budget_client = BudgetClient(self._http, self._holder, sleep)
        self.tools_client = ToolClient(self._http, self._holder, sleep)
        self.analytics_client = AnalyticsClient(self._http, self._holder, sleep)
        self.context = ContextClient(self._http, self._holder, sleep)
        self.documents = DocumentClient(self._http, self._holder, sleep)

    def _build_transports(
        self, config: GovernsAIConfig
    ) -> tuple[AsyncHTTPTransport, AsyncHTTPTransport]:
        http = AsyncHTTPTransport(config, transport=self._transport)
        if config.precheck_url == config.base_url.rstrip("/"):
            return http, http
        precheck_http = AsyncHTTPTransport(
            config, base_url=config.precheck_url, transport=self._transport
        )
        return http, precheck_http

    @property
    def _feature_clients(self) -> list[FeatureClient]:
        return [
            self._platform,
            self.confirmation_client,
            self.budget_client,
            self.tools_client,
            self.analytics_client,
            self.context,
            self.documents,
        ]

    @classmethod
    def from_env(cls, **kwargs: Any) -> "GovernsAIClient":
        """Create a client from ``GOVERNS_*`` environment variables."""
        return cls(GovernsAIConfig.from_env(), **kwargs)

    # ==================== Configuration ====================

    @property
    def config(self) -> GovernsAIConfig:
        return self._holder.get()

    def reconfigure(self, **changes: Any) -> GovernsAIConfig:
        """
        Validate ``changes`` and install the resulting configuration.

        Calls already in flight finish with the snapshot and transport they
        started with. A replaced transport is closed as soon as its last call
        finishes, or right away when it is idle and an event loop is running;
        ``aclose`` closes whatever is left.
        """
        new_config = self._holder.get().replace(**changes)
        http, precheck_http = self._build_transports(new_config)

        replaced = {self._http, self._precheck_http}
        self._http, self._precheck_http = http, precheck_http
        for client in self._feature_clients:
            client.use_transport(http)
        self.precheck_client.use_transport(precheck_http, platform_http=http)
        self._holder.swap(new_config)

        for old in replaced:
            old.retire()
        self._retired = [t for t in (*self._retired, *replaced) if not t.is_closed]
        self._close_idle_retired()

        logger.info("Client reconfigured: %s", new_config.to_dict())
        return new_config

    def _close_idle_retired(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        for old in self._retired:
            if old.idle:
                task = loop.create_task(old.aclose())
                self._closing.add(task)
                task.add_done_callback(self._closing.discard)

    # ==================== Shortcuts ====================

    async def precheck(
        self, request: PrecheckRequest, user_id: Optional[str] = None
    ) -> PrecheckResponse:
        return await self.precheck_client.check_request(request, user_id)

    async def get_budget_context(self, user_id: Optional[str] = None) -> BudgetContext:
        return await self.budget_client.get_budget_context(user_id)

    async def record_usage(self, usage: Union[UsageRecord, dict[str, Any]]) -> None:
        await self.budget_client.record_usage(usage)

    async def confirm(
        self,
        correlation_id: str,
        request_type: Union[str, RequestType],
        request_desc: str,
        request_payload: Any = None,
        reasons: Optional[list[str]] = None,
    ) -> ConfirmationRecord:
        """Create a confirmation for a sensitive operation."""
        return await self.confirmation_client.create_confirmation(
            ConfirmationRequest(
                correlation_id=correlation_id,
                request_type=RequestType(request_type),
                request_desc=request_desc,
                request_payload=request_payload,
                reasons=reasons or [],
            )
        )

    async def get_confirmation_status(self, correlation_id: str) -> ConfirmationRecord:
        return await self.confirmation_client.get_confirmation_status(correlation_id)

    async def poll_confirmation(
        self,
        correlation_id: str,
        callback: StatusCallback,
        interval_ms: int = 2000,
        timeout_ms: int = 300000,
    ) -> ConfirmationRecord:
        return await self.confirmation_client.poll_confirmation(
            correlation_id, callback, interval_ms, timeout_ms
        )

    async def get_policies(self) -> Any:
        return await self._platform._request("GET", "/api/v1/policies", "get policies")

    async def search_context(self, query: str, **kwargs: Any) -> list[ContextSearchResult]:
        return await self.context.search_context(query, **kwargs)

    async def get_recent_context(self, **kwargs: Any) -> list[ContextSearchResult]:
        return await self.context.get_recent_context(**kwargs)

    # ==================== Diagnostics ====================

    async def test_connection(self) -> bool:
        """Single unretried request to the profile endpoint."""
        try:
            await self._http.get("/api/profile")
        except GovernsAIError as e:
            logger.error("Connection test failed: %s", e)
            return False
        logger.info("Connection test successful")
        return True

    async def get_health_status(self) -> dict[str, Any]:
        """
        Probe the core services concurrently.

        ``status`` is healthy when all respond, degraded when some do and
        unhealthy when none do.
        """
        names = ("precheck", "confirmation", "budget", "analytics")
        statuses = await asyncio.gather(
            self.precheck_client.get_service_status(),
            self.confirmation_client.get_service_status(),
            self.budget_client.get_service_status(),
            self.analytics_client.get_service_status(),
        )
        services = {name: status.available for name, status in zip(names, statuses)}
        healthy = sum(services.values())
        if healthy == len(services):
            status = HEALTHY
        elif healthy:
            status = DEGRADED
        else:
            status = UNHEALTHY
        return {
            "status": status,
            "services": services,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # ==================== Lifecycle ====================

    async def aclose(self) -> None:
        """Close current and replaced transports."""
        if self._closing:
            await asyncio.gather(*self._closing)
        transports = {self._http, self._precheck_http, *self._retired}
        self._retired.clear()
        for http in transports:
            await http.aclose()

    async def __aenter__(self) -> "GovernsAIClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
