"""
GovernsAI SDK - Shared plumbing for feature clients.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional, Union

from .config import ConfigHolder, GovernsAIConfig
from .exceptions import GovernsAIError, retag_error
from .models import ServiceStatus
from .retry import RetryPolicy, execute_with_retry
from .transport import AsyncHTTPTransport

logger = logging.getLogger("governsai.base")

SleepFn = Callable[[float], Awaitable[Any]]


class FeatureClient:
    """
    Base for the per-domain clients.

    Each call takes one configuration snapshot, builds its retry policy from
    it and runs the transport call through ``execute_with_retry``. Generic
    transport errors are re-tagged as ``error_cls`` so the policy predicate
    recognises them.
    """

    error_cls: type = GovernsAIError
    status_path: Optional[str] = None

    def __init__(
        self,
        http: AsyncHTTPTransport,
        config: Union[ConfigHolder, GovernsAIConfig],
        sleep: Optional[SleepFn] = None,
    ):
        self._http = http
        self._holder = config if isinstance(config, ConfigHolder) else ConfigHolder(config)
        self._sleep = sleep or asyncio.sleep

    @property
    def config(self) -> GovernsAIConfig:
        return self._holder.get()

    def use_transport(self, http: AsyncHTTPTransport) -> None:
        """Route subsequent calls through ``http``; calls in flight keep theirs."""
        self._http = http

    async def _request(
        self,
        method: str,
        path: str,
        context: str,
        body: Any = None,
        params: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, Any]] = None,
        form: Optional[dict[str, Any]] = None,
        http: Optional[AsyncHTTPTransport] = None,
    ) -> Any:
        snapshot = self._holder.get()
        transport = http or self._http
        policy = RetryPolicy.for_error(snapshot, self.error_cls)

        async def operation() -> Any:
            try:
                return await transport.request(
                    method, path, body=body, params=params, files=files, data=form
                )
            except GovernsAIError as e:
                tagged = retag_error(e, self.error_cls)
                if tagged is e:
                    raise
                raise tagged from e

        async with transport.lease():
            return await execute_with_retry(operation, policy, context, sleep=self._sleep)

    def _parse(self, parser: Callable[[Any], Any], data: Any, context: str) -> Any:
        """Build a model from a 2xx body; unexpected content raises ``error_cls``."""
        try:
            return parser(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise self.error_cls(
                f"Unexpected response for {context}: {e}", retryable=False
            ) from e

    async def get_service_status(self) -> ServiceStatus:
        """Probe ``status_path`` once, without retries. Never raises."""
        if not self.status_path:
            return ServiceStatus(available=True)
        start = time.monotonic()
        try:
            await self._http.get(self.status_path)
        except GovernsAIError as e:
            logger.warning("Service status check failed for %s: %s", self.status_path, e)
            return ServiceStatus(available=False, last_error=e.message)
        return ServiceStatus(
            available=True,
            response_time_ms=(time.monotonic() - start) * 1000,
        )
