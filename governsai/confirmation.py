"""
GovernsAI SDK - Human approval workflow.

A confirmation is created server-side and moves from ``pending`` to exactly
one terminal status. The client observes it through a single polling loop
that backs ``watch_confirmation`` (async iterator), ``poll_confirmation``
(callback) and ``wait_for_approval`` (single outcome).
"""

import inspect
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Callable, Optional, Union

from .base import FeatureClient
from .exceptions import (
    ConfirmationError,
    ConfirmationRejectedError,
    GovernsAIError,
    PollTimeoutError,
    extract_error_details,
)
from .models import (
    TERMINAL_STATUSES,
    ConfirmationRecord,
    ConfirmationRequest,
    ConfirmationStatus,
    RequestType,
)

logger = logging.getLogger("governsai.confirmation")

DEFAULT_POLL_INTERVAL_MS = 2000
DEFAULT_POLL_TIMEOUT_MS = 300000

StatusCallback = Callable[..., Any]


@dataclass
class PollSession:
    """Client-local state of one polling run."""

    correlation_id: str
    start_time: float
    interval_ms: int
    timeout_ms: int
    last_observed_status: Optional[ConfirmationStatus] = None

    def elapsed_ms(self, now: float) -> float:
        return (now - self.start_time) * 1000

    def expired(self, now: float) -> bool:
        return self.elapsed_ms(now) >= self.timeout_ms

    def timeout_error(self) -> PollTimeoutError:
        last = self.last_observed_status.value if self.last_observed_status else None
        return PollTimeoutError(
            f"Confirmation polling for {self.correlation_id} timed out after "
            f"{self.timeout_ms}ms (last status: {last or 'unknown'})",
            correlation_id=self.correlation_id,
            last_status=last,
            timeout_ms=self.timeout_ms,
        )


# ==================== Batch outcomes ====================


@dataclass(frozen=True)
class Resolved:
    """The confirmation reached a terminal status."""

    record: ConfirmationRecord

    @property
    def status(self) -> ConfirmationStatus:
        return self.record.status


@dataclass(frozen=True)
class TimedOut:
    """The shared deadline passed while the confirmation was still open."""

    last_status: Optional[ConfirmationStatus] = None


@dataclass(frozen=True)
class Failed:
    """Fetching the confirmation failed with a non-retryable error."""

    error: GovernsAIError


PollOutcome = Union[Resolved, TimedOut, Failed]


def is_final_status(status: Union[str, ConfirmationStatus]) -> bool:
    """True for approved, denied, expired and cancelled."""
    try:
        return ConfirmationStatus(status) in TERMINAL_STATUSES
    except ValueError:
        return False


async def _notify(callback: Optional[StatusCallback], *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class ConfirmationClient(FeatureClient):
    """
    Client for confirmation workflows.

    Example:
        ```python
        request = confirmations.tool_call_confirmation(corr_id, "payment_process", args)
        await confirmations.create_confirmation(request)
        record = await confirmations.wait_for_approval(corr_id, timeout_ms=60000)
        ```
    """

    error_cls = ConfirmationError
    status_path = "/api/v1/confirmation"

    def __init__(self, http, config, sleep=None, clock: Optional[Callable[[], float]] = None):
        super().__init__(http, config, sleep)
        self._clock = clock or time.monotonic

    # ==================== Single confirmation ====================

    async def create_confirmation(
        self, request: Union[ConfirmationRequest, dict[str, Any]]
    ) -> ConfirmationRecord:
        """Create a confirmation; the returned record is usually ``pending``."""
        body = request.to_dict() if isinstance(request, ConfirmationRequest) else request
        logger.debug("Creating confirmation %s", body.get("correlationId"))
        data = await self._request(
            "POST", "/api/v1/confirmation/create", "create confirmation", body=body
        )
        record = self._parse(ConfirmationRecord.from_dict, data, "create confirmation")
        logger.info(
            "Confirmation created: %s (status=%s)", record.correlation_id, record.status.value
        )
        return record

    async def get_confirmation_status(self, correlation_id: str) -> ConfirmationRecord:
        """Fetch the current record for ``correlation_id``."""
        data = await self._request(
            "GET",
            f"/api/v1/confirmation/{correlation_id}",
            "get confirmation status",
        )
        return self._parse(ConfirmationRecord.from_dict, data, "get confirmation status")

    async def approve_confirmation(self, correlation_id: str) -> None:
        await self._request(
            "POST",
            f"/api/v1/confirmation/{correlation_id}/approve",
            "approve confirmation",
        )
        logger.info("Confirmation approved: %s", correlation_id)

    async def cancel_confirmation(self, correlation_id: str) -> None:
        await self._request(
            "POST",
            "/api/v1/confirmation/cancel",
            "cancel confirmation",
            body={"correlationId": correlation_id},
        )
        logger.info("Confirmation cancelled: %s", correlation_id)

    # ==================== Observation loop ====================

    async def watch_confirmation(
        self,
        correlation_id: str,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS,
        lenient: bool = True,
    ) -> AsyncIterator[ConfirmationRecord]:
        """
        Yield every observed record until one is terminal.

        The deadline is checked before each fetch and raises
        ``PollTimeoutError`` once reached. A non-retryable
        ``ConfirmationError`` always propagates. With ``lenient`` set, any
        other fetch failure is logged and the next fetch happens one interval
        later; otherwise it propagates too.

        Example:
            ```python
            async for record in confirmations.watch_confirmation(corr_id):
                print(record.status)
            ```
        """
        session = PollSession(
            correlation_id=correlation_id,
            start_time=self._clock(),
            interval_ms=interval_ms,
            timeout_ms=timeout_ms,
        )
        logger.debug(
            "Polling confirmation %s every %dms (timeout %dms)",
            correlation_id,
            interval_ms,
            timeout_ms,
        )

        while True:
            if session.expired(self._clock()):
                raise session.timeout_error()

            try:
                record = await self.get_confirmation_status(correlation_id)
            except ConfirmationError as e:
                if not e.retryable or not lenient:
                    raise
                logger.warning("Error polling confirmation %s: %s", correlation_id, e)
            except Exception as e:
                if not lenient:
                    raise
                logger.warning("Error polling confirmation %s: %s", correlation_id, e)
            else:
                session.last_observed_status = record.status
                yield record
                if record.is_terminal:
                    logger.info(
                        "Confirmation %s reached final status %s",
                        correlation_id,
                        record.status.value,
                    )
                    return

            await self._sleep(interval_ms / 1000)

    async def poll_confirmation(
        self,
        correlation_id: str,
        callback: StatusCallback,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS,
    ) -> ConfirmationRecord:
        """
        Invoke ``callback(status)`` for each observed status.

        Returns the terminal record. ``callback`` may be a coroutine function.
        """
        last: Optional[ConfirmationRecord] = None
        async for record in self.watch_confirmation(correlation_id, interval_ms, timeout_ms):
            await _notify(callback, record.status)
            last = record
        return last

    async def wait_for_approval(
        self,
        correlation_id: str,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS,
        on_status_change: Optional[StatusCallback] = None,
    ) -> ConfirmationRecord:
        """
        Wait until the confirmation is approved.

        Raises:
            ConfirmationRejectedError: another terminal status was reached.
            PollTimeoutError: the deadline passed first.
        """
        last: Optional[ConfirmationRecord] = None
        async for record in self.watch_confirmation(
            correlation_id, interval_ms, timeout_ms, lenient=False
        ):
            await _notify(on_status_change, record.status)
            last = record

        if last is None or not last.is_approved:
            status = last.status.value if last else "unknown"
            raise ConfirmationRejectedError(
                f"Confirmation was {status} instead of approved",
                status=status,
                record=last,
            )
        return last

    # ==================== Batch operations ====================

    async def create_batch_confirmations(
        self, requests: list[Union[ConfirmationRequest, dict[str, Any]]]
    ) -> list[ConfirmationRecord]:
        """
        Create confirmations one by one.

        A failed item does not stop the batch; its slot holds a record with
        status ``error`` and the failure as its reason.
        """
        results: list[ConfirmationRecord] = []
        for request in requests:
            if not isinstance(request, ConfirmationRequest):
                request = ConfirmationRequest.from_dict(request)
            try:
                results.append(await self.create_confirmation(request))
            except Exception as e:
                logger.error(
                    "Batch confirmation creation failed for %s: %s", request.correlation_id, e
                )
                now = datetime.now(timezone.utc)
                results.append(
                    ConfirmationRecord(
                        id="",
                        correlation_id=request.correlation_id,
                        status=ConfirmationStatus.ERROR,
                        request_type=getattr(request.request_type, "value", request.request_type),
                        request_desc=request.request_desc,
                        request_payload=request.request_payload,
                        decision="error",
                        reasons=[
                            f"Confirmation creation failed: {extract_error_details(e)['message']}"
                        ],
                        created_at=now,
                        expires_at=now,
                    )
                )
        return results

    async def poll_batch_confirmations(
        self,
        correlation_ids: list[str],
        callback: Optional[StatusCallback] = None,
        interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        timeout_ms: int = DEFAULT_POLL_TIMEOUT_MS,
    ) -> dict[str, PollOutcome]:
        """
        Poll several confirmations under one shared deadline.

        Every id gets an outcome: ``Resolved`` once terminal, ``Failed`` on a
        non-retryable confirmation error, ``TimedOut`` if still open at the
        deadline. Resolved and failed ids are not fetched again.
        """
        outcomes: dict[str, PollOutcome] = {}
        last_seen: dict[str, ConfirmationStatus] = {}
        start = self._clock()

        while True:
            pending = [cid for cid in dict.fromkeys(correlation_ids) if cid not in outcomes]
            if not pending:
                break
            if (self._clock() - start) * 1000 >= timeout_ms:
                for cid in pending:
                    outcomes[cid] = TimedOut(last_seen.get(cid))
                logger.warning(
                    "Batch confirmation polling timed out with %d pending", len(pending)
                )
                break

            for cid in pending:
                try:
                    record = await self.get_confirmation_status(cid)
                except ConfirmationError as e:
                    if e.retryable:
                        logger.error("Error polling confirmation %s: %s", cid, e)
                        continue
                    outcomes[cid] = Failed(e)
                    logger.error("Polling confirmation %s failed: %s", cid, e)
                    continue
                except Exception as e:
                    logger.error("Error polling confirmation %s: %s", cid, e)
                    continue

                last_seen[cid] = record.status
                await _notify(callback, cid, record.status)
                if record.is_terminal:
                    outcomes[cid] = Resolved(record)

            if all(cid in outcomes for cid in correlation_ids):
                break
            await self._sleep(interval_ms / 1000)

        return {cid: outcomes[cid] for cid in dict.fromkeys(correlation_ids)}

    # ==================== Helpers ====================

    @staticmethod
    def is_final_status(status: Union[str, ConfirmationStatus]) -> bool:
        return is_final_status(status)

    def confirmation_url(self, correlation_id: str) -> str:
        """Link a human can open to approve or deny ``correlation_id``."""
        return f"{self.config.base_url.rstrip('/')}/confirm/{correlation_id}"

    @staticmethod
    def tool_call_confirmation(
        correlation_id: str,
        tool_name: str,
        args: dict[str, Any],
        reasons: Optional[list[str]] = None,
    ) -> ConfirmationRequest:
        return ConfirmationRequest(
            correlation_id=correlation_id,
            request_type=RequestType.TOOL_CALL,
            request_desc=f"Execute tool: {tool_name}",
            request_payload={"tool": tool_name, "args": args},
            decision="confirm",
            reasons=reasons or ["High risk operation"],
        )

    @staticmethod
    def chat_confirmation(
        correlation_id: str,
        message_count: int,
        provider: str,
        reasons: Optional[list[str]] = None,
    ) -> ConfirmationRequest:
        return ConfirmationRequest(
            correlation_id=correlation_id,
            request_type=RequestType.CHAT,
            request_desc=f"Chat request with {message_count} message(s) using {provider}",
            request_payload={"messageCount": message_count, "provider": provider},
            decision="confirm",
            reasons=reasons or ["Sensitive content detected"],
        )

    @staticmethod
    def mcp_confirmation(
        correlation_id: str,
        tool_name: str,
        args: dict[str, Any],
        reasons: Optional[list[str]] = None,
    ) -> ConfirmationRequest:
        return ConfirmationRequest(
            correlation_id=correlation_id,
            request_type=RequestType.MCP,
            request_desc=f"MCP call: {tool_name}",
            request_payload={"tool": tool_name, "args": args},
            decision="confirm",
            reasons=reasons or ["External tool access"],
        )
