"""
GovernsAI SDK - Bounded retry with exponential backoff.

Every feature client routes its transport calls through
``execute_with_retry``; each supplies its own ``RetryPolicy`` built from the
configuration snapshot taken at the start of the call.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Generic, TypeVar, Union

from .exceptions import GovernsAIError

if TYPE_CHECKING:
    from .config import GovernsAIConfig

logger = logging.getLogger("governsai.retry")

T = TypeVar("T")

MAX_RETRY_DELAY_MS = 30000
JITTER_RATIO = 0.1

SleepFn = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry settings for a single operation.

    ``max_attempts`` counts the first try. ``retry_predicate`` decides whether
    a failure may be retried at all.
    """

    max_attempts: int = 3
    base_delay_ms: int = 1000
    retry_predicate: Callable[[BaseException], bool] = lambda error: False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms cannot be negative")

    @classmethod
    def for_error(cls, config: "GovernsAIConfig", error_cls: type) -> "RetryPolicy":
        """Policy that retries only retryable errors of ``error_cls``."""

        def predicate(error: BaseException) -> bool:
            return isinstance(error, error_cls) and error.retryable is True

        return cls(
            max_attempts=max(1, config.max_retries),
            base_delay_ms=config.retry_base_delay_ms,
            retry_predicate=predicate,
        )


def get_retry_delay(
    attempt: int,
    base_delay_ms: int = 1000,
    rng: Callable[[], float] = random.random,
) -> float:
    """
    Delay in milliseconds to wait after failed attempt number ``attempt``.

    ``base * 2^(attempt-1)`` plus up to 10% jitter, capped at 30 seconds.
    """
    exponential = base_delay_ms * (2 ** (attempt - 1))
    jitter = rng() * JITTER_RATIO * exponential
    return min(exponential + jitter, MAX_RETRY_DELAY_MS)


async def execute_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    context: str = "operation",
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """
    Run ``operation`` until it succeeds or the policy gives up.

    A failure the predicate rejects is re-raised untouched. Exhausting
    ``policy.max_attempts`` on retryable failures raises one terminal
    ``GovernsAIError`` that embeds the last underlying message.
    """
    last_error: BaseException = GovernsAIError("Unknown error")

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            last_error = e
            if not policy.retry_predicate(e):
                raise
            if attempt == policy.max_attempts:
                break

            delay_ms = get_retry_delay(attempt, policy.base_delay_ms)
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.0fms: %s",
                context,
                attempt,
                policy.max_attempts,
                delay_ms,
                e,
            )
            await sleep(delay_ms / 1000)

    raise GovernsAIError(
        f"{context} failed after {policy.max_attempts} attempts: "
        f"{str(last_error) or 'Unknown error'}",
        retryable=False,
    ) from last_error


# ==================== Result values ====================


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome; ``retryable`` mirrors the carried error."""

    error: BaseException

    @property
    def ok(self) -> bool:
        return False

    @property
    def retryable(self) -> bool:
        return isinstance(self.error, GovernsAIError) and self.error.retryable is True

    def unwrap(self) -> Any:
        raise self.error


Result = Union[Ok[T], Err]


async def attempt_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    context: str = "operation",
    sleep: SleepFn = asyncio.sleep,
) -> "Result[T]":
    """Like ``execute_with_retry`` but returns ``Ok``/``Err`` for SDK errors."""
    try:
        return Ok(await execute_with_retry(operation, policy, context, sleep))
    except GovernsAIError as e:
        return Err(e)
