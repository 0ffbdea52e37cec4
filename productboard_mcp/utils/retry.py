"""Bounded retry loop with exponential backoff.

Only failures that carry an `ErrorKind` are candidates for a retry, and only
when the policy's predicate accepts that kind. Whatever failure ends the loop
is re-raised as-is, so retry exhaustion never changes the error a caller sees.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from productboard_mcp.api.errors import ErrorKind, is_retryable_kind
from productboard_mcp.core.logging import logger

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    initial_delay: float = 1.0  # seconds
    max_delay: float = 30.0  # seconds
    retry_predicate: Callable[[ErrorKind], bool] = field(default=is_retryable_kind)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay <= 0:
            raise ValueError("RetryPolicy.initial_delay must be > 0")
        if self.max_delay < self.initial_delay:
            raise ValueError("RetryPolicy.max_delay must be >= initial_delay")

    def delay_for(self, attempt: int) -> float:
        """Delay between attempt `attempt` and `attempt + 1` (1-based)."""
        return min(self.initial_delay * (2 ** (attempt - 1)), self.max_delay)


def kind_of(error: BaseException) -> Optional[ErrorKind]:
    kind = getattr(error, "kind", None)
    return kind if isinstance(kind, ErrorKind) else None


class RetryHandler:
    """Runs an async attempt under a `RetryPolicy`."""

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        *,
        sleep: SleepFunc = asyncio.sleep,
        classify: Callable[[BaseException], Optional[ErrorKind]] = kind_of,
    ):
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._classify = classify
        # attempts of whichever call finished last; concurrent calls overwrite
        # each other. Failed calls also carry their own count on `error.attempts`.
        self.last_attempts = 0

    async def with_retries(
        self,
        attempt: Callable[[], Awaitable[T]],
        policy: Optional[RetryPolicy] = None,
    ) -> T:
        policy = policy or self.policy
        attempts = 0

        while True:
            attempts += 1
            try:
                result = await attempt()
            except Exception as e:
                kind = self._classify(e)
                retry = (
                    kind is not None
                    and attempts < policy.max_attempts
                    and policy.retry_predicate(kind)
                )
                if not retry:
                    self.last_attempts = attempts
                    _stamp_attempts(e, attempts)
                    if kind is not None and policy.retry_predicate(kind):
                        logger.warning(
                            "Giving up after {} attempt(s): {} ({})", attempts, e, kind.value
                        )
                    raise

                delay = policy.delay_for(attempts)
                logger.warning(
                    "Retryable error on attempt {}/{}: {} ({}). Waiting {:.2f}s...",
                    attempts,
                    policy.max_attempts,
                    e,
                    kind.value,
                    delay,
                )
                await self._sleep(delay)
                continue

            self.last_attempts = attempts
            return result


def _stamp_attempts(error: Any, attempts: int) -> None:
    if hasattr(error, "attempts"):
        error.attempts = attempts
