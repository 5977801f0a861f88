from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from app.chat.throttle import Sleep, Throttler
from app.core.llm.hf_client import InferenceRateLimitedError
from app.core.metrics import inference_calls_total, inference_retries_total

logger = logging.getLogger("app.chat")

T = TypeVar("T")


@dataclass(frozen=True)
class BackoffPolicy:
    max_retries: int = 3
    base_delay_seconds: float = 1.0

    def delay_for(self, attempt: int) -> float:
        """Wait before retry number `attempt + 1`: base, 2*base, 4*base, ..."""
        return self.base_delay_seconds * (2**attempt)


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T
    attempts: int


@dataclass(frozen=True)
class Exhausted:
    last_error: InferenceRateLimitedError
    attempts: int


RetryResult = Success[T] | Exhausted


async def call_with_backoff(
    call: Callable[[], Awaitable[T]],
    *,
    throttler: Throttler,
    policy: BackoffPolicy,
    sleep: Sleep = asyncio.sleep,
    request_id: str | None = None,
) -> RetryResult[T]:
    """
    Run `call` through the cooldown gate, retrying only on rate limits.

    Every attempt (retries included) passes the throttler. Errors other than
    `InferenceRateLimitedError` propagate on the first occurrence.
    """

    attempt = 0
    while True:
        await throttler.wait_turn()
        try:
            value = await call()
        except InferenceRateLimitedError as exc:
            inference_calls_total.labels(outcome="rate_limited").inc()
            if attempt >= policy.max_retries:
                logger.warning(
                    "Inference rate limit persisted; giving up",
                    extra={"request_id": request_id, "attempt": attempt + 1},
                )
                return Exhausted(last_error=exc, attempts=attempt + 1)

            delay = policy.delay_for(attempt)
            logger.warning(
                "Rate limited. Waiting %.0fms before retry %d/%d",
                delay * 1000,
                attempt + 1,
                policy.max_retries,
                extra={"request_id": request_id, "attempt": attempt + 1, "wait_seconds": delay},
            )
            inference_retries_total.inc()
            await sleep(delay)
            attempt += 1
            continue
        except Exception:
            inference_calls_total.labels(outcome="error").inc()
            raise

        inference_calls_total.labels(outcome="success").inc()
        return Success(value=value, attempts=attempt + 1)
