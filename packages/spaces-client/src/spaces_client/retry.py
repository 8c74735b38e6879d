from __future__ import annotations

import logging

import httpx
from aiolimiter import AsyncLimiter
from pydantic import BaseModel, ConfigDict, Field
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

logger = logging.getLogger(__name__)

# Connection-level failures worth another attempt; protocol and proxy
# misconfiguration are not.
TRANSIENT_ERRORS = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)


class RetryPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    initial_backoff: float = Field(default=2.0, ge=0.0)
    max_backoff: float = Field(default=10.0, ge=0.0)
    jitter: float = Field(default=1.0, ge=0.0)


def is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or (status_code >= 500 and status_code != 501)


def _retryable_response(response: httpx.Response) -> bool:
    return is_retryable_status(response.status_code)


def _last_outcome(retry_state: RetryCallState) -> httpx.Response:
    # Hands back the final response, or re-raises the final exception.
    return retry_state.outcome.result()


async def send_with_retries(
    client: httpx.AsyncClient,
    request: httpx.Request,
    policy: RetryPolicy,
    limiter: AsyncLimiter | None = None,
    *,
    follow_redirects: bool = False,
) -> httpx.Response:
    """Send ``request``, retrying connection failures and transient statuses.

    Returns the first non-retryable response. Once attempts run out the last
    response is returned as-is, or the last transport error is raised.
    """

    async def attempt() -> httpx.Response:
        if limiter is None:
            return await client.send(request, follow_redirects=follow_redirects)
        async with limiter:
            return await client.send(request, follow_redirects=follow_redirects)

    retrying = AsyncRetrying(
        retry=(
            retry_if_exception_type(TRANSIENT_ERRORS)
            | retry_if_result(_retryable_response)
        ),
        wait=(
            wait_exponential(multiplier=policy.initial_backoff, max=policy.max_backoff)
            + wait_random(0, policy.jitter)
        ),
        stop=stop_after_attempt(policy.max_attempts),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        retry_error_callback=_last_outcome,
    )
    return await retrying(attempt)
