from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import httpx
from aiolimiter import AsyncLimiter

from .errors import PreflightError
from .retry import RetryPolicy, send_with_retries

logger = logging.getLogger(__name__)

PREFLIGHT_REQUEST_HEADERS = "Authorization, User-Agent"

_AUTHORIZATION_RE = re.compile(r"(?:^|,) *(?:authorization|\*) *(?:,|$)", re.IGNORECASE)

# A single attempt: probe failures are fatal unless the client opts in to retries.
_NO_RETRY = RetryPolicy(max_attempts=1, initial_backoff=0.0, max_backoff=0.0, jitter=0.0)


@dataclass(frozen=True)
class PreflightVerdict:
    allow_authorization_header: bool
    location: str

    @classmethod
    def default(cls, url: str) -> "PreflightVerdict":
        return cls(allow_authorization_header=True, location=url)


def allows_authorization(allowed_headers: str) -> bool:
    return bool(_AUTHORIZATION_RE.search(allowed_headers))


async def negotiate(
    client: httpx.AsyncClient,
    token: str,
    url: str,
    method: str,
    requested_headers: str = PREFLIGHT_REQUEST_HEADERS,
    *,
    policy: RetryPolicy | None = None,
    limiter: AsyncLimiter | None = None,
) -> PreflightVerdict:
    """Probe ``url`` with a CORS preflight for ``method``.

    Redirects are followed, so the verdict's location is either the
    ``Location`` header of the final response or the URL it was served from.
    """
    request = client.build_request(
        "OPTIONS",
        url,
        headers={
            "Access-Control-Request-Method": method,
            "Access-Control-Request-Headers": requested_headers,
            "Authorization": f"Bearer {token}",
        },
    )
    try:
        response = await send_with_retries(
            client,
            request,
            policy or _NO_RETRY,
            limiter,
            follow_redirects=True,
        )
    except httpx.HTTPError as exc:
        raise PreflightError(url, str(exc) or type(exc).__name__) from exc

    if not response.is_success:
        raise PreflightError(url, f"status {response.status_code}")

    location_header = response.headers.get("Location")
    if location_header:
        try:
            location = str(response.url.join(location_header))
        except httpx.InvalidURL as exc:
            raise PreflightError(url, f"invalid Location {location_header!r}") from exc
    else:
        location = str(response.url)

    verdict = PreflightVerdict(
        allow_authorization_header=allows_authorization(
            response.headers.get("Access-Control-Allow-Headers", "")
        ),
        location=location,
    )
    logger.debug(
        "Preflight %s %s -> location=%s allow_auth=%s",
        method,
        url,
        verdict.location,
        verdict.allow_authorization_header,
    )
    return verdict
