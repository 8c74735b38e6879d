from __future__ import annotations

import logging
from typing import Callable

import httpx
from aiolimiter import AsyncLimiter
from pydantic import BaseModel

from . import __version__
from .auth import APIAuth
from .ci import get_constant
from .config import DEFAULT_API_URL, SpacesSettings
from .errors import DeserializationError, RemoteRejected, TransportError
from .models import CreateSpaceRunPayload, FinishSpaceRunPayload, SpaceRun, SpaceTaskSummary
from .preflight import PreflightVerdict, negotiate
from .request import RequestBuilder, add_team_params
from .retry import RetryPolicy, send_with_retries

logger = logging.getLogger(__name__)

CI_HEADER = "x-artifact-client-ci"


class SpacesClient:
    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        use_preflight: bool = False,
        retry_policy: RetryPolicy | None = None,
        retry_preflight: bool = False,
        limiter: AsyncLimiter | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        ci_constant: Callable[[], str | None] = get_constant,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.use_preflight = use_preflight
        self.retry_preflight = retry_preflight
        self._retry_policy = retry_policy or RetryPolicy()
        self._limiter = limiter or AsyncLimiter(8, 1)
        self._ci_constant = ci_constant
        self._client = httpx.AsyncClient(
            headers={"User-Agent": f"spaces-client {__version__}"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: SpacesSettings, **kwargs) -> "SpacesClient":
        kwargs.setdefault("retry_policy", RetryPolicy(max_attempts=settings.max_attempts))
        kwargs.setdefault("use_preflight", settings.use_preflight)
        kwargs.setdefault("retry_preflight", settings.retry_preflight)
        kwargs.setdefault("timeout", settings.timeout)
        return cls(settings.api_url, **kwargs)

    async def __aenter__(self) -> "SpacesClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def make_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    async def _create_request_builder(
        self, path: str, auth: APIAuth, method: str
    ) -> RequestBuilder:
        """Assemble a request with preflight, team params and CI header applied."""
        url = self.make_url(path)

        if self.use_preflight:
            verdict = await negotiate(
                self._client,
                auth.token,
                url,
                method,
                policy=self._retry_policy if self.retry_preflight else None,
                limiter=self._limiter,
            )
        else:
            verdict = PreflightVerdict.default(url)

        builder = RequestBuilder(method=method, url=verdict.location).header(
            "Content-Type", "application/json"
        )

        if verdict.allow_authorization_header:
            builder = builder.header("Authorization", f"Bearer {auth.token}")
        else:
            logger.debug("Preflight disallowed Authorization for %s", verdict.location)

        builder = add_team_params(builder, auth.team_id, auth.team_slug)

        ci_constant = self._ci_constant()
        if ci_constant:
            builder = builder.header(CI_HEADER, ci_constant)

        return builder

    async def _submit(
        self,
        path: str,
        auth: APIAuth,
        method: str,
        body: BaseModel | None = None,
    ) -> httpx.Response:
        builder = await self._create_request_builder(path, auth, method)
        if body is not None:
            builder = builder.json(body)
        request = builder.build(self._client)
        logger.debug("%s %s", request.method, request.url)

        try:
            response = await send_with_retries(
                self._client, request, self._retry_policy, self._limiter
            )
        except httpx.HTTPError as exc:
            raise TransportError(
                f"{method} {builder.url} failed: {str(exc) or type(exc).__name__}"
            ) from exc

        if not response.is_success:
            raise RemoteRejected(response.status_code, response.text)
        return response

    async def create_run(
        self, space_id: str, auth: APIAuth, payload: CreateSpaceRunPayload
    ) -> SpaceRun:
        response = await self._submit(f"/v0/spaces/{space_id}/runs", auth, "POST", payload)
        try:
            return SpaceRun.model_validate(response.json())
        except ValueError as exc:
            raise DeserializationError(str(exc), response.text) from exc

    async def report_task(
        self, space_id: str, run_id: str, auth: APIAuth, task: SpaceTaskSummary
    ) -> None:
        await self._submit(f"/v0/spaces/{space_id}/runs/{run_id}/tasks", auth, "POST", task)

    async def finish_run(
        self,
        space_id: str,
        run_id: str,
        auth: APIAuth,
        end_time: int,
        exit_code: int,
    ) -> None:
        payload = FinishSpaceRunPayload.new(end_time, exit_code)
        await self._submit(f"/v0/spaces/{space_id}/runs/{run_id}", auth, "PATCH", payload)
