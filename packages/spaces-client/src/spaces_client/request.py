from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

import httpx
from pydantic import BaseModel


@dataclass(frozen=True)
class RequestBuilder:
    """A fully assembled request that has not been sent yet."""

    method: str
    url: str
    headers: tuple[tuple[str, str], ...] = ()
    params: tuple[tuple[str, str], ...] = ()
    body: Any = None

    def header(self, name: str, value: str) -> "RequestBuilder":
        return replace(self, headers=self.headers + ((name, value),))

    def query(self, name: str, value: str) -> "RequestBuilder":
        return replace(self, params=self.params + ((name, value),))

    def json(self, payload: BaseModel | dict[str, Any]) -> "RequestBuilder":
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json", by_alias=True)
        return replace(self, body=payload)

    def build(self, client: httpx.AsyncClient) -> httpx.Request:
        return client.build_request(
            self.method,
            self.url,
            headers=list(self.headers),
            params=list(self.params) or None,
            json=self.body,
        )


def add_team_params(
    builder: RequestBuilder, team_id: str, team_slug: str | None
) -> RequestBuilder:
    if team_id:
        builder = builder.query("teamId", team_id)
    if team_slug is not None:
        builder = builder.query("slug", team_slug)
    return builder
