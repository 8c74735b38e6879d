import json

import httpx
import pytest

from spaces_client.auth import APIAuth
from spaces_client.client import SpacesClient
from spaces_client.request import RequestBuilder, add_team_params


def test_no_team_params_for_empty_context():
    builder = add_team_params(RequestBuilder("POST", "https://x/y"), "", None)
    assert builder.params == ()


def test_both_team_params_present():
    builder = add_team_params(RequestBuilder("POST", "https://x/y"), "team_1", "acme")
    assert dict(builder.params) == {"teamId": "team_1", "slug": "acme"}


def test_builder_is_immutable():
    base = RequestBuilder("GET", "https://x/y")
    with_header = base.header("Content-Type", "application/json")
    assert base.headers == ()
    assert with_header.headers == (("Content-Type", "application/json"),)


@pytest.mark.asyncio
async def test_assembly_without_preflight_issues_no_requests():
    def handler(request):
        raise AssertionError(f"Unexpected request: {request.method} {request.url}")

    client = SpacesClient(
        "https://api.example.com/",
        transport=httpx.MockTransport(handler),
        ci_constant=lambda: "CIRCLE",
    )
    async with client:
        builder = await client._create_request_builder(
            "/v0/spaces/s/runs", APIAuth(token="tok"), "POST"
        )
        request = builder.json({"a": 1}).build(client._client)

    assert builder.url == "https://api.example.com/v0/spaces/s/runs"
    assert dict(builder.headers) == {
        "Content-Type": "application/json",
        "Authorization": "Bearer tok",
        "x-artifact-client-ci": "CIRCLE",
    }
    assert request.headers["User-Agent"].startswith("spaces-client ")
    assert json.loads(request.content) == {"a": 1}
