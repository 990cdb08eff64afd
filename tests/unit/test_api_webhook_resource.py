"""Unit tests for the POST /webhook resource."""

from __future__ import annotations

import json
from http import HTTPStatus

import falcon.testing
import httpx
import pytest

from tests.helpers.webhook_builders import (
    REPO,
    FakeRegistryFetcher,
    RecordingDispatchClient,
    build_dispatcher,
    commit,
    encode,
    push_payload,
    signed_headers,
)
from upm_dispatch.api.app import AppDependencies, create_app
from upm_dispatch.github.client import GitHubDispatchClient, GitHubDispatchConfig
from upm_dispatch.github.errors import GitHubDispatchError
from upm_dispatch.registry.resolver import RegistryMembershipResolver
from upm_dispatch.webhook.service import WebhookDispatcher, WebhookDispatcherDependencies


def _client(
    secret: str, fetcher: FakeRegistryFetcher, dispatch: RecordingDispatchClient
) -> falcon.testing.TestClient:
    dispatcher = build_dispatcher(secret, fetcher, dispatch)
    return falcon.testing.TestClient(create_app(AppDependencies(dispatcher=dispatcher)))


@pytest.fixture
def client(
    webhook_secret: str,
    active_fetcher: FakeRegistryFetcher,
    dispatch_client: RecordingDispatchClient,
) -> falcon.testing.TestClient:
    """Return a client whose registry lists the test repository as active."""
    return _client(webhook_secret, active_fetcher, dispatch_client)


def test_signature_covers_raw_bytes(
    client: falcon.testing.TestClient,
    webhook_secret: str,
    dispatch_client: RecordingDispatchClient,
) -> None:
    """Re-serialising the JSON invalidates the signature."""
    body = encode(push_payload())
    headers = signed_headers(body, webhook_secret)
    pretty = json.dumps(json.loads(body), indent=2).encode()

    result = client.simulate_post("/webhook", body=pretty, headers=headers)

    assert result.status_code == HTTPStatus.UNAUTHORIZED
    assert result.json == {"message": "Invalid signature"}
    assert dispatch_client.requests == []


def test_missing_headers_are_unauthorized(client: falcon.testing.TestClient) -> None:
    """Deliveries without a signature header are rejected."""
    result = client.simulate_post("/webhook", body=encode(push_payload()))
    assert result.status_code == HTTPStatus.UNAUTHORIZED


def test_ping_is_acknowledged(
    client: falcon.testing.TestClient, webhook_secret: str
) -> None:
    """The webhook setup ping answers 200."""
    body = b'{"zen":"Design for failure.","hook_id":1}'
    result = client.simulate_post(
        "/webhook", body=body, headers=signed_headers(body, webhook_secret, event="ping")
    )
    assert result.status_code == HTTPStatus.OK
    assert result.json == {"message": "Event type not handled", "event": "ping"}


def test_bare_hex_signature_is_accepted(
    client: falcon.testing.TestClient,
    webhook_secret: str,
    dispatch_client: RecordingDispatchClient,
) -> None:
    """Signatures without the sha256= prefix are still verified."""
    body = encode(push_payload())
    headers = signed_headers(body, webhook_secret)
    headers["X-Hub-Signature-256"] = headers["X-Hub-Signature-256"].removeprefix(
        "sha256="
    )

    result = client.simulate_post("/webhook", body=body, headers=headers)

    assert result.status_code == HTTPStatus.OK
    assert len(dispatch_client.requests) == 1


def test_no_manifest_change(
    client: falcon.testing.TestClient, webhook_secret: str
) -> None:
    """Pushes without manifest edits answer 200 without dispatching."""
    body = encode(push_payload(commits=[commit(modified=["Assets/Scripts/A.cs"])]))
    result = client.simulate_post(
        "/webhook", body=body, headers=signed_headers(body, webhook_secret)
    )
    assert result.status_code == HTTPStatus.OK
    assert result.json == {"message": "No package.json changes", "repository": REPO}


def test_signed_malformed_push_is_500(
    client: falcon.testing.TestClient, webhook_secret: str
) -> None:
    """A signed push that cannot be decoded is a server-side failure."""
    body = b"[]"
    result = client.simulate_post(
        "/webhook", body=body, headers=signed_headers(body, webhook_secret)
    )
    assert result.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert result.json["message"] == "Malformed payload"


def test_dispatch_failure_is_500(
    webhook_secret: str, active_fetcher: FakeRegistryFetcher
) -> None:
    """A rejected dispatch surfaces the upstream status."""
    dispatch = RecordingDispatchClient(
        error=GitHubDispatchError.http_error(422, "Unprocessable Entity")
    )
    body = encode(push_payload())

    result = _client(webhook_secret, active_fetcher, dispatch).simulate_post(
        "/webhook", body=body, headers=signed_headers(body, webhook_secret)
    )

    assert result.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert result.json["message"] == "Dispatch failed"
    assert result.json["status_code"] == 422


class _UninstalledApp:
    """Token provider for a GitHub App missing from the target account."""

    async def token(self) -> str:
        """Fail as GitHub does when no installation matches."""
        raise GitHubDispatchError.installation_missing("The1Studio")


def test_token_mint_failure_is_500(
    webhook_secret: str, active_fetcher: FakeRegistryFetcher
) -> None:
    """An installation token that cannot be minted fails the delivery."""
    sent: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        return httpx.Response(204)

    dispatch_client = GitHubDispatchClient(
        GitHubDispatchConfig(token="", target_repository="The1Studio/Publisher"),
        token_provider=_UninstalledApp(),
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    dispatcher = WebhookDispatcher(
        WebhookDispatcherDependencies(
            webhook_secret=webhook_secret,
            membership_resolver=RegistryMembershipResolver(active_fetcher),
            dispatch_client=dispatch_client,
        )
    )
    client = falcon.testing.TestClient(
        create_app(AppDependencies(dispatcher=dispatcher))
    )
    body = encode(push_payload())

    result = client.simulate_post(
        "/webhook", body=body, headers=signed_headers(body, webhook_secret)
    )

    assert result.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert result.json["message"] == "Dispatch failed"
    assert sent == []
