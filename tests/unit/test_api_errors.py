"""Unit tests for upm_dispatch.api.errors handlers."""

from __future__ import annotations

from http import HTTPStatus

import falcon
import falcon.asgi
import falcon.testing
import pytest

from upm_dispatch.api.errors import handle_dispatch_error, handle_payload_error
from upm_dispatch.github.errors import GitHubDispatchError
from upm_dispatch.webhook.errors import WebhookPayloadError


class _RaisingResource:
    """Resource that raises a configured exception."""

    def __init__(self, error: Exception) -> None:
        self._error = error

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        """Raise the configured error."""
        raise self._error


def _client(error: Exception) -> falcon.testing.TestClient:
    app = falcon.asgi.App()
    app.add_route("/boom", _RaisingResource(error))
    app.add_error_handler(WebhookPayloadError, handle_payload_error)
    app.add_error_handler(GitHubDispatchError, handle_dispatch_error)
    return falcon.testing.TestClient(app)


def test_payload_error_maps_to_500() -> None:
    """Malformed payloads answer 500 with the decoding error."""
    result = _client(WebhookPayloadError.invalid("expected object")).simulate_post(
        "/boom"
    )
    assert result.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert result.json["message"] == "Malformed payload"
    assert "expected object" in result.json["error"]


def test_dispatch_http_error_includes_status_code() -> None:
    """Upstream rejections echo the upstream status."""
    error = GitHubDispatchError.http_error(403, "Resource not accessible")
    result = _client(error).simulate_post("/boom")
    assert result.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert result.json == {
        "message": "Dispatch failed",
        "error": "Failed to trigger workflow: 403 - Resource not accessible",
        "status_code": 403,
    }


@pytest.mark.parametrize(
    "error",
    [
        GitHubDispatchError.timeout("https://api.github.com/repos/a/b/dispatches"),
        GitHubDispatchError.transport("https://api.github.com", "refused"),
    ],
)
def test_dispatch_transport_error_omits_status_code(
    error: GitHubDispatchError,
) -> None:
    """Transport failures have no upstream status to report."""
    result = _client(error).simulate_post("/boom")
    assert result.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
    assert result.json["message"] == "Dispatch failed"
    assert "status_code" not in result.json
