"""Falcon error handlers for dispatcher failures.

Filtering decisions never reach these handlers; they are ordinary 200
responses. Only failures that leave the delivery unprocessed are mapped
here, all to HTTP 500 so GitHub records the delivery as failed.

Usage
-----
Register error handlers on the Falcon app::

    app.add_error_handler(WebhookPayloadError, handle_payload_error)
    app.add_error_handler(GitHubDispatchError, handle_dispatch_error)

"""

from __future__ import annotations

import typing as typ

import falcon

from upm_dispatch.github.errors import GitHubDispatchError
from upm_dispatch.webhook.errors import WebhookPayloadError

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "GitHubDispatchError",
    "WebhookPayloadError",
    "handle_dispatch_error",
    "handle_payload_error",
]


async def handle_payload_error(
    _req: Request,
    resp: Response,
    ex: WebhookPayloadError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``WebhookPayloadError`` to an HTTP 500 JSON response.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The decoding failure.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_500
    resp.media = {"message": "Malformed payload", "error": str(ex)}


async def handle_dispatch_error(
    _req: Request,
    resp: Response,
    ex: GitHubDispatchError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``GitHubDispatchError`` to an HTTP 500 JSON response.

    The upstream status code is included when the failure was an HTTP
    response rather than a transport error.
    """
    resp.status = falcon.HTTP_500
    media: dict[str, typ.Any] = {"message": "Dispatch failed", "error": str(ex)}
    if ex.status_code is not None:
        media["status_code"] = ex.status_code
    resp.media = media
