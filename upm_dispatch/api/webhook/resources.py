"""Webhook receiver resource.

``POST /webhook`` reads the raw body, hands it to the dispatcher together
with the GitHub delivery headers and renders the outcome as JSON. Other
methods receive Falcon's 405 because no other responders are defined.

Usage
-----
Register the resource on the Falcon app::

    app.add_route("/webhook", WebhookResource(dispatcher))

"""

from __future__ import annotations

import typing as typ

from upm_dispatch.webhook.models import WebhookHeaders

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from upm_dispatch.webhook.service import WebhookDispatcher

__all__ = ["WebhookResource"]

EVENT_HEADER = "X-GitHub-Event"
SIGNATURE_HEADER = "X-Hub-Signature-256"
DELIVERY_HEADER = "X-GitHub-Delivery"


def _read_headers(req: Request) -> WebhookHeaders:
    return WebhookHeaders(
        event_kind=req.get_header(EVENT_HEADER),
        signature=req.get_header(SIGNATURE_HEADER),
        delivery_id=req.get_header(DELIVERY_HEADER),
    )


class WebhookResource:
    """Receive GitHub webhook deliveries."""

    def __init__(self, dispatcher: WebhookDispatcher) -> None:
        """Configure the resource with the dispatcher that routes deliveries."""
        self._dispatcher = dispatcher

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /webhook.

        The body is read as bytes and never parsed here; the signature must
        be checked against the exact bytes GitHub signed.

        Parameters
        ----------
        req
            Falcon request carrying the delivery.
        resp
            Falcon response populated from the dispatcher outcome.

        """
        body = await req.stream.read()
        outcome = await self._dispatcher.handle(body, _read_headers(req))
        resp.status = outcome.status
        resp.media = outcome.body
