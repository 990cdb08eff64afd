"""Application factory for the dispatcher Falcon ASGI application.

Usage
-----
Create a health-only app (no dispatcher configured)::

    app = create_app()

Create a full app with the webhook endpoint::

    from upm_dispatch.api.app import AppDependencies, create_app

    deps = AppDependencies(dispatcher=dispatcher, closeables=clients)
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from upm_dispatch.api.errors import (
    GitHubDispatchError,
    WebhookPayloadError,
    handle_dispatch_error,
    handle_payload_error,
)
from upm_dispatch.api.health.resources import HealthResource, ReadyResource

if typ.TYPE_CHECKING:
    from upm_dispatch.api.middleware import SupportsAclose
    from upm_dispatch.webhook.service import WebhookDispatcher

__all__ = ["WEBHOOK_ROUTE", "AppDependencies", "create_app"]

WEBHOOK_ROUTE = "/webhook"


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    dispatcher
        Webhook dispatcher; when ``None`` only health endpoints exist.
    closeables
        HTTP clients closed on ASGI shutdown.

    """

    dispatcher: WebhookDispatcher | None = None
    closeables: tuple[SupportsAclose, ...] = ()


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    When *dependencies* provides a dispatcher the app mounts
    ``POST /webhook``; ``/health`` and ``/ready`` are always available.

    Parameters
    ----------
    dependencies
        Optional application dependencies.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    dispatcher = dependencies.dispatcher if dependencies is not None else None
    middleware: list[object] = []

    if dependencies is not None and dependencies.closeables:
        from upm_dispatch.api.middleware import HTTPClientLifespan

        middleware.append(HTTPClientLifespan(dependencies.closeables))

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(webhook_enabled=dispatcher is not None))

    if dispatcher is not None:
        from upm_dispatch.api.webhook.resources import WebhookResource

        app.add_route(WEBHOOK_ROUTE, WebhookResource(dispatcher))

    app.add_error_handler(WebhookPayloadError, handle_payload_error)
    app.add_error_handler(GitHubDispatchError, handle_dispatch_error)

    return app
