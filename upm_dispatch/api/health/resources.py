"""Liveness and readiness probes.

Neither probe touches the registry or GitHub; they report process state
only, so an upstream outage never makes the pod look unhealthy.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health requests."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe reporting whether webhook routing is configured.

    A health-only app is still ready; ``webhook`` tells operators whether
    deliveries will be processed.
    """

    def __init__(self, *, webhook_enabled: bool = False) -> None:
        """Record whether the webhook route is mounted."""
        self._webhook_enabled = webhook_enabled

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready requests.

        Parameters
        ----------
        _req
            Falcon request (unused).
        resp
            Falcon response populated with readiness status.

        """
        resp.media = {"status": "ready", "webhook": self._webhook_enabled}
        resp.status = HTTPStatus.OK
