"""Lifespan middleware closing outbound HTTP clients.

The registry fetcher and dispatch client each hold an ``httpx.AsyncClient``.
Falcon calls ``process_shutdown`` once when the ASGI server stops; this
middleware closes every registered client there so connections are
released cleanly.

Usage
-----
Register the middleware when creating the Falcon app::

    lifespan = HTTPClientLifespan([fetcher, dispatch_client])
    app = falcon.asgi.App(middleware=[lifespan])

"""

from __future__ import annotations

import typing as typ

import httpx

from upm_dispatch.logging import get_logger, log_exception

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = ["HTTPClientLifespan", "SupportsAclose"]

logger = get_logger(__name__)


class SupportsAclose(typ.Protocol):
    """Object owning async resources released by ``aclose``."""

    async def aclose(self) -> None:
        """Release owned resources."""
        ...


class HTTPClientLifespan:
    """Falcon middleware closing HTTP clients on ASGI shutdown.

    Parameters
    ----------
    closeables
        Clients to close, in order.

    """

    def __init__(self, closeables: cabc.Iterable[SupportsAclose]) -> None:
        """Store the clients to close on shutdown."""
        self._closeables = tuple(closeables)

    async def process_startup(self, _scope: object, _event: object) -> None:
        """Nothing to open; clients connect lazily."""

    async def process_shutdown(self, _scope: object, _event: object) -> None:
        """Close every client, continuing past transport errors.

        Parameters
        ----------
        _scope
            ASGI lifespan scope (unused).
        _event
            ASGI lifespan event (unused).

        """
        for closeable in self._closeables:
            try:
                await closeable.aclose()
            except httpx.HTTPError as exc:
                log_exception(
                    logger,
                    f"Failed to close {type(closeable).__name__} during shutdown",
                    exc,
                )
