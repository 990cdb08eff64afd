"""Runtime entrypoint for the webhook dispatcher.

``upm_dispatch.runtime:create_app`` is the Granian factory target. When
``UPM_DISPATCH_WEBHOOK_SECRET`` is set, the runtime reads the full
:class:`~upm_dispatch.webhook.config.DispatcherConfig` and mounts the
webhook receiver. Otherwise it starts in health-only mode.

Configuration is driven by environment variables:

- ``UPM_DISPATCH_HOST``: Bind address (default ``0.0.0.0``)
- ``UPM_DISPATCH_PORT``: Listen port (default ``8080``)
- ``UPM_DISPATCH_LOG_LEVEL``: Log level (default ``INFO``)
- ``UPM_DISPATCH_WEBHOOK_SECRET`` and the other ``UPM_DISPATCH_*``
  dispatcher settings documented on ``DispatcherConfig.from_env``.

Run the service directly with ``python -m upm_dispatch.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from upm_dispatch.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid UPM_DISPATCH_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def create_app() -> falcon.asgi.App:
    """Create the ASGI application from the environment.

    Returns
    -------
    falcon.asgi.App
        App with the webhook receiver when a webhook secret is configured,
        health endpoints only otherwise.

    Raises
    ------
    DispatcherConfigError
        If the webhook secret is set but other required settings are not.

    """
    from upm_dispatch.api.app import create_app as _create_api_app

    if not os.environ.get("UPM_DISPATCH_WEBHOOK_SECRET", "").strip():
        log_warning(
            logger,
            "UPM_DISPATCH_WEBHOOK_SECRET is not set; starting in health-only mode",
        )
        return _create_api_app()

    from upm_dispatch.api.app import AppDependencies
    from upm_dispatch.api.factory import build_webhook_dispatcher
    from upm_dispatch.webhook.config import DispatcherConfig

    config = DispatcherConfig.from_env()
    dispatcher, closeables = build_webhook_dispatcher(config)
    log_info(
        logger,
        "Webhook receiver enabled (target=%s event_type=%s manifest=%s auth=%s)",
        config.target_repository,
        config.event_type,
        config.manifest_filename,
        "github_app" if config.uses_github_app else "token",
    )
    return _create_api_app(
        AppDependencies(dispatcher=dispatcher, closeables=closeables)
    )


def main() -> None:
    """Start the dispatcher using Granian.

    Reads ``UPM_DISPATCH_HOST``, ``UPM_DISPATCH_PORT`` and
    ``UPM_DISPATCH_LOG_LEVEL`` from the environment and starts the ASGI
    server.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("UPM_DISPATCH_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("UPM_DISPATCH_PORT", "8080"))
    log_level_str = os.environ.get("UPM_DISPATCH_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid UPM_DISPATCH_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting upm-dispatch on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "upm_dispatch.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
