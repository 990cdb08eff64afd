"""Factory for building a WebhookDispatcher from configuration.

Usage
-----
Build the dispatcher and the clients the app must close on shutdown::

    from upm_dispatch.api.factory import build_webhook_dispatcher

    dispatcher, closeables = build_webhook_dispatcher(DispatcherConfig.from_env())

"""

from __future__ import annotations

import typing as typ

from upm_dispatch.github.auth import (
    GitHubAppConfig,
    GitHubAppTokenProvider,
    StaticTokenProvider,
)
from upm_dispatch.github.client import GitHubDispatchClient, GitHubDispatchConfig
from upm_dispatch.registry.client import HttpRegistryFetcher, RegistryFetcherConfig
from upm_dispatch.registry.resolver import RegistryMembershipResolver
from upm_dispatch.webhook.observability import WebhookEventLogger
from upm_dispatch.webhook.service import (
    WebhookDispatcher,
    WebhookDispatcherDependencies,
)

if typ.TYPE_CHECKING:
    from upm_dispatch.api.middleware import SupportsAclose
    from upm_dispatch.webhook.config import DispatcherConfig

__all__ = ["build_webhook_dispatcher"]


def _token_provider(
    config: DispatcherConfig,
) -> GitHubAppTokenProvider | StaticTokenProvider:
    if (
        config.github_app_id is None
        or config.github_app_private_key is None
        or config.github_app_installation_owner is None
    ):
        return StaticTokenProvider(config.github_token)
    return GitHubAppTokenProvider(
        GitHubAppConfig(
            app_id=config.github_app_id,
            private_key=config.github_app_private_key,
            installation_owner=config.github_app_installation_owner,
            api_url=config.api_url,
            timeout_s=config.timeout_s,
        )
    )


def build_webhook_dispatcher(
    config: DispatcherConfig,
) -> tuple[WebhookDispatcher, tuple[SupportsAclose, ...]]:
    """Build a ``WebhookDispatcher`` wired to live HTTP collaborators.

    Dispatch authenticates as a GitHub App when App credentials are
    configured and with the static token otherwise.

    Parameters
    ----------
    config
        Dispatcher configuration, usually from ``DispatcherConfig.from_env``.

    Returns
    -------
    tuple[WebhookDispatcher, tuple[SupportsAclose, ...]]
        The dispatcher and the HTTP clients it owns.

    """
    fetcher = HttpRegistryFetcher(
        RegistryFetcherConfig(url=config.registry_url, timeout_s=config.timeout_s)
    )
    token_provider = _token_provider(config)
    dispatch_client = GitHubDispatchClient(
        GitHubDispatchConfig(
            token=config.github_token,
            target_repository=config.target_repository,
            event_type=config.event_type,
            api_url=config.api_url,
            timeout_s=config.timeout_s,
        ),
        token_provider=token_provider,
    )
    dependencies = WebhookDispatcherDependencies(
        webhook_secret=config.webhook_secret,
        membership_resolver=RegistryMembershipResolver(
            fetcher, host=config.registry_host
        ),
        dispatch_client=dispatch_client,
    )
    dispatcher = WebhookDispatcher(
        dependencies,
        manifest_filename=config.manifest_filename,
        event_logger=WebhookEventLogger(),
    )
    closeables: tuple[SupportsAclose, ...] = (fetcher, dispatch_client)
    if isinstance(token_provider, GitHubAppTokenProvider):
        closeables = (*closeables, token_provider)
    return dispatcher, closeables
