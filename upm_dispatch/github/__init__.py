"""GitHub dispatch client for triggering the publish workflow."""

from __future__ import annotations

from .auth import (
    GitHubAppConfig,
    GitHubAppTokenProvider,
    StaticTokenProvider,
    TokenProvider,
    generate_app_jwt,
)
from .client import DispatchClient, GitHubDispatchClient, GitHubDispatchConfig
from .errors import GitHubConfigError, GitHubDispatchError
from .models import (
    DispatchEnvelope,
    DispatchRequest,
    DispatchResult,
    build_dispatch_request,
)

__all__ = [
    "DispatchClient",
    "DispatchEnvelope",
    "DispatchRequest",
    "DispatchResult",
    "GitHubAppConfig",
    "GitHubAppTokenProvider",
    "GitHubConfigError",
    "GitHubDispatchClient",
    "GitHubDispatchConfig",
    "GitHubDispatchError",
    "StaticTokenProvider",
    "TokenProvider",
    "build_dispatch_request",
    "generate_app_jwt",
]
