"""GitHub ``repository_dispatch`` client used to trigger publishing."""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx
import msgspec

from .auth import StaticTokenProvider
from .errors import GitHubDispatchError
from .models import DispatchEnvelope, DispatchResult

if typ.TYPE_CHECKING:
    from .auth import TokenProvider
    from .models import DispatchRequest

_GITHUB_API_VERSION = "2022-11-28"


class DispatchClient(typ.Protocol):
    """Interface for forwarding dispatch requests downstream."""

    async def dispatch(self, request: DispatchRequest) -> DispatchResult:
        """Forward ``request`` once; raise on any non-success."""
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubDispatchConfig:
    """Configuration for the dispatch target."""

    token: str
    target_repository: str
    event_type: str = "package_publish"
    api_url: str = "https://api.github.com"
    timeout_s: float = 10.0
    user_agent: str = "upm-dispatch/0.1"

    @property
    def dispatch_url(self) -> str:
        """Return the ``dispatches`` endpoint of the target repository."""
        return f"{self.api_url.rstrip('/')}/repos/{self.target_repository}/dispatches"


class GitHubDispatchClient:
    """httpx implementation of :class:`DispatchClient`.

    The call is made exactly once. Retrying is left to the webhook sender,
    which redelivers when this service answers with a 5xx.
    """

    def __init__(
        self,
        config: GitHubDispatchConfig,
        *,
        token_provider: TokenProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with the provided configuration.

        Parameters
        ----------
        config
            Dispatch target and transport settings.
        token_provider
            Credential source; defaults to ``config.token`` used as-is.
        http_client
            Shared client; one is created and owned when omitted.

        Raises
        ------
        GitHubConfigError
            If no provider is given and ``config.token`` is blank.

        """
        self._config = config
        self._token_provider = token_provider or StaticTokenProvider(config.token)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def _headers(self) -> dict[str, str]:
        token = await self._token_provider.token()
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": _GITHUB_API_VERSION,
            "User-Agent": self._config.user_agent,
            "Content-Type": "application/json",
        }

    async def dispatch(self, request: DispatchRequest) -> DispatchResult:
        """Send a ``repository_dispatch`` event carrying ``request``."""
        url = self._config.dispatch_url
        headers = await self._headers()
        body = msgspec.json.encode(
            DispatchEnvelope(event_type=self._config.event_type, client_payload=request)
        )
        try:
            response = await self._client.post(url, content=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise GitHubDispatchError.timeout(url) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise GitHubDispatchError.transport(url, exc) from exc

        if not response.is_success:
            raise GitHubDispatchError.http_error(response.status_code, response.text)
        return DispatchResult(status_code=response.status_code)
