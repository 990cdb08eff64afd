"""Read-through access to the externally hosted registry document."""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx

from .errors import RegistryFetchError
from .models import RegistrySnapshot, decode_registry_document

# Registry edits must be visible on the next delivery.
_NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
}


class RegistryFetcher(typ.Protocol):
    """Source of registry snapshots."""

    async def fetch(self) -> RegistrySnapshot:
        """Return the current registry snapshot.

        Raises
        ------
        RegistryFetchError
            If the snapshot cannot be fetched or decoded.

        """
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class RegistryFetcherConfig:
    """Location and transport settings for the registry document."""

    url: str
    timeout_s: float = 10.0
    user_agent: str = "upm-dispatch/0.1"


class HttpRegistryFetcher:
    """httpx implementation of :class:`RegistryFetcher`.

    Every call issues a fresh GET; nothing is cached between requests.
    """

    def __init__(
        self,
        config: RegistryFetcherConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the fetcher with its configuration."""
        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout_s,
            headers={"User-Agent": config.user_agent, "Accept": "application/json"},
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self) -> RegistrySnapshot:
        """Download and decode the registry document."""
        url = self._config.url
        try:
            response = await self._client.get(url, headers=_NO_CACHE_HEADERS)
        except httpx.TimeoutException as exc:
            raise RegistryFetchError.timeout(url) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RegistryFetchError.unreachable(url, exc) from exc

        if not response.is_success:
            raise RegistryFetchError.http_error(url, response.status_code)
        return decode_registry_document(response.content)
