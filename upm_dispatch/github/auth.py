"""Credentials for the ``repository_dispatch`` call.

Two providers are available. :class:`StaticTokenProvider` returns a
configured token unchanged. :class:`GitHubAppTokenProvider` authenticates as
a GitHub App: it signs a short-lived RS256 app JWT, finds the App's
installation on the configured account and mints an installation access
token for each dispatch.

Usage
-----
>>> provider = StaticTokenProvider("ghs_example")
>>> # token = await provider.token()

"""

from __future__ import annotations

import dataclasses
import time
import typing as typ

import httpx
import jwt
import msgspec

from .errors import GitHubConfigError, GitHubDispatchError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_GITHUB_API_VERSION = "2022-11-28"
# Backdated to tolerate clock drift between this host and GitHub.
_JWT_BACKDATE_S = 60
_JWT_LIFETIME_S = 600


class TokenProvider(typ.Protocol):
    """Source of bearer tokens for GitHub API calls."""

    async def token(self) -> str:
        """Return a token valid for the next request.

        Raises
        ------
        GitHubDispatchError
            If a token cannot be obtained.

        """
        ...


class StaticTokenProvider:
    """Return a fixed token, typically a personal access token."""

    def __init__(self, token: str) -> None:
        """Store ``token``, rejecting blank values."""
        if not token.strip():
            raise GitHubConfigError.empty_token()
        self._token = token

    async def token(self) -> str:
        """Return the configured token."""
        return self._token


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubAppConfig:
    """GitHub App identity and the account whose installation is used.

    Attributes
    ----------
    app_id
        Numeric GitHub App id, sent as the JWT ``iss`` claim.
    private_key
        PEM-encoded RSA private key of the App.
    installation_owner
        Login of the organisation or user the App is installed on.
    api_url
        GitHub REST API base URL.
    timeout_s
        Timeout applied to each token request.
    user_agent
        ``User-Agent`` header sent with token requests.

    """

    app_id: int
    private_key: str
    installation_owner: str
    api_url: str = "https://api.github.com"
    timeout_s: float = 10.0
    user_agent: str = "upm-dispatch/0.1"


class _InstallationAccount(msgspec.Struct, kw_only=True):
    login: str


class _Installation(msgspec.Struct, kw_only=True):
    id: int
    account: _InstallationAccount | None = None


class _AccessToken(msgspec.Struct, kw_only=True):
    token: str
    expires_at: str | None = None


def generate_app_jwt(
    app_id: int, private_key: str, *, now: float | None = None
) -> str:
    """Sign the RS256 JWT that authenticates as the GitHub App itself.

    Parameters
    ----------
    app_id
        GitHub App id.
    private_key
        PEM-encoded RSA private key.
    now
        Current Unix time; defaults to :func:`time.time`.

    Returns
    -------
    str
        Encoded JWT valid for ten minutes.

    Raises
    ------
    GitHubDispatchError
        If the key cannot be used to sign.

    """
    issued = int(now if now is not None else time.time())
    claims = {
        "iat": issued - _JWT_BACKDATE_S,
        "exp": issued + _JWT_LIFETIME_S,
        "iss": str(app_id),
    }
    try:
        return jwt.encode(claims, private_key, algorithm="RS256")
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise GitHubDispatchError.app_auth(exc) from exc


class GitHubAppTokenProvider:
    """Mint installation access tokens for a GitHub App.

    A new token is minted for every call; installation tokens live for an
    hour and dispatches are infrequent.
    """

    def __init__(
        self,
        config: GitHubAppConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        clock: cabc.Callable[[], float] = time.time,
    ) -> None:
        """Initialise the provider with the App configuration."""
        if not config.private_key.strip():
            msg = "GitHub App private key must be non-empty"
            raise GitHubConfigError(msg)

        self._config = config
        self._clock = clock
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    def _headers(self, app_jwt: str) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {app_jwt}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": _GITHUB_API_VERSION,
            "User-Agent": self._config.user_agent,
        }

    async def _request(
        self, method: str, url: str, headers: dict[str, str]
    ) -> httpx.Response:
        try:
            return await self._client.request(method, url, headers=headers)
        except httpx.TimeoutException as exc:
            raise GitHubDispatchError.timeout(url) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise GitHubDispatchError.transport(url, exc) from exc

    async def _installation_id(self, headers: dict[str, str]) -> int:
        url = f"{self._config.api_url.rstrip('/')}/app/installations"
        response = await self._request("GET", url, headers)
        if not response.is_success:
            raise GitHubDispatchError.installations_failed(
                response.status_code, response.text
            )
        try:
            installations = msgspec.json.decode(
                response.content, type=list[_Installation]
            )
        except msgspec.DecodeError as exc:
            raise GitHubDispatchError.app_auth(exc) from exc

        owner = self._config.installation_owner
        for installation in installations:
            if installation.account is not None and installation.account.login == owner:
                return installation.id
        raise GitHubDispatchError.installation_missing(owner)

    async def token(self) -> str:
        """Return a fresh installation access token."""
        app_jwt = generate_app_jwt(
            self._config.app_id, self._config.private_key, now=self._clock()
        )
        headers = self._headers(app_jwt)
        installation_id = await self._installation_id(headers)

        url = (
            f"{self._config.api_url.rstrip('/')}/app/installations/"
            f"{installation_id}/access_tokens"
        )
        response = await self._request("POST", url, headers)
        if not response.is_success:
            raise GitHubDispatchError.token_mint_failed(
                response.status_code, response.text
            )
        try:
            access = msgspec.json.decode(response.content, type=_AccessToken)
        except msgspec.DecodeError as exc:
            raise GitHubDispatchError.app_auth(exc) from exc
        return access.token
