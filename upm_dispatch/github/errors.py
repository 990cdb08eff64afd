"""GitHub dispatch errors."""

from __future__ import annotations

# Bodies are echoed into logs and HTTP responses; keep them short.
_MAX_BODY_CHARS = 500


class GitHubDispatchError(RuntimeError):
    """Raised when the ``repository_dispatch`` call does not succeed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        """Initialise with a message and the upstream response details."""
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, body: str) -> GitHubDispatchError:
        """Return an error for a non-2xx dispatch response."""
        trimmed = body[:_MAX_BODY_CHARS]
        return cls(
            f"Failed to trigger workflow: {status_code} - {trimmed}",
            status_code=status_code,
            response_body=trimmed,
        )

    @classmethod
    def timeout(cls, url: str) -> GitHubDispatchError:
        """Return an error for a dispatch request that timed out."""
        return cls(f"Timed out triggering workflow at {url}")

    @classmethod
    def transport(cls, url: str, reason: object) -> GitHubDispatchError:
        """Return an error for transport-level failures."""
        return cls(f"Failed to reach {url}: {reason}")

    @classmethod
    def installations_failed(cls, status_code: int, body: str) -> GitHubDispatchError:
        """Return an error for a failed GitHub App installation lookup."""
        trimmed = body[:_MAX_BODY_CHARS]
        return cls(
            f"Failed to fetch installations: {status_code} - {trimmed}",
            status_code=status_code,
            response_body=trimmed,
        )

    @classmethod
    def installation_missing(cls, owner: str) -> GitHubDispatchError:
        """Return an error when the App is not installed on ``owner``."""
        return cls(f"GitHub App not installed on {owner}")

    @classmethod
    def token_mint_failed(cls, status_code: int, body: str) -> GitHubDispatchError:
        """Return an error for a rejected installation token request."""
        trimmed = body[:_MAX_BODY_CHARS]
        return cls(
            f"Failed to create installation token: {status_code} - {trimmed}",
            status_code=status_code,
            response_body=trimmed,
        )

    @classmethod
    def app_auth(cls, reason: object) -> GitHubDispatchError:
        """Return an error for unusable App credentials or responses."""
        return cls(f"GitHub App authentication failed: {reason}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub client configuration is invalid."""

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")
