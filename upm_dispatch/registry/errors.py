"""Errors raised while reading the Repository Registry."""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for registry errors."""


class RegistryFetchError(RegistryError):
    """Raised when the registry snapshot cannot be obtained.

    Every subclass means the registry state is unknown, which the membership
    resolver treats as "not authorized".
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, url: str, status_code: int) -> RegistryFetchError:
        """Return an error for a non-2xx registry response."""
        return cls(
            f"Failed to fetch repository registry from {url}: HTTP {status_code}",
            status_code=status_code,
        )

    @classmethod
    def timeout(cls, url: str) -> RegistryFetchError:
        """Return an error for a registry request that timed out."""
        return cls(f"Timed out fetching repository registry from {url}")

    @classmethod
    def unreachable(cls, url: str, reason: object) -> RegistryFetchError:
        """Return an error for transport-level failures."""
        return cls(f"Failed to fetch repository registry from {url}: {reason}")


class RegistryDocumentError(RegistryFetchError):
    """Raised when the registry document is malformed."""

    @classmethod
    def invalid(cls, reason: object) -> RegistryDocumentError:
        """Return an error for documents that fail decoding or validation."""
        return cls(f"Invalid repository registry document: {reason}")

    @classmethod
    def duplicate_url(cls, url: str) -> RegistryDocumentError:
        """Return an error for a URL listed more than once."""
        return cls(f"Invalid repository registry document: duplicate url {url}")

    @classmethod
    def invalid_url(cls, url: str) -> RegistryDocumentError:
        """Return an error for a URL outside the canonical form."""
        return cls(
            "Invalid repository registry document: url must match "
            f"https://<host>/<owner>/<name>, got {url!r}"
        )
