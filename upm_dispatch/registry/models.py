"""Typed Repository Registry structures.

The registry is an externally hosted JSON document::

    {
      "repositories": [
        {"name": "UITemplate", "url": "https://github.com/The1Studio/UITemplate",
         "status": "active", "packages": [{"name": "com.theone.ui", "path": "Assets/UI"}]}
      ]
    }

It is decoded with msgspec and indexed by URL into a :class:`RegistrySnapshot`.
"""

from __future__ import annotations

import collections
import dataclasses
import enum
import re
import typing as typ

import msgspec

from .errors import RegistryDocumentError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_REPOSITORY_URL_PATTERN = re.compile(r"^https://[^/\s]+/[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


class RegistryStatus(enum.StrEnum):
    """Participation state of a registered repository."""

    ACTIVE = "active"
    PENDING = "pending"
    DISABLED = "disabled"


class RegistryPackage(msgspec.Struct, kw_only=True, frozen=True):
    """Package published from a registered repository.

    Attributes
    ----------
    name : str
        Package identifier, e.g. ``com.theone.ui``.
    path : str, optional
        Directory holding the package manifest.

    """

    name: str
    path: str | None = None


class RegistryEntry(msgspec.Struct, kw_only=True, frozen=True):
    """One repository row of the registry document.

    Attributes
    ----------
    url : str
        Canonical ``https://<host>/<owner>/<name>`` URL; the lookup key.
    status : RegistryStatus
        Only ``active`` entries authorize dispatch.
    name : str, optional
        Display name carried by the document.
    packages : tuple[RegistryPackage, ...]
        Packages the repository publishes.

    """

    url: str
    status: RegistryStatus
    name: str | None = None
    packages: tuple[RegistryPackage, ...] = ()


class RegistryDocument(msgspec.Struct, kw_only=True):
    """Top-level registry document."""

    repositories: list[RegistryEntry] = msgspec.field(default_factory=list)


@dataclasses.dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """Immutable view of the registry keyed by repository URL."""

    entries: cabc.Mapping[str, RegistryEntry] = dataclasses.field(
        default_factory=dict
    )

    @classmethod
    def from_entries(cls, entries: cabc.Iterable[RegistryEntry]) -> RegistrySnapshot:
        """Index entries by URL, rejecting malformed or duplicate URLs.

        Raises
        ------
        RegistryDocumentError
            If a URL is not canonical or appears more than once.

        """
        indexed: dict[str, RegistryEntry] = {}
        for entry in entries:
            if not _REPOSITORY_URL_PATTERN.fullmatch(entry.url):
                raise RegistryDocumentError.invalid_url(entry.url)
            if entry.url in indexed:
                raise RegistryDocumentError.duplicate_url(entry.url)
            indexed[entry.url] = entry
        return cls(entries=indexed)

    def get(self, url: str) -> RegistryEntry | None:
        """Return the entry stored under ``url``, if any."""
        return self.entries.get(url)

    def status_counts(self) -> dict[RegistryStatus, int]:
        """Return how many entries are in each status."""
        counts = collections.Counter(entry.status for entry in self.entries.values())
        return {status: counts.get(status, 0) for status in RegistryStatus}

    def __len__(self) -> int:
        """Return the number of registered repositories."""
        return len(self.entries)


def decode_registry_document(raw: bytes | str) -> RegistrySnapshot:
    """Decode a JSON registry document into a snapshot.

    Raises
    ------
    RegistryDocumentError
        If the body is not JSON, does not match the schema, or breaks the
        unique-URL invariant.

    """
    try:
        document = msgspec.json.decode(raw, type=RegistryDocument)
    except msgspec.DecodeError as exc:
        raise RegistryDocumentError.invalid(exc) from exc
    return RegistrySnapshot.from_entries(document.repositories)
