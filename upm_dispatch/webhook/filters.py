"""Relevance filtering for authenticated webhook events.

A push is package-relevant when any changed path has the manifest filename
as its final segment. Suffix or substring matches do not count:
``sub/dir/package.json`` matches, ``mypackage.json`` and
``package.json.bak`` do not.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from .models import PUSH_EVENT

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import InboundEvent

DEFAULT_MANIFEST_FILENAME = "package.json"


class FilterOutcome(enum.StrEnum):
    """Result of the relevance filter."""

    ACCEPTED = "accepted"
    UNSUPPORTED_EVENT = "unsupported_event"
    NO_MANIFEST_CHANGE = "no_manifest_change"


@dataclasses.dataclass(frozen=True, slots=True)
class FilterDecision:
    """Filter outcome with the manifest paths that triggered acceptance."""

    outcome: FilterOutcome
    manifest_paths: tuple[str, ...] = ()

    @property
    def accepted(self) -> bool:
        """Return whether the event should proceed to the registry check."""
        return self.outcome is FilterOutcome.ACCEPTED


def is_push_event(event_kind: str | None) -> bool:
    """Return whether ``event_kind`` names a push delivery."""
    return event_kind == PUSH_EVENT


def is_manifest_path(path: str, manifest: str = DEFAULT_MANIFEST_FILENAME) -> bool:
    """Return whether the last segment of ``path`` is exactly ``manifest``."""
    return path.rsplit("/", 1)[-1] == manifest


def manifest_paths(
    paths: cabc.Iterable[str], manifest: str = DEFAULT_MANIFEST_FILENAME
) -> tuple[str, ...]:
    """Return the sorted subset of ``paths`` that are manifest files."""
    return tuple(sorted(path for path in paths if is_manifest_path(path, manifest)))


def evaluate_event(
    event: InboundEvent, manifest: str = DEFAULT_MANIFEST_FILENAME
) -> FilterDecision:
    """Classify ``event`` as accepted, an unsupported kind, or irrelevant."""
    if not is_push_event(event.event_kind):
        return FilterDecision(FilterOutcome.UNSUPPORTED_EVENT)

    matched = manifest_paths(event.changed_file_paths, manifest)
    if not matched:
        return FilterDecision(FilterOutcome.NO_MANIFEST_CHANGE)
    return FilterDecision(FilterOutcome.ACCEPTED, manifest_paths=matched)
