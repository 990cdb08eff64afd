"""Registry membership decisions for webhook dispatch.

A repository is authorized to publish only when the registry lists its
canonical URL with status ``active``. Missing, ``pending`` and ``disabled``
entries are all unauthorized; so is a registry that could not be fetched.
The distinct decisions exist for operator logs, not for dispatch logic.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from upm_dispatch.common.slug import DEFAULT_HOST, repository_url

from .errors import RegistryFetchError
from .models import RegistryStatus

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .client import RegistryFetcher
    from .models import RegistrySnapshot


class MembershipDecision(enum.StrEnum):
    """Outcome of a registry membership lookup."""

    AUTHORIZED = "authorized"
    NOT_REGISTERED = "not_registered"
    PENDING = "pending"
    DISABLED = "disabled"
    REGISTRY_UNAVAILABLE = "registry_unavailable"

    @property
    def authorized(self) -> bool:
        """Return True only for :attr:`AUTHORIZED`."""
        return self is MembershipDecision.AUTHORIZED


_STATUS_DECISIONS: dict[RegistryStatus, MembershipDecision] = {
    RegistryStatus.ACTIVE: MembershipDecision.AUTHORIZED,
    RegistryStatus.PENDING: MembershipDecision.PENDING,
    RegistryStatus.DISABLED: MembershipDecision.DISABLED,
}


def resolve_membership(
    full_name: str,
    snapshot: RegistrySnapshot,
    *,
    host: str = DEFAULT_HOST,
) -> MembershipDecision:
    """Decide whether ``full_name`` may publish according to ``snapshot``.

    Parameters
    ----------
    full_name
        Repository slug in ``owner/name`` form.
    snapshot
        Registry snapshot to consult.
    host
        Host used to build the canonical URL.

    Returns
    -------
    MembershipDecision
        Never :attr:`MembershipDecision.REGISTRY_UNAVAILABLE`; that outcome
        belongs to :class:`RegistryMembershipResolver`.

    """
    try:
        url = repository_url(full_name, host=host)
    except ValueError:
        return MembershipDecision.NOT_REGISTERED

    entry = snapshot.get(url)
    if entry is None:
        return MembershipDecision.NOT_REGISTERED
    return _STATUS_DECISIONS[entry.status]


@dataclasses.dataclass(frozen=True, slots=True)
class MembershipResult:
    """Decision plus the context operators need to audit it."""

    decision: MembershipDecision
    repository_url: str
    registry_size: int | None = None
    error: RegistryFetchError | None = None
    status_counts: cabc.Mapping[RegistryStatus, int] | None = None

    @property
    def authorized(self) -> bool:
        """Return whether dispatch may proceed."""
        return self.decision.authorized


class RegistryMembershipResolver:
    """Fetch a fresh snapshot per call and resolve membership against it."""

    def __init__(self, fetcher: RegistryFetcher, *, host: str = DEFAULT_HOST) -> None:
        """Configure the resolver with its snapshot source."""
        self._fetcher = fetcher
        self._host = host

    async def resolve(self, full_name: str) -> MembershipResult:
        """Resolve ``full_name``, treating fetch failures as unauthorized."""
        url = _safe_url(full_name, self._host)
        try:
            snapshot = await self._fetcher.fetch()
        except RegistryFetchError as exc:
            return MembershipResult(
                decision=MembershipDecision.REGISTRY_UNAVAILABLE,
                repository_url=url,
                error=exc,
            )

        return MembershipResult(
            decision=resolve_membership(full_name, snapshot, host=self._host),
            repository_url=url,
            registry_size=len(snapshot),
            status_counts=snapshot.status_counts(),
        )


def _safe_url(full_name: str, host: str) -> str:
    try:
        return repository_url(full_name, host=host)
    except ValueError:
        return full_name
