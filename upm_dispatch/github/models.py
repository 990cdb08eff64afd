"""Dispatch payloads sent to the publish workflow."""

from __future__ import annotations

import dataclasses
import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    from upm_dispatch.webhook.models import InboundEvent

_BRANCH_PREFIX = "refs/heads/"


class DispatchRequest(msgspec.Struct, kw_only=True, frozen=True):
    """Normalized ``client_payload`` for the publish workflow.

    Attributes
    ----------
    repository : str
        Source repository slug.
    commit_sha : str
        Head commit of the push.
    commit_message : str
        Head commit message.
    commit_author : str
        Pusher identity.
    branch : str
        Branch name without the ``refs/heads/`` prefix.
    package_path : str
        Empty string asks the workflow to detect changed packages itself.

    """

    repository: str
    commit_sha: str
    commit_message: str
    commit_author: str
    branch: str
    package_path: str = ""


class DispatchEnvelope(msgspec.Struct, kw_only=True):
    """Body of ``POST /repos/{owner}/{repo}/dispatches``."""

    event_type: str
    client_payload: DispatchRequest


@dataclasses.dataclass(frozen=True, slots=True)
class DispatchResult:
    """Accepted dispatch as reported back to the webhook sender."""

    status_code: int
    dispatched: bool = True

    def as_dict(self) -> dict[str, typ.Any]:
        """Return a JSON-ready representation."""
        return {"status": self.status_code, "dispatched": self.dispatched}


def build_dispatch_request(event: InboundEvent) -> DispatchRequest:
    """Build the dispatch payload for an authorized push."""
    return DispatchRequest(
        repository=event.repository_full_name,
        commit_sha=event.head_commit_id,
        commit_message=event.head_commit_message,
        commit_author=event.pusher_identity,
        branch=event.branch_ref.removeprefix(_BRANCH_PREFIX),
        package_path="",
    )
