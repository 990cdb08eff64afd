"""Typed webhook payloads and the per-request inbound event.

Only the fields the dispatcher reads are declared; msgspec ignores the rest
of GitHub's push payload. Field names mirror the wire format so a typo fails
decoding instead of silently producing an empty value.
"""

from __future__ import annotations

import dataclasses
import typing as typ

import msgspec

from .errors import WebhookPayloadError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

PUSH_EVENT = "push"
_UNKNOWN_AUTHOR = "unknown"
_NO_MESSAGE = "No message"


class PushRepository(msgspec.Struct, kw_only=True):
    """``repository`` object of a push payload."""

    full_name: str


class PushPusher(msgspec.Struct, kw_only=True):
    """``pusher`` object of a push payload."""

    name: str | None = None


class PushSender(msgspec.Struct, kw_only=True):
    """``sender`` object of a push payload."""

    login: str | None = None


class PushHeadCommit(msgspec.Struct, kw_only=True):
    """``head_commit`` object of a push payload."""

    message: str | None = None


class PushCommit(msgspec.Struct, kw_only=True):
    """One entry of ``commits`` with the paths it touched."""

    id: str | None = None
    added: list[str] = msgspec.field(default_factory=list)
    modified: list[str] = msgspec.field(default_factory=list)
    removed: list[str] = msgspec.field(default_factory=list)


class PushPayload(msgspec.Struct, kw_only=True):
    """Subset of the GitHub push webhook body used for dispatch routing.

    Attributes
    ----------
    repository : PushRepository
        Source repository; ``full_name`` is the registry join key.
    after : str
        Commit id at the head of the ref after the push.
    ref : str
        Full ref name, e.g. ``refs/heads/main``.
    commits : list[PushCommit]
        Commits carried by the push; empty for branch deletions.
    pusher : PushPusher, optional
        Identity of the pusher.
    sender : PushSender, optional
        Account that triggered the event.
    head_commit : PushHeadCommit, optional
        Head commit summary; ``null`` for deletions.

    """

    repository: PushRepository
    after: str
    ref: str
    commits: list[PushCommit] = msgspec.field(default_factory=list)
    pusher: PushPusher | None = None
    sender: PushSender | None = None
    head_commit: PushHeadCommit | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class WebhookHeaders:
    """Delivery headers consulted before the body is trusted."""

    event_kind: str | None = None
    signature: str | None = None
    delivery_id: str | None = None


@dataclasses.dataclass(frozen=True, slots=True)
class InboundEvent:
    """Authenticated push event, built fresh for each delivery."""

    delivery_id: str
    event_kind: str
    repository_full_name: str
    pusher_identity: str
    head_commit_id: str
    head_commit_message: str
    branch_ref: str
    changed_file_paths: frozenset[str] = frozenset()


def changed_file_paths(commits: cabc.Iterable[PushCommit]) -> frozenset[str]:
    """Return the union of added, modified and removed paths."""
    paths: set[str] = set()
    for commit in commits:
        paths.update(commit.added)
        paths.update(commit.modified)
        paths.update(commit.removed)
    return frozenset(paths)


def _pusher_identity(payload: PushPayload) -> str:
    if payload.pusher is not None and payload.pusher.name:
        return payload.pusher.name
    if payload.sender is not None and payload.sender.login:
        return payload.sender.login
    return _UNKNOWN_AUTHOR


def decode_push_payload(body: bytes) -> PushPayload:
    """Decode a raw push body.

    Raises
    ------
    WebhookPayloadError
        If ``body`` is not JSON or lacks required push fields.

    """
    try:
        return msgspec.json.decode(body, type=PushPayload)
    except msgspec.DecodeError as exc:
        raise WebhookPayloadError.invalid(exc) from exc


def build_inbound_event(payload: PushPayload, headers: WebhookHeaders) -> InboundEvent:
    """Normalize a decoded push payload into an :class:`InboundEvent`."""
    head_message = payload.head_commit.message if payload.head_commit else None
    return InboundEvent(
        delivery_id=headers.delivery_id or "",
        event_kind=headers.event_kind or "",
        repository_full_name=payload.repository.full_name,
        pusher_identity=_pusher_identity(payload),
        head_commit_id=payload.after,
        head_commit_message=head_message or _NO_MESSAGE,
        branch_ref=payload.ref,
        changed_file_paths=changed_file_paths(payload.commits),
    )
