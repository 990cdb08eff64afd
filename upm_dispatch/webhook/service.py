"""Webhook dispatcher: the gate sequence between a delivery and a publish.

Gates run strictly in order and each one must pass before the next starts:

1. signature verification over the raw body,
2. event kind (``push`` only),
3. payload decoding and the manifest-file filter,
4. registry membership (fresh fetch),
5. a single ``repository_dispatch`` call.

Filtering decisions answer 200 so GitHub does not redeliver them. Bad
signatures answer 401. An unreachable registry answers 500 without
dispatching, which lets GitHub redeliver once the registry recovers.
Malformed payloads and dispatch failures are raised to the HTTP layer.
"""

from __future__ import annotations

import dataclasses as dc
import enum
import typing as typ
from http import HTTPStatus

from upm_dispatch.common.slug import short_sha
from upm_dispatch.github.errors import GitHubDispatchError
from upm_dispatch.github.models import build_dispatch_request

from .errors import WebhookPayloadError
from .filters import DEFAULT_MANIFEST_FILENAME, evaluate_event, is_push_event
from .models import build_inbound_event, decode_push_payload
from .observability import WebhookEventLogger
from .signature import verify_signature

if typ.TYPE_CHECKING:
    from upm_dispatch.github.client import DispatchClient
    from upm_dispatch.registry.resolver import RegistryMembershipResolver

    from .models import InboundEvent, WebhookHeaders

__all__ = [
    "OutcomeKind",
    "WebhookDispatcher",
    "WebhookDispatcherDependencies",
    "WebhookOutcome",
]


class OutcomeKind(enum.StrEnum):
    """Terminal decision reached for a delivery."""

    UNAUTHORIZED = "unauthorized"
    IGNORED_EVENT = "ignored_event"
    NO_MANIFEST_CHANGE = "no_manifest_change"
    NOT_REGISTERED = "not_registered"
    REGISTRY_UNAVAILABLE = "registry_unavailable"
    DISPATCHED = "dispatched"


@dc.dataclass(frozen=True, slots=True)
class WebhookOutcome:
    """HTTP-ready result of handling one delivery."""

    kind: OutcomeKind
    status: HTTPStatus
    body: dict[str, typ.Any]


@dc.dataclass(frozen=True, slots=True)
class WebhookDispatcherDependencies:
    """Collaborators required by :class:`WebhookDispatcher`.

    Attributes
    ----------
    webhook_secret
        Shared HMAC secret for signature verification.
    membership_resolver
        Registry lookup, re-fetched on every call.
    dispatch_client
        Downstream ``repository_dispatch`` trigger.

    """

    webhook_secret: str
    membership_resolver: RegistryMembershipResolver
    dispatch_client: DispatchClient


class WebhookDispatcher:
    """Route authenticated push deliveries to the publish workflow.

    The dispatcher holds no per-request state, so concurrent deliveries need
    no coordination.
    """

    def __init__(
        self,
        dependencies: WebhookDispatcherDependencies,
        *,
        manifest_filename: str = DEFAULT_MANIFEST_FILENAME,
        event_logger: WebhookEventLogger | None = None,
    ) -> None:
        """Configure the dispatcher.

        Parameters
        ----------
        dependencies
            Grouped collaborators.
        manifest_filename
            Basename whose change marks a push as package-relevant.
        event_logger
            Decision logger; a default instance is created when omitted.

        """
        self._secret = dependencies.webhook_secret
        self._resolver = dependencies.membership_resolver
        self._dispatch_client = dependencies.dispatch_client
        self._manifest = manifest_filename
        self._event_logger = event_logger or WebhookEventLogger()

    async def handle(self, body: bytes, headers: WebhookHeaders) -> WebhookOutcome:
        """Run the gate sequence for one delivery.

        Parameters
        ----------
        body
            Raw request body exactly as received.
        headers
            Event kind, signature and delivery id headers.

        Returns
        -------
        WebhookOutcome
            Decision with its HTTP status and JSON body.

        Raises
        ------
        WebhookPayloadError
            If a signed push body cannot be decoded.
        GitHubDispatchError
            If the publish workflow rejects or never receives the dispatch.

        """
        if not verify_signature(body, headers.signature, self._secret):
            self._event_logger.log_signature_rejected(
                delivery_id=headers.delivery_id,
                event_kind=headers.event_kind,
                has_signature=bool(headers.signature),
            )
            return WebhookOutcome(
                OutcomeKind.UNAUTHORIZED,
                HTTPStatus.UNAUTHORIZED,
                {"message": "Invalid signature"},
            )

        if not is_push_event(headers.event_kind):
            self._event_logger.log_event_ignored(
                delivery_id=headers.delivery_id, event_kind=headers.event_kind
            )
            return WebhookOutcome(
                OutcomeKind.IGNORED_EVENT,
                HTTPStatus.OK,
                {"message": "Event type not handled", "event": headers.event_kind},
            )

        event = self._decode(body, headers)

        decision = evaluate_event(event, self._manifest)
        self._event_logger.log_filter_decision(event, decision)
        if not decision.accepted:
            return WebhookOutcome(
                OutcomeKind.NO_MANIFEST_CHANGE,
                HTTPStatus.OK,
                {
                    "message": f"No {self._manifest} changes",
                    "repository": event.repository_full_name,
                },
            )

        membership = await self._resolver.resolve(event.repository_full_name)
        self._event_logger.log_registry_decision(event, membership)
        if membership.error is not None:
            return WebhookOutcome(
                OutcomeKind.REGISTRY_UNAVAILABLE,
                HTTPStatus.INTERNAL_SERVER_ERROR,
                {
                    "message": "Registry unavailable",
                    "repository": event.repository_full_name,
                    "error": str(membership.error),
                },
            )
        if not membership.authorized:
            return WebhookOutcome(
                OutcomeKind.NOT_REGISTERED,
                HTTPStatus.OK,
                {
                    "message": "Repository not registered",
                    "repository": event.repository_full_name,
                    "registry_status": str(membership.decision),
                },
            )

        return await self._dispatch(event)

    def _decode(self, body: bytes, headers: WebhookHeaders) -> InboundEvent:
        try:
            payload = decode_push_payload(body)
        except WebhookPayloadError as exc:
            self._event_logger.log_payload_invalid(
                delivery_id=headers.delivery_id, error=exc
            )
            raise
        return build_inbound_event(payload, headers)

    async def _dispatch(self, event: InboundEvent) -> WebhookOutcome:
        request = build_dispatch_request(event)
        try:
            result = await self._dispatch_client.dispatch(request)
        except GitHubDispatchError as exc:
            self._event_logger.log_dispatch_failed(event, exc)
            raise

        self._event_logger.log_dispatch_completed(event, result)
        return WebhookOutcome(
            OutcomeKind.DISPATCHED,
            HTTPStatus.OK,
            {
                "message": "Publish triggered",
                "repository": event.repository_full_name,
                "commit": short_sha(event.head_commit_id),
                "result": result.as_dict(),
            },
        )
