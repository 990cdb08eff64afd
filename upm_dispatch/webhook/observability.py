"""Structured decision logging for webhook deliveries.

Each gate of the dispatcher emits exactly one line so operators can explain
after the fact why a push did or did not trigger a publish.

Usage
-----
>>> event_logger = WebhookEventLogger()
>>> event_logger.log_event_ignored(delivery_id="d-1", event_kind="ping")

"""

from __future__ import annotations

import enum
import typing as typ

from upm_dispatch.common.slug import short_sha
from upm_dispatch.logging import get_logger, log_error, log_info, log_warning
from upm_dispatch.registry.models import RegistryStatus

if typ.TYPE_CHECKING:
    from upm_dispatch.github.errors import GitHubDispatchError
    from upm_dispatch.github.models import DispatchResult
    from upm_dispatch.registry.resolver import MembershipResult

    from .errors import WebhookPayloadError
    from .filters import FilterDecision
    from .models import InboundEvent

logger = get_logger(__name__)


class WebhookEventType(enum.StrEnum):
    """Structured log event types for webhook decisions."""

    SIGNATURE_REJECTED = "webhook.signature.rejected"
    EVENT_IGNORED = "webhook.event.ignored"
    PAYLOAD_INVALID = "webhook.payload.invalid"
    FILTER_SKIPPED = "webhook.filter.skipped"
    FILTER_ACCEPTED = "webhook.filter.accepted"
    REGISTRY_DENIED = "webhook.registry.denied"
    REGISTRY_UNAVAILABLE = "webhook.registry.unavailable"
    DISPATCH_COMPLETED = "webhook.dispatch.completed"
    DISPATCH_FAILED = "webhook.dispatch.failed"


class WebhookEventLogger:
    """Emit webhook decision events via femtologging."""

    def log_signature_rejected(
        self, *, delivery_id: str | None, event_kind: str | None, has_signature: bool
    ) -> None:
        """Log a delivery that failed signature verification."""
        log_warning(
            logger,
            "[%s] delivery_id=%s event_kind=%s has_signature=%s",
            WebhookEventType.SIGNATURE_REJECTED,
            delivery_id,
            event_kind,
            has_signature,
        )

    def log_event_ignored(
        self, *, delivery_id: str | None, event_kind: str | None
    ) -> None:
        """Log an authenticated delivery of an unhandled event kind."""
        log_info(
            logger,
            "[%s] delivery_id=%s event_kind=%s",
            WebhookEventType.EVENT_IGNORED,
            delivery_id,
            event_kind,
        )

    def log_payload_invalid(
        self, *, delivery_id: str | None, error: WebhookPayloadError
    ) -> None:
        """Log a signed body that could not be decoded."""
        log_error(
            logger,
            "[%s] delivery_id=%s error_message=%s",
            WebhookEventType.PAYLOAD_INVALID,
            delivery_id,
            str(error),
        )

    def log_filter_decision(
        self, event: InboundEvent, decision: FilterDecision
    ) -> None:
        """Log whether the push touched a manifest file.

        Parameters
        ----------
        event
            Authenticated push event.
        decision
            Filter outcome for ``event``.

        """
        event_type = (
            WebhookEventType.FILTER_ACCEPTED
            if decision.accepted
            else WebhookEventType.FILTER_SKIPPED
        )
        log_info(
            logger,
            "[%s] delivery_id=%s repo_slug=%s commit=%s pusher=%s "
            "changed_paths=%d manifest_paths=%s",
            event_type,
            event.delivery_id,
            event.repository_full_name,
            short_sha(event.head_commit_id),
            event.pusher_identity,
            len(event.changed_file_paths),
            ",".join(decision.manifest_paths) or "-",
        )

    def log_registry_decision(
        self, event: InboundEvent, result: MembershipResult
    ) -> None:
        """Log the registry decision for a package-relevant push.

        Authorized pushes are not logged here; the dispatch outcome follows.
        An unavailable registry is logged at ERROR so it is never mistaken
        for a repository that is simply not registered.
        """
        if result.error is not None:
            log_error(
                logger,
                "[%s] delivery_id=%s repo_slug=%s repository_url=%s "
                "error_type=%s error_message=%s",
                WebhookEventType.REGISTRY_UNAVAILABLE,
                event.delivery_id,
                event.repository_full_name,
                result.repository_url,
                type(result.error).__name__,
                str(result.error),
                exc_info=result.error,
            )
            return
        if result.authorized:
            return
        counts = result.status_counts or {}
        log_info(
            logger,
            "[%s] delivery_id=%s repo_slug=%s repository_url=%s decision=%s "
            "registry_size=%s active=%s pending=%s disabled=%s",
            WebhookEventType.REGISTRY_DENIED,
            event.delivery_id,
            event.repository_full_name,
            result.repository_url,
            result.decision,
            result.registry_size,
            counts.get(RegistryStatus.ACTIVE, "-"),
            counts.get(RegistryStatus.PENDING, "-"),
            counts.get(RegistryStatus.DISABLED, "-"),
        )

    def log_dispatch_completed(
        self, event: InboundEvent, result: DispatchResult
    ) -> None:
        """Log a dispatch accepted by the publish workflow."""
        log_info(
            logger,
            "[%s] delivery_id=%s repo_slug=%s commit=%s status_code=%d",
            WebhookEventType.DISPATCH_COMPLETED,
            event.delivery_id,
            event.repository_full_name,
            short_sha(event.head_commit_id),
            result.status_code,
        )

    def log_dispatch_failed(
        self, event: InboundEvent, error: GitHubDispatchError
    ) -> None:
        """Log a dispatch that failed upstream."""
        log_error(
            logger,
            "[%s] delivery_id=%s repo_slug=%s commit=%s status_code=%s "
            "error_message=%s",
            WebhookEventType.DISPATCH_FAILED,
            event.delivery_id,
            event.repository_full_name,
            short_sha(event.head_commit_id),
            error.status_code,
            str(error),
            exc_info=error,
        )
