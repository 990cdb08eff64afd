"""Webhook ingestion and dispatch routing.

Usage
-----
Handle one delivery::

    from upm_dispatch.webhook import WebhookDispatcher, WebhookHeaders

    outcome = await dispatcher.handle(raw_body, WebhookHeaders(
        event_kind="push",
        signature=signature_header,
        delivery_id=delivery_header,
    ))
    status, body = outcome.status, outcome.body

"""

from __future__ import annotations

from .config import DispatcherConfig
from .errors import DispatcherConfigError, WebhookPayloadError
from .filters import (
    FilterDecision,
    FilterOutcome,
    evaluate_event,
    is_manifest_path,
    is_push_event,
    manifest_paths,
)
from .models import (
    InboundEvent,
    PushPayload,
    WebhookHeaders,
    build_inbound_event,
    changed_file_paths,
    decode_push_payload,
)
from .observability import WebhookEventLogger, WebhookEventType
from .service import (
    OutcomeKind,
    WebhookDispatcher,
    WebhookDispatcherDependencies,
    WebhookOutcome,
)
from .signature import sign_payload, verify_signature

__all__ = [
    "DispatcherConfig",
    "DispatcherConfigError",
    "FilterDecision",
    "FilterOutcome",
    "InboundEvent",
    "OutcomeKind",
    "PushPayload",
    "WebhookDispatcher",
    "WebhookDispatcherDependencies",
    "WebhookEventLogger",
    "WebhookEventType",
    "WebhookHeaders",
    "WebhookOutcome",
    "WebhookPayloadError",
    "build_inbound_event",
    "changed_file_paths",
    "decode_push_payload",
    "evaluate_event",
    "is_manifest_path",
    "is_push_event",
    "manifest_paths",
    "sign_payload",
    "verify_signature",
]
