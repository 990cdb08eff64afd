"""HTTP resource for inbound GitHub webhook deliveries."""

from __future__ import annotations

from .resources import WebhookResource

__all__ = ["WebhookResource"]
