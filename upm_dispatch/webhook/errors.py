"""Webhook ingestion errors."""

from __future__ import annotations


class WebhookPayloadError(ValueError):
    """Raised when a signed webhook body cannot be decoded into an event."""

    @classmethod
    def invalid(cls, reason: object) -> WebhookPayloadError:
        """Return an error for bodies that are not a valid push payload."""
        return cls(f"Malformed push payload: {reason}")


class DispatcherConfigError(RuntimeError):
    """Raised when dispatcher configuration is missing or invalid."""

    @classmethod
    def missing(cls, env_var: str) -> DispatcherConfigError:
        """Return an error for a required variable that is unset or blank."""
        return cls(f"{env_var} is required")

    @classmethod
    def invalid(cls, env_var: str, raw: str, expected: str) -> DispatcherConfigError:
        """Return an error for a variable with an unusable value."""
        return cls(f"{env_var} must be {expected}, got: {raw!r}")
