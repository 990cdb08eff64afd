"""Configuration for the webhook dispatcher.

Secrets and endpoints come from the environment; the service has no CLI
flags.

Usage
-----
>>> config = DispatcherConfig.from_env()  # doctest: +SKIP
>>> config.event_type
'package_publish'

"""

from __future__ import annotations

import dataclasses as dc
import os

from upm_dispatch.common.slug import DEFAULT_HOST, parse_repo_slug

from .errors import DispatcherConfigError

_DEFAULT_API_URL = "https://api.github.com"
_DEFAULT_EVENT_TYPE = "package_publish"
_DEFAULT_MANIFEST_FILENAME = "package.json"
_DEFAULT_TIMEOUT_S = 10.0


@dc.dataclass(frozen=True, slots=True)
class DispatcherConfig:
    """Settings shared by the signature gate, registry and dispatch client.

    Attributes
    ----------
    webhook_secret
        Shared HMAC secret configured on the webhook.
    github_token
        Bearer credential for the dispatch call; empty when a GitHub App is
        configured.
    registry_url
        Location of the registry JSON document.
    target_repository
        ``owner/name`` of the repository that receives ``repository_dispatch``.
    api_url
        GitHub REST API base URL.
    event_type
        ``event_type`` sent with each dispatch.
    manifest_filename
        Basename whose change marks a push as package-relevant.
    registry_host
        Host used when building canonical registry URLs.
    timeout_s
        Timeout applied to each outbound request.
    github_app_id
        GitHub App id used to mint installation tokens.
    github_app_private_key
        PEM private key of the GitHub App.
    github_app_installation_owner
        Account whose App installation issues dispatch tokens.

    """

    webhook_secret: str
    github_token: str
    registry_url: str
    target_repository: str
    api_url: str = _DEFAULT_API_URL
    event_type: str = _DEFAULT_EVENT_TYPE
    manifest_filename: str = _DEFAULT_MANIFEST_FILENAME
    registry_host: str = DEFAULT_HOST
    timeout_s: float = _DEFAULT_TIMEOUT_S
    github_app_id: int | None = None
    github_app_private_key: str | None = dc.field(default=None, repr=False)
    github_app_installation_owner: str | None = None

    @staticmethod
    def _required(env_var: str) -> str:
        value = os.environ.get(env_var, "").strip()
        if not value:
            raise DispatcherConfigError.missing(env_var)
        return value

    @staticmethod
    def _optional(env_var: str, default: str) -> str:
        value = os.environ.get(env_var, "").strip()
        return value or default

    @staticmethod
    def _parse_timeout(env_var: str) -> float:
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            return _DEFAULT_TIMEOUT_S
        try:
            value = float(raw)
        except ValueError as exc:
            raise DispatcherConfigError.invalid(
                env_var, raw, "a positive number of seconds"
            ) from exc
        if value <= 0:
            raise DispatcherConfigError.invalid(
                env_var, raw, "a positive number of seconds"
            )
        return value

    @staticmethod
    def _parse_app_id(env_var: str, raw: str) -> int:
        try:
            value = int(raw)
        except ValueError as exc:
            raise DispatcherConfigError.invalid(
                env_var, raw, "a positive integer"
            ) from exc
        if value <= 0:
            raise DispatcherConfigError.invalid(env_var, raw, "a positive integer")
        return value

    @classmethod
    def _github_app(cls, target_owner: str) -> tuple[int, str, str] | None:
        raw_app_id = os.environ.get("UPM_DISPATCH_GITHUB_APP_ID", "").strip()
        raw_key = os.environ.get("UPM_DISPATCH_GITHUB_APP_PRIVATE_KEY", "").strip()
        if not raw_app_id and not raw_key:
            return None
        if not raw_app_id:
            raise DispatcherConfigError.missing("UPM_DISPATCH_GITHUB_APP_ID")
        if not raw_key:
            raise DispatcherConfigError.missing("UPM_DISPATCH_GITHUB_APP_PRIVATE_KEY")

        app_id = cls._parse_app_id("UPM_DISPATCH_GITHUB_APP_ID", raw_app_id)
        # Single-line secrets carry the PEM with escaped newlines.
        private_key = raw_key.replace("\\n", "\n")
        owner = cls._optional("UPM_DISPATCH_GITHUB_APP_INSTALLATION_OWNER", target_owner)
        return app_id, private_key, owner

    @property
    def uses_github_app(self) -> bool:
        """Return whether dispatch authenticates as a GitHub App."""
        return self.github_app_id is not None and self.github_app_private_key is not None

    @classmethod
    def from_env(cls) -> DispatcherConfig:
        """Build configuration from environment variables.

        Reads the following environment variables:

        - ``UPM_DISPATCH_WEBHOOK_SECRET``: Required webhook signing secret.
        - ``UPM_DISPATCH_GITHUB_APP_ID`` and
          ``UPM_DISPATCH_GITHUB_APP_PRIVATE_KEY``: GitHub App credentials;
          set both or neither.
        - ``UPM_DISPATCH_GITHUB_APP_INSTALLATION_OWNER``: Optional account
          the App is installed on; defaults to the target repository owner.
        - ``UPM_DISPATCH_GITHUB_TOKEN``: Bearer token for dispatch; required
          only when no GitHub App is configured.
        - ``UPM_DISPATCH_REGISTRY_URL``: Required registry document URL.
        - ``UPM_DISPATCH_TARGET_REPOSITORY``: Required ``owner/name`` target.
        - ``UPM_DISPATCH_API_URL``: Optional GitHub API base URL.
        - ``UPM_DISPATCH_EVENT_TYPE``: Optional dispatch event type.
        - ``UPM_DISPATCH_MANIFEST_FILENAME``: Optional manifest basename.
        - ``UPM_DISPATCH_REGISTRY_HOST``: Optional registry URL host.
        - ``UPM_DISPATCH_TIMEOUT_S``: Optional positive request timeout.

        Raises
        ------
        DispatcherConfigError
            If a required variable is missing or a value is invalid.

        """
        target = cls._required("UPM_DISPATCH_TARGET_REPOSITORY")
        try:
            target_owner, _ = parse_repo_slug(target)
        except ValueError as exc:
            raise DispatcherConfigError.invalid(
                "UPM_DISPATCH_TARGET_REPOSITORY", target, "an 'owner/name' slug"
            ) from exc

        webhook_secret = cls._required("UPM_DISPATCH_WEBHOOK_SECRET")
        github_app = cls._github_app(target_owner)
        if github_app is None:
            github_token = cls._required("UPM_DISPATCH_GITHUB_TOKEN")
            app_id, private_key, owner = None, None, None
        else:
            github_token = cls._optional("UPM_DISPATCH_GITHUB_TOKEN", "")
            app_id, private_key, owner = github_app

        return cls(
            webhook_secret=webhook_secret,
            github_token=github_token,
            registry_url=cls._required("UPM_DISPATCH_REGISTRY_URL"),
            target_repository=target,
            api_url=cls._optional("UPM_DISPATCH_API_URL", _DEFAULT_API_URL),
            event_type=cls._optional("UPM_DISPATCH_EVENT_TYPE", _DEFAULT_EVENT_TYPE),
            manifest_filename=cls._optional(
                "UPM_DISPATCH_MANIFEST_FILENAME", _DEFAULT_MANIFEST_FILENAME
            ),
            registry_host=cls._optional("UPM_DISPATCH_REGISTRY_HOST", DEFAULT_HOST),
            timeout_s=cls._parse_timeout("UPM_DISPATCH_TIMEOUT_S"),
            github_app_id=app_id,
            github_app_private_key=private_key,
            github_app_installation_owner=owner,
        )
