"""Unit tests for the webhook dispatcher gate sequence."""

from __future__ import annotations

from http import HTTPStatus

import pytest

from tests.helpers.webhook_builders import (
    HEAD_SHA,
    REPO,
    REPO_URL,
    FakeRegistryFetcher,
    RecordingDispatchClient,
    build_dispatcher,
    commit,
    encode,
    push_payload,
    snapshot,
)
from upm_dispatch.github.errors import GitHubDispatchError
from upm_dispatch.registry.errors import RegistryFetchError
from upm_dispatch.registry.models import RegistrySnapshot, RegistryStatus
from upm_dispatch.webhook.errors import WebhookPayloadError
from upm_dispatch.webhook.models import WebhookHeaders
from upm_dispatch.webhook.service import OutcomeKind
from upm_dispatch.webhook.signature import sign_payload


def _headers(
    body: bytes, secret: str, *, event: str = "push", signature: str | None = None
) -> WebhookHeaders:
    return WebhookHeaders(
        event_kind=event,
        signature=signature if signature is not None else sign_payload(body, secret),
        delivery_id="delivery-1",
    )


class TestSignatureGate:
    """Authentication runs before anything else."""

    @pytest.mark.asyncio
    async def test_bad_signature_is_rejected_before_registry(
        self,
        webhook_secret: str,
        active_fetcher: FakeRegistryFetcher,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """A tampered body yields 401 with no registry fetch and no dispatch."""
        body = encode(push_payload())
        headers = _headers(body, webhook_secret)
        tampered = body.replace(b"master", b"main")

        outcome = await build_dispatcher(
            webhook_secret, active_fetcher, dispatch_client
        ).handle(tampered, headers)

        assert outcome.kind is OutcomeKind.UNAUTHORIZED
        assert outcome.status == HTTPStatus.UNAUTHORIZED
        assert outcome.body == {"message": "Invalid signature"}
        assert active_fetcher.calls == 0
        assert dispatch_client.requests == []

    @pytest.mark.asyncio
    async def test_missing_signature_is_rejected(
        self,
        webhook_secret: str,
        active_fetcher: FakeRegistryFetcher,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """Unsigned deliveries never pass."""
        body = encode(push_payload())
        headers = WebhookHeaders(event_kind="push", signature=None, delivery_id=None)

        outcome = await build_dispatcher(
            webhook_secret, active_fetcher, dispatch_client
        ).handle(body, headers)

        assert outcome.kind is OutcomeKind.UNAUTHORIZED
        assert active_fetcher.calls == 0

    @pytest.mark.asyncio
    async def test_unsigned_garbage_is_unauthorized_not_malformed(
        self,
        webhook_secret: str,
        active_fetcher: FakeRegistryFetcher,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """Bodies are not parsed before the signature is verified."""
        outcome = await build_dispatcher(
            webhook_secret, active_fetcher, dispatch_client
        ).handle(b"not json", _headers(b"other", webhook_secret))

        assert outcome.kind is OutcomeKind.UNAUTHORIZED


class TestEventGates:
    """Kind and manifest filters short-circuit with 200."""

    @pytest.mark.parametrize("event", ["ping", "pull_request", "release"])
    @pytest.mark.asyncio
    async def test_non_push_events_are_acknowledged(
        self,
        event: str,
        webhook_secret: str,
        active_fetcher: FakeRegistryFetcher,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """Signed non-push events answer 200 without a registry lookup."""
        body = b'{"zen":"Keep it logically awesome."}'

        outcome = await build_dispatcher(
            webhook_secret, active_fetcher, dispatch_client
        ).handle(body, _headers(body, webhook_secret, event=event))

        assert outcome.kind is OutcomeKind.IGNORED_EVENT
        assert outcome.status == HTTPStatus.OK
        assert outcome.body == {"message": "Event type not handled", "event": event}
        assert active_fetcher.calls == 0
        assert dispatch_client.requests == []

    @pytest.mark.asyncio
    async def test_push_without_manifest_change_is_skipped(
        self,
        webhook_secret: str,
        active_fetcher: FakeRegistryFetcher,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """Pushes that do not touch the manifest never reach the registry."""
        body = encode(push_payload(commits=[commit(modified=["README.md"])]))

        outcome = await build_dispatcher(
            webhook_secret, active_fetcher, dispatch_client
        ).handle(body, _headers(body, webhook_secret))

        assert outcome.kind is OutcomeKind.NO_MANIFEST_CHANGE
        assert outcome.status == HTTPStatus.OK
        assert outcome.body == {
            "message": "No package.json changes",
            "repository": REPO,
        }
        assert active_fetcher.calls == 0

    @pytest.mark.asyncio
    async def test_signed_malformed_push_raises(
        self,
        webhook_secret: str,
        active_fetcher: FakeRegistryFetcher,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """A signed push body that cannot be decoded is raised to the caller."""
        body = b'{"ref":"refs/heads/main"}'

        with pytest.raises(WebhookPayloadError):
            await build_dispatcher(
                webhook_secret, active_fetcher, dispatch_client
            ).handle(body, _headers(body, webhook_secret))

        assert active_fetcher.calls == 0


class TestRegistryGate:
    """Registry membership decides whether a relevant push dispatches."""

    @pytest.mark.parametrize(
        ("registry", "registry_status"),
        [
            (snapshot(), "not_registered"),
            (snapshot((REPO_URL, RegistryStatus.PENDING)), "pending"),
            (snapshot((REPO_URL, RegistryStatus.DISABLED)), "disabled"),
        ],
    )
    @pytest.mark.asyncio
    async def test_unauthorized_repositories_are_not_dispatched(
        self,
        registry: RegistrySnapshot,
        registry_status: str,
        webhook_secret: str,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """Absent, pending and disabled repositories answer 200 without dispatch."""
        fetcher = FakeRegistryFetcher(registry)
        body = encode(push_payload())

        outcome = await build_dispatcher(
            webhook_secret, fetcher, dispatch_client
        ).handle(body, _headers(body, webhook_secret))

        assert outcome.kind is OutcomeKind.NOT_REGISTERED
        assert outcome.status == HTTPStatus.OK
        assert outcome.body == {
            "message": "Repository not registered",
            "repository": REPO,
            "registry_status": registry_status,
        }
        assert fetcher.calls == 1
        assert dispatch_client.requests == []

    @pytest.mark.asyncio
    async def test_registry_failure_fails_closed_with_500(
        self,
        webhook_secret: str,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """An unreachable registry never authorizes and answers 500."""
        error = RegistryFetchError.http_error("https://raw.example.test/r.json", 503)
        fetcher = FakeRegistryFetcher(error=error)
        body = encode(push_payload())

        outcome = await build_dispatcher(
            webhook_secret, fetcher, dispatch_client
        ).handle(body, _headers(body, webhook_secret))

        assert outcome.kind is OutcomeKind.REGISTRY_UNAVAILABLE
        assert outcome.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert outcome.body["message"] == "Registry unavailable"
        assert "HTTP 503" in outcome.body["error"]
        assert dispatch_client.requests == []


class TestDispatch:
    """Authorized pushes are forwarded exactly once."""

    @pytest.mark.asyncio
    async def test_authorized_push_dispatches_once(
        self,
        webhook_secret: str,
        active_fetcher: FakeRegistryFetcher,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """The normalized request carries the push context."""
        body = encode(
            push_payload(
                commits=[
                    commit(added=["Packages/A/package.json"]),
                    commit(modified=["Packages/A/Runtime/A.cs"]),
                ]
            )
        )

        outcome = await build_dispatcher(
            webhook_secret, active_fetcher, dispatch_client
        ).handle(body, _headers(body, webhook_secret))

        assert outcome.kind is OutcomeKind.DISPATCHED
        assert outcome.status == HTTPStatus.OK
        assert outcome.body == {
            "message": "Publish triggered",
            "repository": REPO,
            "commit": HEAD_SHA[:7],
            "result": {"status": 204, "dispatched": True},
        }
        assert len(dispatch_client.requests) == 1
        request = dispatch_client.requests[0]
        assert request.repository == REPO
        assert request.commit_sha == HEAD_SHA
        assert request.commit_author == "octocat"
        assert request.commit_message == "Bump version to 1.2.0"
        assert request.branch == "master"
        assert request.package_path == ""

    @pytest.mark.asyncio
    async def test_removed_manifest_still_dispatches(
        self,
        webhook_secret: str,
        active_fetcher: FakeRegistryFetcher,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """Removals count as manifest changes."""
        body = encode(push_payload(commits=[commit(removed=["Old/package.json"])]))

        outcome = await build_dispatcher(
            webhook_secret, active_fetcher, dispatch_client
        ).handle(body, _headers(body, webhook_secret))

        assert outcome.kind is OutcomeKind.DISPATCHED

    @pytest.mark.asyncio
    async def test_dispatch_failure_is_raised(
        self,
        webhook_secret: str,
        active_fetcher: FakeRegistryFetcher,
    ) -> None:
        """Downstream rejections propagate after a single attempt."""
        client = RecordingDispatchClient(
            error=GitHubDispatchError.http_error(401, "Bad credentials")
        )
        body = encode(push_payload())

        with pytest.raises(GitHubDispatchError) as excinfo:
            await build_dispatcher(webhook_secret, active_fetcher, client).handle(
                body, _headers(body, webhook_secret)
            )

        assert excinfo.value.status_code == 401
        assert len(client.requests) == 1

    @pytest.mark.asyncio
    async def test_registry_is_refetched_per_delivery(
        self,
        webhook_secret: str,
        dispatch_client: RecordingDispatchClient,
    ) -> None:
        """A registry edit applies to the next delivery."""
        fetcher = FakeRegistryFetcher(snapshot((REPO_URL, RegistryStatus.ACTIVE)))
        dispatcher = build_dispatcher(webhook_secret, fetcher, dispatch_client)
        body = encode(push_payload())
        headers = _headers(body, webhook_secret)

        first = await dispatcher.handle(body, headers)
        fetcher.result = snapshot((REPO_URL, RegistryStatus.DISABLED))
        second = await dispatcher.handle(body, headers)

        assert first.kind is OutcomeKind.DISPATCHED
        assert second.kind is OutcomeKind.NOT_REGISTERED
        assert fetcher.calls == 2
        assert len(dispatch_client.requests) == 1
