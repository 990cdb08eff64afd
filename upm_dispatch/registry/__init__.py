"""Repository Registry access for dispatch authorization.

The registry is the membership list of repositories allowed to trigger
publishing. It lives outside this service and is re-read on every webhook
delivery.

Usage
-----
Resolve membership for a repository::

    from upm_dispatch.registry import (
        HttpRegistryFetcher,
        RegistryFetcherConfig,
        RegistryMembershipResolver,
    )

    fetcher = HttpRegistryFetcher(RegistryFetcherConfig(url=registry_url))
    resolver = RegistryMembershipResolver(fetcher)
    result = await resolver.resolve("The1Studio/UITemplate")
    if result.authorized:
        ...

"""

from upm_dispatch.registry.client import (
    HttpRegistryFetcher,
    RegistryFetcher,
    RegistryFetcherConfig,
)
from upm_dispatch.registry.errors import (
    RegistryDocumentError,
    RegistryError,
    RegistryFetchError,
)
from upm_dispatch.registry.models import (
    RegistryDocument,
    RegistryEntry,
    RegistryPackage,
    RegistrySnapshot,
    RegistryStatus,
    decode_registry_document,
)
from upm_dispatch.registry.resolver import (
    MembershipDecision,
    MembershipResult,
    RegistryMembershipResolver,
    resolve_membership,
)

__all__ = [
    "HttpRegistryFetcher",
    "MembershipDecision",
    "MembershipResult",
    "RegistryDocument",
    "RegistryDocumentError",
    "RegistryEntry",
    "RegistryError",
    "RegistryFetchError",
    "RegistryFetcher",
    "RegistryFetcherConfig",
    "RegistryMembershipResolver",
    "RegistryPackage",
    "RegistrySnapshot",
    "RegistryStatus",
    "decode_registry_document",
    "resolve_membership",
]
