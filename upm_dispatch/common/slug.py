"""Repository slug and URL utilities.

Slugs are GitHub identifiers in ``owner/name`` form. The Repository Registry
stores canonical ``https://<host>/<owner>/<name>`` URLs instead, so webhook
payloads are joined to registry entries by converting the slug with
:func:`repository_url`. Matching is exact string equality: no case folding and
no trailing-slash tolerance.
"""

from __future__ import annotations

DEFAULT_HOST = "github.com"


def repo_slug(owner: str, name: str) -> str:
    """Build an ``owner/name`` slug.

    Examples
    --------
    >>> repo_slug("The1Studio", "UITemplate")
    'The1Studio/UITemplate'

    """
    return f"{owner}/{name}"


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Split an ``owner/name`` slug into its parts.

    Raises
    ------
    ValueError
        If the slug does not contain exactly one ``/`` with non-empty parts.

    Examples
    --------
    >>> parse_repo_slug("The1Studio/UITemplate")
    ('The1Studio', 'UITemplate')

    """
    if slug.count("/") != 1:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    owner, name = slug.split("/")
    if not owner or not name:
        msg = f"Invalid repository slug: expected 'owner/name', got {slug!r}"
        raise ValueError(msg)

    return owner, name


def repository_url(full_name: str, *, host: str = DEFAULT_HOST) -> str:
    """Return the canonical registry URL for an ``owner/name`` slug.

    Examples
    --------
    >>> repository_url("The1Studio/UITemplate")
    'https://github.com/The1Studio/UITemplate'

    """
    owner, name = parse_repo_slug(full_name)
    return f"https://{host}/{repo_slug(owner, name)}"


def short_sha(sha: str, length: int = 7) -> str:
    """Abbreviate a commit id for logs and response bodies."""
    return sha[:length]
