"""HMAC-SHA256 webhook signatures.

GitHub signs each delivery with ``X-Hub-Signature-256: sha256=<hex>`` where
the digest covers the exact request body bytes. Verification must run on
those bytes, never on re-serialized JSON.
"""

from __future__ import annotations

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def sign_payload(body: bytes, secret: str) -> str:
    """Return the ``sha256=<hex>`` signature of ``body`` under ``secret``.

    Examples
    --------
    >>> sign_payload(b"{}", "s3cret").startswith("sha256=")
    True

    """
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(body: bytes, signature: str | None, secret: str | None) -> bool:
    """Return whether ``signature`` authenticates ``body`` under ``secret``.

    Both prefixed (``sha256=<hex>``) and bare hex signatures are accepted.
    A missing secret or signature fails verification.
    """
    if not secret or not signature:
        return False

    presented = signature.strip().removeprefix(SIGNATURE_PREFIX)
    if not presented:
        return False

    expected = sign_payload(body, secret).removeprefix(SIGNATURE_PREFIX)
    return hmac.compare_digest(
        expected.encode("ascii"), presented.lower().encode("utf-8")
    )
