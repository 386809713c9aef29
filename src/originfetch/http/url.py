# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers shared by the origin probe and fetcher."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

from ..config import DEFAULT_ALLOWED_PROTOCOLS


class UrlValidationError(ValueError):
    """Raised when a source URL fails syntax or protocol checks."""


def is_http_url(url: str) -> bool:
    """Return True for URLs carrying a literal ``http://`` or ``https://`` prefix."""
    return url.startswith("http://") or url.startswith("https://")


def validate_url(url: str, allowed_protocols: Iterable[str] = DEFAULT_ALLOWED_PROTOCOLS) -> None:
    """
    Check URL syntax and the protocol allowlist.

    Protocol failures always mention "protocol" in the message; callers rely on
    that wording to tell them apart from other syntax failures.
    """
    if not url or not str(url).strip():
        raise UrlValidationError("Invalid URL: empty value")

    try:
        parts = urlsplit(str(url).strip())
        hostname = parts.hostname
    except ValueError as exc:
        raise UrlValidationError(f"Invalid URL: {url}") from exc

    allowed = tuple(p.lower() for p in allowed_protocols)
    scheme = parts.scheme.lower()
    if not scheme:
        raise UrlValidationError(f"Invalid URL: {url}")
    if scheme not in allowed:
        raise UrlValidationError(f"Unsupported protocol: {scheme}. Allowed protocols: {', '.join(allowed)}")
    if not hostname:
        raise UrlValidationError("Invalid URL: missing hostname")
    if parts.username is not None or parts.password is not None:
        raise UrlValidationError("Invalid URL: credentials are not allowed")


def sanitize_url(url: str) -> str:
    """Drop query string and fragment, keeping scheme, host and path."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return url.split("?")[0]
    if not parts.scheme or not parts.netloc:
        return url.split("?")[0]
    host = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{host}{parts.path}"


__all__ = ["UrlValidationError", "is_http_url", "sanitize_url", "validate_url"]
