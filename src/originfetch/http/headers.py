# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header normalization utilities.

HTTP header field names are case-insensitive (RFC 9110). Caller-supplied header
mappings arrive with arbitrary casing, so lookups and merges here never rely on
the exact key spelling.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def _coerce_headers_mapping(headers: Any) -> Mapping[object, object] | None:
    """
    Best-effort coercion of "dict-like" header containers into a Mapping.

    Accepts plain dicts, httpx.Headers, objects exposing ``.items()`` and
    iterables of pairs.
    """
    if not headers:
        return None
    if isinstance(headers, Mapping):
        return headers

    items = getattr(headers, "items", None)
    if callable(items):
        try:
            return dict(items())
        except (TypeError, ValueError):
            pass

    try:
        return dict(headers)
    except (TypeError, ValueError):
        return None


def normalize_headers(headers: Mapping[object, object] | None) -> dict[str, str]:
    """Return a lowercase-keyed copy of a header mapping."""
    coerced = _coerce_headers_mapping(headers)
    if not coerced:
        return {}
    out: dict[str, str] = {}
    for key, value in coerced.items():
        if key is None:
            continue
        name = str(key).strip().lower()
        if not name:
            continue
        out[name] = "" if value is None else str(value)
    return out


def header_value(headers: Mapping[object, object] | None, name: str, default: str = "") -> str:
    """Return a header value using case-insensitive key matching."""
    if not headers or not name:
        return default

    coerced = _coerce_headers_mapping(headers)
    if not coerced:
        return default

    lower = str(name).lower()
    for key in (name, lower, lower.title()):
        if key in coerced:
            value = coerced.get(key)
            return default if value is None else str(value).strip()

    for key, value in coerced.items():
        if key is None:
            continue
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


def merge_headers(base: Mapping[str, str], overrides: Mapping[object, object] | None) -> dict[str, str]:
    """
    Overlay ``overrides`` on ``base`` with case-insensitive replacement.

    A caller key such as ``user-agent`` replaces a base ``User-Agent`` instead of
    producing two differently-cased copies of the same field.
    """
    merged: dict[str, str] = dict(base)
    for name, value in normalize_headers(overrides).items():
        for existing in [key for key in merged if key.lower() == name]:
            del merged[existing]
        merged[name] = value
    return merged


__all__ = ["header_value", "merge_headers", "normalize_headers"]
