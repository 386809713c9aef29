# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Caller header forwarding for S3 object requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..http.headers import normalize_headers
from .url import S3Location, map_header_name

FORWARDED_HEADER_PREFIXES = ("x-amz-", "if-")


def is_forwardable_header(name: str) -> bool:
    return str(name).lower().startswith(FORWARDED_HEADER_PREFIXES)


def object_request_params(location: S3Location, headers: Mapping[object, object] | None = None) -> dict[str, Any]:
    """
    Build HeadObject/GetObject keyword arguments for ``location``.

    Only ``x-amz-*`` and ``if-*`` caller headers are forwarded, translated to
    their boto3 parameter names; names S3 has no parameter for are dropped.
    """
    params: dict[str, Any] = {"Bucket": location.bucket, "Key": location.key}
    for name, value in normalize_headers(headers).items():
        if not is_forwardable_header(name):
            continue
        param = map_header_name(name)
        if param is not None:
            params[param] = value
    return params


__all__ = ["FORWARDED_HEADER_PREFIXES", "is_forwardable_header", "object_request_params"]
