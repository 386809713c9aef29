# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""S3 URL recognition and parsing.

Recognized forms::

    https://bucket.s3.amazonaws.com/key                 legacy virtual-hosted
    https://bucket.s3.us-west-2.amazonaws.com/key       regional virtual-hosted
    https://bucket.s3-us-west-2.amazonaws.com/key       dash-region virtual-hosted
    https://s3.us-west-2.amazonaws.com/bucket/key       path-style (also s3. and s3-<region>.)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import unquote, urlsplit

INVALID_S3_URL_MESSAGE = "Invalid S3 URL format"

_AWS_SUFFIX = r"\.amazonaws\.com(?:\.cn)?"
_PATH_STYLE = re.compile(rf"^s3(?:[.-][a-z0-9-]+)?{_AWS_SUFFIX}$")
_LEGACY = re.compile(rf"^(?P<bucket>.+)\.s3{_AWS_SUFFIX}$")
_REGIONAL = re.compile(rf"^(?P<bucket>.+)\.s3\.[a-z0-9-]+{_AWS_SUFFIX}$")
_DASH_REGION = re.compile(rf"^(?P<bucket>.+)\.s3-[a-z0-9-]+{_AWS_SUFFIX}$")

_VIRTUAL_HOSTED = (_LEGACY, _REGIONAL, _DASH_REGION)

# Lowercase request header -> boto3 HeadObject/GetObject parameter.
_HEADER_PARAMS = {
    "if-match": "IfMatch",
    "if-none-match": "IfNoneMatch",
    "if-modified-since": "IfModifiedSince",
    "if-unmodified-since": "IfUnmodifiedSince",
    "x-amz-server-side-encryption-customer-algorithm": "SSECustomerAlgorithm",
    "x-amz-server-side-encryption-customer-key": "SSECustomerKey",
    "x-amz-server-side-encryption-customer-key-md5": "SSECustomerKeyMD5",
    "x-amz-request-payer": "RequestPayer",
    "x-amz-expected-bucket-owner": "ExpectedBucketOwner",
    "x-amz-checksum-mode": "ChecksumMode",
}


class S3UrlError(ValueError):
    """Raised when a URL looks like S3 but bucket/key cannot be extracted."""

    def __init__(self, message: str = INVALID_S3_URL_MESSAGE):
        super().__init__(message)


@dataclass(frozen=True)
class S3Location:
    bucket: str
    key: str


def _split(url: str) -> tuple[str, str, str] | None:
    try:
        parts = urlsplit(str(url or "").strip())
        hostname = parts.hostname or ""
    except ValueError:
        return None
    if parts.scheme.lower() not in {"http", "https"} or not hostname:
        return None
    return parts.scheme.lower(), hostname.lower(), parts.path


def is_s3_url(url: str) -> bool:
    """Return True when ``url`` targets an S3 endpoint in one of the recognized forms."""
    split = _split(url)
    if split is None:
        return False
    _, hostname, _ = split
    if _PATH_STYLE.match(hostname):
        return True
    return any(pattern.match(hostname) for pattern in _VIRTUAL_HOSTED)


def parse_s3_url(url: str) -> S3Location:
    """Extract bucket and key from an S3 URL."""
    split = _split(url)
    if split is None:
        raise S3UrlError()
    _, hostname, path = split

    if _PATH_STYLE.match(hostname):
        bucket, _, key = path.lstrip("/").partition("/")
        if not bucket or not key:
            raise S3UrlError()
        return S3Location(bucket=bucket, key=unquote(key))

    for pattern in _VIRTUAL_HOSTED:
        match = pattern.match(hostname)
        if match:
            key = path.lstrip("/")
            if not key:
                raise S3UrlError()
            return S3Location(bucket=match.group("bucket"), key=unquote(key))

    raise S3UrlError()


def map_header_name(lowercase_name: str) -> str | None:
    """Return the boto3 parameter for a forwarded header, or None when S3 has no such field."""
    return _HEADER_PARAMS.get(lowercase_name)


__all__ = [
    "INVALID_S3_URL_MESSAGE",
    "S3Location",
    "S3UrlError",
    "is_s3_url",
    "map_header_name",
    "parse_s3_url",
]
