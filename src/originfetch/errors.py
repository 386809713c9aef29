# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl
from collections.abc import Iterator
from enum import Enum
from typing import Any

import httpx
from botocore import exceptions as botocore_exceptions


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    DNS_ERROR = "DNS_ERROR"
    CERTIFICATE_ERROR = "CERTIFICATE_ERROR"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class PreflightErrorKind(str, Enum):
    """Kinds raised by the metadata-only origin probe."""

    INVALID_URL = "INVALID_URL"
    UNSUPPORTED_PROTOCOL = "UNSUPPORTED_PROTOCOL"
    INVALID_FORMAT = "INVALID_FORMAT"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    ACCESS_DENIED = "ACCESS_DENIED"
    BAD_GATEWAY = "BAD_GATEWAY"
    REQUEST_TIMEOUT = "REQUEST_TIMEOUT"
    HOST_NOT_FOUND = "HOST_NOT_FOUND"


class FetchErrorKind(str, Enum):
    """Kinds raised by the full body fetch, including translated S3 failures."""

    INVALID_URL = "InvalidUrl"
    INVALID_S3_URL = "InvalidS3Url"
    IMAGE_NOT_FOUND = "ImageNotFound"
    FETCH_ERROR = "FetchError"
    HTTP_FETCH_ERROR = "HttpFetchError"
    INVALID_CONTENT_TYPE = "InvalidContentType"
    REQUEST_TIMEOUT = "RequestTimeout"
    INVALID_IMAGE = "InvalidImage"
    KEY_NOT_FOUND = "KeyNotFound"
    BUCKET_NOT_FOUND = "BucketNotFound"
    ACCESS_DENIED = "AccessDenied"
    INVALID_BUCKET_NAME = "InvalidBucketName"
    PRECONDITION_FAILED = "PreconditionFailed"
    NOT_MODIFIED = "NotModified"
    INVALID_RANGE = "InvalidRange"
    SERVICE_UNAVAILABLE = "ServiceUnavailable"
    ORIGIN_UNREACHABLE = "OriginUnreachable"


ErrorKind = PreflightErrorKind | FetchErrorKind


class OriginError(Exception):
    """
    Typed failure surfaced by origin probing and fetching.

    The enum type of ``kind`` tags the variant: ``PreflightErrorKind`` for probe
    failures and ``FetchErrorKind`` for full-fetch failures.
    """

    def __init__(self, status_code: int, kind: ErrorKind, message: str, *, title: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.kind = kind
        self.message = message
        self.title = title

    @property
    def stage(self) -> str:
        return "preflight" if isinstance(self.kind, PreflightErrorKind) else "fetch"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "statusCode": self.status_code,
            "errorType": self.kind.value,
            "message": self.message,
        }
        if self.title:
            data["title"] = self.title
        return data

    def __repr__(self) -> str:
        return f"OriginError(status_code={self.status_code}, kind={self.kind.value!r}, message={self.message!r})"


_DNS_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "temporary failure in name resolution",
    "no address associated with hostname",
)
_CERTIFICATE_MARKERS = (
    "certificate_verify_failed",
    "certificate verify failed",
    "unable to get local issuer certificate",
    "self signed certificate",
    "self-signed certificate",
    "certificate has expired",
)


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map Python/httpx/botocore exceptions to ErrorCategory.

    httpx wraps resolver and TLS failures inside ``ConnectError``; the whole
    cause chain and the messages are inspected so those still classify as
    DNS or certificate failures.
    """
    chain = list(_exception_chain(exc))

    for link in chain:
        if isinstance(link, (httpx.TimeoutException, botocore_exceptions.ReadTimeoutError, botocore_exceptions.ConnectTimeoutError)):
            return ErrorCategory.TIMEOUT
        if isinstance(link, (socket.timeout, TimeoutError)):
            return ErrorCategory.TIMEOUT

    for link in chain:
        if isinstance(link, (socket.gaierror, socket.herror)):
            return ErrorCategory.DNS_ERROR
        if isinstance(link, ssl.SSLCertVerificationError):
            return ErrorCategory.CERTIFICATE_ERROR

    messages = " ".join(str(link).lower() for link in chain)
    if any(marker in messages for marker in _DNS_MARKERS):
        return ErrorCategory.DNS_ERROR
    if any(marker in messages for marker in _CERTIFICATE_MARKERS):
        return ErrorCategory.CERTIFICATE_ERROR

    for link in chain:
        if isinstance(link, (ssl.SSLError, botocore_exceptions.SSLError)):
            return ErrorCategory.SSL_ERROR

    for link in chain:
        if isinstance(
            link,
            (
                httpx.ConnectError,
                httpx.RemoteProtocolError,
                httpx.NetworkError,
                httpx.ProxyError,
                botocore_exceptions.EndpointConnectionError,
                botocore_exceptions.ConnectionClosedError,
                ConnectionError,
            ),
        ):
            return ErrorCategory.CONNECTION_ERROR

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Network timeout while contacting origin",
        ErrorCategory.DNS_ERROR: "Unable to resolve origin host",
        ErrorCategory.CERTIFICATE_ERROR: "TLS certificate validation failed",
        ErrorCategory.SSL_ERROR: "TLS handshake failure",
        ErrorCategory.CONNECTION_ERROR: "Network connectivity issue",
        ErrorCategory.UNKNOWN_ERROR: "Network error while contacting origin",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Origin request failed due to network error")


__all__ = [
    "ErrorCategory",
    "ErrorKind",
    "FetchErrorKind",
    "OriginError",
    "PreflightErrorKind",
    "categorize_exception",
    "error_category_to_reason",
]
