# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Translate botocore failures into status/kind/message triples."""

from __future__ import annotations

from dataclasses import dataclass

from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from ..deadline import DeadlineExceeded
from ..errors import FetchErrorKind


@dataclass(frozen=True)
class S3ErrorMapping:
    status_code: int
    kind: FetchErrorKind
    message: str


_CODE_MAP: dict[str, tuple[int, FetchErrorKind, str]] = {
    "NoSuchKey": (404, FetchErrorKind.KEY_NOT_FOUND, "The specified key does not exist"),
    "NotFound": (404, FetchErrorKind.KEY_NOT_FOUND, "The specified key does not exist"),
    "404": (404, FetchErrorKind.KEY_NOT_FOUND, "The specified key does not exist"),
    "NoSuchBucket": (404, FetchErrorKind.BUCKET_NOT_FOUND, "The specified bucket does not exist"),
    "AccessDenied": (403, FetchErrorKind.ACCESS_DENIED, "Access denied to S3 resource"),
    "Forbidden": (403, FetchErrorKind.ACCESS_DENIED, "Access denied to S3 resource"),
    "403": (403, FetchErrorKind.ACCESS_DENIED, "Access denied to S3 resource"),
    "AllAccessDisabled": (403, FetchErrorKind.ACCESS_DENIED, "Access to the S3 bucket is disabled"),
    "InvalidAccessKeyId": (403, FetchErrorKind.ACCESS_DENIED, "Invalid S3 credentials"),
    "SignatureDoesNotMatch": (403, FetchErrorKind.ACCESS_DENIED, "Invalid S3 credentials"),
    "ExpiredToken": (403, FetchErrorKind.ACCESS_DENIED, "S3 credentials have expired"),
    "InvalidBucketName": (400, FetchErrorKind.INVALID_BUCKET_NAME, "The specified bucket name is not valid"),
    "PreconditionFailed": (412, FetchErrorKind.PRECONDITION_FAILED, "Precondition failed"),
    "412": (412, FetchErrorKind.PRECONDITION_FAILED, "Precondition failed"),
    "NotModified": (304, FetchErrorKind.NOT_MODIFIED, "Object not modified"),
    "304": (304, FetchErrorKind.NOT_MODIFIED, "Object not modified"),
    "InvalidRange": (416, FetchErrorKind.INVALID_RANGE, "The requested range is not satisfiable"),
    "SlowDown": (503, FetchErrorKind.SERVICE_UNAVAILABLE, "S3 is throttling requests"),
    "ServiceUnavailable": (503, FetchErrorKind.SERVICE_UNAVAILABLE, "S3 service unavailable"),
    "503": (503, FetchErrorKind.SERVICE_UNAVAILABLE, "S3 service unavailable"),
}


def client_error_status(exc: BaseException) -> int | None:
    """Return the HTTP status botocore recorded for a ClientError, if any."""
    if not isinstance(exc, ClientError):
        return None
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return int(status) if status is not None else None


def map_s3_error(exc: BaseException) -> S3ErrorMapping | None:
    """Map a botocore exception to a typed triple; None for anything unrecognized."""
    if isinstance(exc, ClientError):
        code = str(exc.response.get("Error", {}).get("Code", ""))
        entry = _CODE_MAP.get(code)
        if entry is None:
            return None
        status, kind, message = entry
        return S3ErrorMapping(status_code=status, kind=kind, message=message)

    if isinstance(exc, (DeadlineExceeded, ReadTimeoutError, ConnectTimeoutError)):
        return S3ErrorMapping(status_code=504, kind=FetchErrorKind.REQUEST_TIMEOUT, message="Origin Request timeout")

    if isinstance(exc, EndpointConnectionError):
        return S3ErrorMapping(status_code=502, kind=FetchErrorKind.ORIGIN_UNREACHABLE, message=f"Could not reach S3 endpoint: {exc}")

    return None


__all__ = ["S3ErrorMapping", "client_error_status", "map_s3_error"]
