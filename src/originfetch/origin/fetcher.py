# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Full origin fetch with signature cross-validation."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from ..config import OriginSettings, load_settings
from ..deadline import Deadline, run_with_deadline
from ..errors import ErrorCategory, FetchErrorKind, OriginError, error_category_to_reason
from ..http.client import HttpClient, create_default_http_client
from ..http.headers import header_value, merge_headers
from ..http.models import HttpRequest
from ..http.url import UrlValidationError, is_http_url, sanitize_url, validate_url
from ..images.signatures import (
    derive_format,
    detect_format,
    is_octet_stream,
    is_valid_image_content_type,
    validate_image_magic_numbers,
)
from ..log import log_event
from ..models.fetch import FetchResult, ImageMetadata, OriginPayload, OriginType
from ..s3.client import create_s3_client
from ..s3.errors import map_s3_error
from ..s3.headers import object_request_params
from ..s3.url import S3UrlError, is_s3_url, parse_s3_url

logger = logging.getLogger(__name__)

COMPONENT = "OriginFetcher"
OPERATION_IMAGE_FETCHED = "image_fetched"
S3_CHUNK_SIZE = 64 * 1024


class OriginBodyFetcher:
    """
    Retrieves an origin body and confirms it is image data.

    S3 objects come from ``GetObject``; HTTP(S) origins from ``GET`` with
    redirects followed. Failures surface as ``OriginError`` with a
    ``FetchErrorKind``. Nothing is cached and nothing is retried.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        s3_client: Any | None = None,
        settings: OriginSettings | None = None,
    ):
        self.settings = settings or load_settings()
        self.http_client = http_client or create_default_http_client(self.settings)
        self._s3_client = s3_client

    @property
    def s3_client(self) -> Any:
        if self._s3_client is None:
            self._s3_client = create_s3_client(self.settings, timeout=self.settings.fetch_timeout)
        return self._s3_client

    def fetch_image(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        request_id: str | None = None,
    ) -> FetchResult:
        started = time.monotonic()

        if is_s3_url(url):
            origin_type = OriginType.S3
            payload = self._fetch_from_s3(url, headers)
        elif is_http_url(url):
            try:
                validate_url(url, self.settings.allowed_protocols)
            except UrlValidationError as exc:
                raise OriginError(400, FetchErrorKind.INVALID_URL, str(exc) or "Invalid URL") from exc
            origin_type = OriginType.HTTP
            payload = self._fetch_from_http(url, headers)
        else:
            raise OriginError(400, FetchErrorKind.INVALID_URL, "Unsupported URL protocol")

        detected = validate_image_magic_numbers(payload.content, payload.content_type)
        fetch_duration_ms = int((time.monotonic() - started) * 1000)

        log_event(
            logger,
            requestId=request_id or "unknown",
            component=COMPONENT,
            operation=OPERATION_IMAGE_FETCHED,
            originType=origin_type.value,
            url=sanitize_url(url),
            contentType=payload.content_type,
            sizeBytes=len(payload.content),
            fetchDurationMs=fetch_duration_ms,
        )

        return FetchResult(
            content=payload.content,
            content_type=payload.content_type,
            metadata=ImageMetadata(size=len(payload.content), format=derive_format(detected, payload.content_type)),
        )

    def _fetch_from_s3(self, url: str, headers: Mapping[str, str] | None) -> OriginPayload:
        try:
            location = parse_s3_url(url)
            logger.debug("Attempting to fetch from bucket: %s and key: %s", location.bucket, location.key)
            params = object_request_params(location, headers)
            return run_with_deadline(lambda d: self._read_s3_object(params, d), Deadline(self.settings.fetch_timeout), name="originfetch-s3")
        except OriginError:
            raise
        except S3UrlError as exc:
            raise OriginError(400, FetchErrorKind.INVALID_S3_URL, str(exc)) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._handle_fetch_error(exc, url) from exc

    def _read_s3_object(self, params: dict[str, Any], deadline: Deadline) -> OriginPayload:
        response = self.s3_client.get_object(**params)
        body = response.get("Body")
        if body is None:
            raise OriginError(404, FetchErrorKind.IMAGE_NOT_FOUND, "Image not found in S3")
        if isinstance(body, bytes):
            return OriginPayload(content=body, content_type=response.get("ContentType"))

        content = bytearray()
        try:
            for chunk in body.iter_chunks(S3_CHUNK_SIZE):
                deadline.check()
                content.extend(chunk)
        finally:
            body.close()
        deadline.check()
        return OriginPayload(content=bytes(content), content_type=response.get("ContentType"))

    def _fetch_from_http(self, url: str, headers: Mapping[str, str] | None) -> OriginPayload:
        request_headers = merge_headers({"User-Agent": self.settings.user_agent}, headers)
        response = self.http_client.request(
            HttpRequest(
                url=url,
                method="GET",
                headers=request_headers,
                timeout=self.settings.fetch_timeout,
                allow_redirects=True,
            )
        )

        if not response.ok:
            if response.error_category == ErrorCategory.TIMEOUT:
                raise OriginError(504, FetchErrorKind.REQUEST_TIMEOUT, "Origin Request timeout")
            detail = response.error_message or error_category_to_reason(response.error_category)
            raise OriginError(500, FetchErrorKind.FETCH_ERROR, f"Failed to fetch image from {url}: {detail}")

        status = response.status_code or 0
        if not 200 <= status < 300:
            raise OriginError(status, FetchErrorKind.HTTP_FETCH_ERROR, f"Failed to fetch image: {status} {response.reason_phrase}".rstrip())

        content_type = header_value(response.headers, "content-type") or None
        if content_type and not is_octet_stream(content_type) and not is_valid_image_content_type(content_type):
            raise OriginError(415, FetchErrorKind.INVALID_CONTENT_TYPE, f"Invalid content type: {content_type}")

        content = response.content
        if is_octet_stream(content_type) and detect_format(content) is None:
            raise OriginError(415, FetchErrorKind.INVALID_IMAGE, f"Invalid or corrupted Content-Type {content_type} file")

        return OriginPayload(content=content, content_type=content_type)

    def _handle_fetch_error(self, exc: BaseException, url: str) -> OriginError:
        mapped = map_s3_error(exc)
        if mapped is not None:
            kind = FetchErrorKind.IMAGE_NOT_FOUND if mapped.kind == FetchErrorKind.KEY_NOT_FOUND else mapped.kind
            return OriginError(mapped.status_code, kind, mapped.message)

        return OriginError(500, FetchErrorKind.FETCH_ERROR, f"Failed to fetch image from {url}: {exc}")


__all__ = ["COMPONENT", "OPERATION_IMAGE_FETCHED", "OriginBodyFetcher", "S3_CHUNK_SIZE"]
