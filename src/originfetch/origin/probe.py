# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Preflight origin probe: reachability and declared content-type without the body."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from ..config import OriginSettings, load_settings
from ..deadline import Deadline, run_with_deadline
from ..errors import ErrorCategory, OriginError, PreflightErrorKind, categorize_exception, error_category_to_reason
from ..http.client import HttpClient, create_default_http_client
from ..http.headers import header_value
from ..http.models import HttpRequest, HttpResponse
from ..http.url import UrlValidationError, validate_url
from ..images.signatures import validate_preflight_content_type
from ..models.fetch import OriginType, PreflightResult
from ..models.request import ImageRequest
from ..s3.client import create_s3_client
from ..s3.errors import client_error_status
from ..s3.headers import object_request_params
from ..s3.url import S3UrlError, is_s3_url, parse_s3_url

logger = logging.getLogger(__name__)


class OriginHeaderProbe:
    """
    Confirms an origin is reachable and declares image content before any body transfer.

    S3 origins are probed with ``HeadObject``; HTTP(S) origins with ``HEAD``
    (no redirects followed). Every failure surfaces as an ``OriginError`` whose
    kind is a ``PreflightErrorKind``.
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
            self._s3_client = create_s3_client(self.settings, timeout=self.settings.probe_timeout)
        return self._s3_client

    def validate_origin_url(self, url: str, request: ImageRequest) -> PreflightResult:
        started = time.monotonic()
        try:
            validate_url(url, self.settings.allowed_protocols)
        except UrlValidationError as exc:
            message = str(exc) or "Invalid URL"
            kind = PreflightErrorKind.UNSUPPORTED_PROTOCOL if "protocol" in message else PreflightErrorKind.INVALID_URL
            raise OriginError(400, kind, message, title="URL validation failed") from exc

        if is_s3_url(url):
            origin_type = OriginType.S3
            content_type = self._probe_s3(url, request.client_headers)
        else:
            origin_type = OriginType.HTTP
            content_type = self._probe_http(url, request.client_headers)

        request.source_image_content_type = content_type
        elapsed_ms = int((time.monotonic() - started) * 1000)
        if request.timings is not None and request.timings.request_resolution is not None:
            request.timings.request_resolution.preflight_validation_ms = elapsed_ms

        logger.debug("Preflight for %s origin passed in %dms (Content-Type: %s)", origin_type.value, elapsed_ms, content_type)
        return PreflightResult(origin_type=origin_type, content_type=content_type, elapsed_ms=elapsed_ms)

    def _probe_s3(self, url: str, headers: Mapping[str, str] | None) -> str | None:
        try:
            location = parse_s3_url(url)
            params = object_request_params(location, headers)
            response = run_with_deadline(lambda _d: self.s3_client.head_object(**params), Deadline(self.settings.probe_timeout), name="originfetch-s3")
            content_type = response.get("ContentType")
            validate_preflight_content_type(content_type)
            return content_type
        except OriginError:
            raise
        except S3UrlError as exc:
            raise OriginError(400, PreflightErrorKind.INVALID_URL, f"Invalid S3 URL format: {url}", title="Invalid S3 URL format") from exc
        except Exception as exc:  # noqa: BLE001
            if categorize_exception(exc) == ErrorCategory.TIMEOUT:
                raise self._timeout_error(url) from exc
            status = client_error_status(exc)
            if status == 404:
                raise OriginError(404, PreflightErrorKind.RESOURCE_NOT_FOUND, f"S3 object not found: {url}", title="Resource not found") from exc
            if status == 403:
                raise OriginError(403, PreflightErrorKind.ACCESS_DENIED, f"Access denied to S3 resource: {url}", title="Access denied") from exc
            raise OriginError(502, PreflightErrorKind.BAD_GATEWAY, f"S3 validation failed for {url}: {exc}", title="S3 validation failed") from exc

    def _probe_http(self, url: str, headers: Mapping[str, str] | None) -> str | None:
        response = self.http_client.request(
            HttpRequest(
                url=url,
                method="HEAD",
                headers=dict(headers or {}),
                timeout=self.settings.probe_timeout,
                allow_redirects=False,
            )
        )
        if not response.ok:
            raise self._transport_error(url, response)

        status = response.status_code or 0
        if not 200 <= status < 300:
            raise self._status_error(url, status)

        content_type = header_value(response.headers, "content-type") or None
        validate_preflight_content_type(content_type)
        return content_type

    def _status_error(self, url: str, status: int) -> OriginError:
        if status == 404:
            return OriginError(404, PreflightErrorKind.RESOURCE_NOT_FOUND, f"Resource not found at {url}", title="Resource not found")
        if status in (401, 403):
            return OriginError(status, PreflightErrorKind.ACCESS_DENIED, f"Access denied for {url}", title="Access denied")
        if status >= 500:
            return OriginError(502, PreflightErrorKind.BAD_GATEWAY, f"Origin server error ({status}) for {url}", title="Origin server error")
        return OriginError(
            502,
            PreflightErrorKind.BAD_GATEWAY,
            f"Origin validation failed for {url}: unexpected status {status}",
            title="Origin validation failed",
        )

    def _timeout_error(self, url: str) -> OriginError:
        timeout_ms = int(self.settings.probe_timeout * 1000)
        return OriginError(
            408,
            PreflightErrorKind.REQUEST_TIMEOUT,
            f"Origin validation timeout after {timeout_ms}ms for URL: {url}",
            title="Origin timeout",
        )

    def _transport_error(self, url: str, response: HttpResponse) -> OriginError:
        category = response.error_category
        detail = response.error_message or error_category_to_reason(category)
        if category == ErrorCategory.TIMEOUT:
            return self._timeout_error(url)
        if category == ErrorCategory.DNS_ERROR:
            return OriginError(404, PreflightErrorKind.HOST_NOT_FOUND, f"Unable to resolve host for {url}", title="Unable to resolve host")
        if category == ErrorCategory.CERTIFICATE_ERROR:
            return OriginError(
                403,
                PreflightErrorKind.ACCESS_DENIED,
                f"TLS certificate validation failed for {url}: {detail}",
                title="TLS certificate error",
            )
        return OriginError(502, PreflightErrorKind.BAD_GATEWAY, f"Origin validation failed for {url}: {detail}", title="Origin validation failed")


__all__ = ["OriginHeaderProbe"]
