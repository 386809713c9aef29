# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level facade wiring shared clients into the origin probe and fetcher."""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import suppress
from typing import Any

from .config import OriginSettings, load_settings
from .http.client import HttpClient, create_default_http_client
from .models import FetchResult, ImageRequest, PreflightResult
from .origin import OriginBodyFetcher, OriginHeaderProbe
from .s3.client import create_s3_client


class OriginResolver:
    """
    Convenience wrapper that shares one pooled HTTP client across probe and fetch.

    S3 clients are built per stage because their timeouts differ (probe vs.
    full fetch). Nothing fetched is kept between calls.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        probe_s3_client: Any | None = None,
        fetch_s3_client: Any | None = None,
        settings: OriginSettings | None = None,
    ):
        self.settings = settings or load_settings()
        self._owned: list[Any] = []
        if http_client is None:
            http_client = create_default_http_client(self.settings)
            self._owned.append(http_client)
        if probe_s3_client is None:
            probe_s3_client = create_s3_client(self.settings, timeout=self.settings.probe_timeout)
            self._owned.append(probe_s3_client)
        if fetch_s3_client is None:
            fetch_s3_client = create_s3_client(self.settings, timeout=self.settings.fetch_timeout)
            self._owned.append(fetch_s3_client)

        self.http_client = http_client
        self.probe = OriginHeaderProbe(self.http_client, probe_s3_client, self.settings)
        self.fetcher = OriginBodyFetcher(self.http_client, fetch_s3_client, self.settings)

    def validate_origin_url(self, url: str, request: ImageRequest) -> PreflightResult:
        return self.probe.validate_origin_url(url, request)

    def fetch_image(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        request_id: str | None = None,
    ) -> FetchResult:
        return self.fetcher.fetch_image(url, headers, request_id)

    def resolve(self, request: ImageRequest, request_id: str | None = None) -> FetchResult:
        """Run the preflight probe and then the full fetch for ``request``."""
        self.validate_origin_url(request.source_url, request)
        return self.fetch_image(request.source_url, request.client_headers, request_id)

    def close(self) -> None:
        """Close the clients this resolver built; injected clients belong to the caller."""
        while self._owned:
            client = self._owned.pop()
            with suppress(Exception):
                client.close()

    def __enter__(self) -> OriginResolver:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
