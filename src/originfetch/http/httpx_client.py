# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import httpx

from ..config import OriginSettings, load_settings
from ..deadline import Deadline, run_with_deadline
from ..errors import categorize_exception
from .client import HttpClient
from .models import HttpRequest, HttpResponse


class HttpxClient(HttpClient):
    """
    Synchronous httpx client wrapper.

    One pooled ``httpx.Client`` is shared by every request. Each request gets a
    total deadline covering connect, headers and body; an expired deadline
    aborts only that call. Headers are sent exactly as given.
    """

    def __init__(self, settings: OriginSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_settings()
        self._client = client or httpx.Client(
            follow_redirects=True,
            timeout=self.settings.fetch_timeout,
            verify=self.settings.verify_ssl,
        )

    def request(self, request: HttpRequest) -> HttpResponse:
        timeout = request.timeout if request.timeout is not None else self.settings.fetch_timeout
        deadline = Deadline(timeout)
        try:
            return run_with_deadline(lambda d: self._send(request, d), deadline, name="originfetch-http")
        except Exception as exc:  # noqa: BLE001
            return HttpResponse(
                ok=False,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                error_category=categorize_exception(exc),
            )

    def _send(self, request: HttpRequest, deadline: Deadline) -> HttpResponse:
        with self._client.stream(
            request.method,
            request.url,
            headers=httpx.Headers(request.headers or {}),
            timeout=httpx.Timeout(deadline.phase_timeout()),
            follow_redirects=request.allow_redirects,
        ) as resp:
            content = bytearray()
            for chunk in resp.iter_bytes():
                deadline.check()
                content.extend(chunk)
        deadline.check()

        return HttpResponse(
            ok=True,
            status_code=resp.status_code,
            reason_phrase=resp.reason_phrase,
            headers=dict(resp.headers),
            content=bytes(content),
            url=str(resp.url),
        )

    def close(self) -> None:
        self._client.close()
