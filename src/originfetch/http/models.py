# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used by the origin probe and fetcher."""

from __future__ import annotations

from dataclasses import dataclass, field
from ..errors import ErrorCategory

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    timeout: float | None = None
    allow_redirects: bool = True


@dataclass
class HttpResponse:
    """
    Normalized HTTP response.

    ``ok`` reports transport success only; an origin answering 404 still yields
    ``ok=True`` with ``status_code=404``. Transport failures carry
    ``error_category`` so callers can branch without touching library exceptions.
    """

    ok: bool
    status_code: int | None = None
    reason_phrase: str = ""
    headers: Headers = field(default_factory=dict)
    content: bytes = b""
    url: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    error_category: ErrorCategory = ErrorCategory.NONE

    @property
    def is_success(self) -> bool:
        return self.ok and self.status_code is not None and 200 <= self.status_code < 300
