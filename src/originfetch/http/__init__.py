# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP client exports."""

from .adapters import StubHttpClient
from .client import HttpClient, create_default_http_client
from .headers import header_value, merge_headers, normalize_headers
from .httpx_client import HttpxClient
from .models import Headers, HttpRequest, HttpResponse
from .url import UrlValidationError, is_http_url, sanitize_url, validate_url

__all__ = [
    "Headers",
    "HttpClient",
    "HttpxClient",
    "HttpRequest",
    "HttpResponse",
    "StubHttpClient",
    "UrlValidationError",
    "create_default_http_client",
    "header_value",
    "is_http_url",
    "merge_headers",
    "normalize_headers",
    "sanitize_url",
    "validate_url",
]
