# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
OriginFetch package entrypoint.

Resolves an image source URL (S3 object or HTTP(S) resource) into validated
image bytes. A metadata-only preflight probe checks reachability and declared
content-type; the full fetch retrieves the body and cross-checks it against
byte signatures. Every failure is reported as one ``OriginError`` carrying a
status code, a symbolic kind and a message.
"""

from .config import OriginSettings, load_settings
from .errors import ErrorCategory, FetchErrorKind, OriginError, PreflightErrorKind
from .http import HttpClient, HttpRequest, HttpResponse, HttpxClient, create_default_http_client
from .log import setup_logging
from .models import (
    FetchResult,
    ImageMetadata,
    ImageRequest,
    OriginType,
    PreflightResult,
    RequestTimings,
    ResolutionTimings,
)
from .origin import OriginBodyFetcher, OriginHeaderProbe
from .runtime import OriginResolver
from .version import __version__

__all__ = [
    "ErrorCategory",
    "FetchErrorKind",
    "FetchResult",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpxClient",
    "ImageMetadata",
    "ImageRequest",
    "OriginBodyFetcher",
    "OriginError",
    "OriginHeaderProbe",
    "OriginResolver",
    "OriginSettings",
    "OriginType",
    "PreflightErrorKind",
    "PreflightResult",
    "RequestTimings",
    "ResolutionTimings",
    "create_default_http_client",
    "load_settings",
    "setup_logging",
    "__version__",
]
