# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for OriginFetch."""

from ..http.models import Headers, HttpRequest, HttpResponse
from .fetch import FetchResult, ImageMetadata, OriginPayload, OriginType, PreflightResult
from .request import ImageRequest, RequestTimings, ResolutionTimings

__all__ = [
    "FetchResult",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "ImageMetadata",
    "ImageRequest",
    "OriginPayload",
    "OriginType",
    "PreflightResult",
    "RequestTimings",
    "ResolutionTimings",
]
