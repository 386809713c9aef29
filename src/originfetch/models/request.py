# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Caller-owned image request models."""

from dataclasses import dataclass


@dataclass
class ResolutionTimings:
    preflight_validation_ms: int | None = None


@dataclass
class RequestTimings:
    request_resolution: ResolutionTimings | None = None


@dataclass
class ImageRequest:
    """
    Inbound image request as seen by origin resolution.

    Created by the surrounding pipeline; the probe only writes
    ``source_image_content_type`` and, when the bucket already exists,
    ``timings.request_resolution.preflight_validation_ms``.
    """

    source_url: str
    client_headers: dict[str, str] | None = None
    source_image_content_type: str | None = None
    timings: RequestTimings | None = None
