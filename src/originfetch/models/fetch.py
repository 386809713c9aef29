# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Origin probe and fetch result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class OriginType(str, Enum):
    S3 = "s3"
    HTTP = "http"


@dataclass(frozen=True)
class PreflightResult:
    origin_type: OriginType
    content_type: str | None
    elapsed_ms: int


@dataclass(frozen=True)
class ImageMetadata:
    size: int
    format: str | None = None


@dataclass
class OriginPayload:
    """Raw body retrieved from an origin before signature validation."""

    content: bytes
    content_type: str | None = None


@dataclass
class FetchResult:
    content: bytes
    content_type: str | None = None
    metadata: ImageMetadata = field(default_factory=lambda: ImageMetadata(size=0))
