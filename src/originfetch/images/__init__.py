# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Image content sniffing exports."""

from .signatures import (
    CONTENT_TYPE_FORMATS,
    SIGNATURES,
    derive_format,
    detect_format,
    is_preflight_content_type,
    is_valid_image_content_type,
    validate_image_magic_numbers,
    validate_preflight_content_type,
)

__all__ = [
    "CONTENT_TYPE_FORMATS",
    "SIGNATURES",
    "derive_format",
    "detect_format",
    "is_preflight_content_type",
    "is_valid_image_content_type",
    "validate_image_magic_numbers",
    "validate_preflight_content_type",
]
