# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Byte-signature sniffing and content-type checks for image payloads."""

from __future__ import annotations

from ..errors import FetchErrorKind, OriginError, PreflightErrorKind

MIN_IMAGE_BYTES = 4
OCTET_STREAM = "binary/octet-stream"

# Ordered; the first matching prefix wins.
SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (bytes.fromhex("FFD8FF"), "jpeg"),
    (bytes.fromhex("89504E47"), "png"),
    (bytes.fromhex("47494638"), "gif"),
    (bytes.fromhex("52494646"), "webp"),
    (bytes.fromhex("49492A00"), "tiff"),
    (bytes.fromhex("4D4D002A"), "tiff"),
)

CONTENT_TYPE_FORMATS: dict[str, str] = {
    "image/webp": "webp",
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/tiff": "tiff",
    "image/gif": "gif",
}

KNOWN_IMAGE_CONTENT_TYPES: tuple[str, ...] = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/tiff",
    "image/avif",
    "image/heif",
)


def detect_format(content: bytes) -> str | None:
    """
    Return the format whose signature prefixes ``content``.

    Raises InvalidImage for payloads below the 4-byte floor; returns None when
    no signature matches.
    """
    if len(content) < MIN_IMAGE_BYTES:
        raise OriginError(415, FetchErrorKind.INVALID_IMAGE, "File too small to be a valid image")
    header = bytes(content[:MIN_IMAGE_BYTES])
    for prefix, fmt in SIGNATURES:
        if header.startswith(prefix):
            return fmt
    return None


def expected_format(content_type: str | None) -> str | None:
    if not content_type:
        return None
    return CONTENT_TYPE_FORMATS.get(content_type.lower())


def validate_image_magic_numbers(content: bytes, content_type: str | None) -> str | None:
    """
    Cross-check the declared content-type against the byte signature.

    A declared type with a known signature must come with some recognizable
    signature; a different recognized signature is accepted. Returns the
    detected format.
    """
    detected = detect_format(content)
    expected = expected_format(content_type)
    if expected and not detected:
        raise OriginError(415, FetchErrorKind.INVALID_IMAGE, f"Invalid or corrupted {expected} file")
    return detected


def is_octet_stream(content_type: str | None) -> bool:
    return bool(content_type) and content_type.strip().lower() == OCTET_STREAM


def is_valid_image_content_type(content_type: str) -> bool:
    lowered = content_type.lower()
    return any(known in lowered for known in KNOWN_IMAGE_CONTENT_TYPES)


def is_preflight_content_type(content_type: str | None) -> bool:
    """Case-sensitive preflight acceptance: ``image/*`` or ``binary/octet-stream``."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip()
    return media_type.startswith("image/") or media_type == OCTET_STREAM


def validate_preflight_content_type(content_type: str | None) -> None:
    if not is_preflight_content_type(content_type):
        raise OriginError(
            400,
            PreflightErrorKind.INVALID_FORMAT,
            f"Origin does not serve image content. Content-Type: {content_type}",
            title="Invalid content type",
        )


def derive_format(detected: str | None, content_type: str | None) -> str | None:
    if detected:
        return detected
    if content_type:
        return content_type.replace("image/", "", 1)
    return None


__all__ = [
    "CONTENT_TYPE_FORMATS",
    "KNOWN_IMAGE_CONTENT_TYPES",
    "MIN_IMAGE_BYTES",
    "OCTET_STREAM",
    "SIGNATURES",
    "derive_format",
    "detect_format",
    "expected_format",
    "is_octet_stream",
    "is_preflight_content_type",
    "is_valid_image_content_type",
    "validate_image_magic_numbers",
    "validate_preflight_content_type",
]
