# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""S3 origin helpers."""

from .client import create_s3_client
from .errors import S3ErrorMapping, client_error_status, map_s3_error
from .headers import FORWARDED_HEADER_PREFIXES, is_forwardable_header, object_request_params
from .url import S3Location, S3UrlError, is_s3_url, map_header_name, parse_s3_url

__all__ = [
    "FORWARDED_HEADER_PREFIXES",
    "S3ErrorMapping",
    "S3Location",
    "S3UrlError",
    "client_error_status",
    "create_s3_client",
    "is_forwardable_header",
    "is_s3_url",
    "map_header_name",
    "map_s3_error",
    "object_request_params",
    "parse_s3_url",
]
