# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""boto3 S3 client factory."""

from __future__ import annotations

from typing import Any

import boto3
from botocore.config import Config

from ..config import OriginSettings, load_settings


def create_s3_client(settings: OriginSettings | None = None, *, timeout: float | None = None) -> Any:
    """
    Build a pooled S3 client with a single attempt per call.

    ``timeout`` bounds connect and read individually; it defaults to the fetch
    timeout. boto3 clients are thread-safe and meant to be shared.
    """
    settings = settings or load_settings()
    effective_timeout = timeout if timeout is not None else settings.fetch_timeout
    config = Config(
        connect_timeout=effective_timeout,
        read_timeout=effective_timeout,
        retries={"total_max_attempts": 1, "mode": "standard"},
        user_agent_extra=settings.user_agent,
    )
    kwargs: dict[str, Any] = {"config": config}
    if settings.aws_region:
        kwargs["region_name"] = settings.aws_region
    if settings.s3_endpoint_url:
        kwargs["endpoint_url"] = settings.s3_endpoint_url
    return boto3.client("s3", **kwargs)


__all__ = ["create_s3_client"]
