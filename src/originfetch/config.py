# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for OriginFetch."""

import os
from dataclasses import dataclass

from .version import __version__

DEFAULT_USER_AGENT = f"OriginFetch/{__version__}"
DEFAULT_ALLOWED_PROTOCOLS: tuple[str, ...] = ("https",)


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional_str_env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return None


def _protocols_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    protocols = tuple(p.strip().lower().rstrip(":") for p in value.split(",") if p.strip())
    return protocols or default


@dataclass
class OriginSettings:
    """Origin probe/fetch defaults."""

    probe_timeout: float = 5.0
    fetch_timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True
    allowed_protocols: tuple[str, ...] = DEFAULT_ALLOWED_PROTOCOLS
    aws_region: str | None = None
    s3_endpoint_url: str | None = None

    @classmethod
    def from_env(cls) -> "OriginSettings":
        """Create settings from environment variables (evaluated at call time)."""
        probe_timeout = _float_env("ORIGINFETCH_PROBE_TIMEOUT", cls.probe_timeout)
        if probe_timeout <= 0:
            probe_timeout = cls.probe_timeout
        fetch_timeout = _float_env("ORIGINFETCH_FETCH_TIMEOUT", cls.fetch_timeout)
        if fetch_timeout <= 0:
            fetch_timeout = cls.fetch_timeout
        return cls(
            probe_timeout=probe_timeout,
            fetch_timeout=fetch_timeout,
            user_agent=os.getenv("ORIGINFETCH_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("ORIGINFETCH_VERIFY_SSL", cls.verify_ssl),
            allowed_protocols=_protocols_env("ORIGINFETCH_ALLOWED_PROTOCOLS", cls.allowed_protocols),
            aws_region=_optional_str_env("ORIGINFETCH_AWS_REGION", "AWS_REGION"),
            s3_endpoint_url=_optional_str_env("ORIGINFETCH_S3_ENDPOINT_URL"),
        )


def load_settings() -> OriginSettings:
    """Load origin settings from environment with sensible defaults."""
    return OriginSettings.from_env()
