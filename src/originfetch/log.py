# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for OriginFetch."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

DEFAULT_LOG_LEVEL = os.getenv("ORIGINFETCH_LOG_LEVEL", "WARNING").upper()


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for library/service use."""
    effective_level = (level or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, effective_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )


def log_event(logger: logging.Logger, **fields: Any) -> None:
    """Emit one structured record as a single JSON line at INFO level."""
    logger.info(json.dumps(fields, default=str))


__all__ = ["log_event", "setup_logging"]
