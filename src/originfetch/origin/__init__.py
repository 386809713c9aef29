# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Origin probe and fetch components."""

from .fetcher import OriginBodyFetcher
from .probe import OriginHeaderProbe

__all__ = ["OriginBodyFetcher", "OriginHeaderProbe"]
