# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Total per-call deadlines for blocking origin I/O."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from threading import Event, Thread
from typing import Any, TypeVar

T = TypeVar("T")

# Smallest per-phase timeout handed to a library once the budget is nearly spent.
MIN_PHASE_TIMEOUT = 0.001


class DeadlineExceeded(TimeoutError):
    """Raised when a call outlives its total deadline."""


@dataclass
class Deadline:
    """
    A total time budget for one origin call.

    ``remaining()`` feeds per-phase library timeouts; ``check()`` is called
    between body chunks. ``cancel()`` is set by the waiting caller once the
    budget is gone so the worker stops reading at the next chunk.
    """

    timeout: float
    started: float = field(default_factory=time.monotonic)
    _cancelled: Event = field(default_factory=Event, repr=False)

    @property
    def expires_at(self) -> float:
        return self.started + self.timeout

    def remaining(self) -> float:
        return max(self.expires_at - time.monotonic(), 0.0)

    def phase_timeout(self) -> float:
        return max(self.remaining(), MIN_PHASE_TIMEOUT)

    def expired(self) -> bool:
        return self._cancelled.is_set() or time.monotonic() >= self.expires_at

    def cancel(self) -> None:
        self._cancelled.set()

    def check(self) -> None:
        if self.expired():
            raise DeadlineExceeded(f"Deadline of {self.timeout}s exceeded")

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)


def run_with_deadline(func: Callable[[Deadline], T], deadline: Deadline, *, name: str = "originfetch-call") -> T:
    """
    Run ``func(deadline)`` on a daemon worker and wait no longer than the budget.

    On expiry the deadline is cancelled and ``DeadlineExceeded`` is raised in the
    caller; the worker unwinds on its own once its per-phase timeout fires or
    its next chunk check sees the cancellation. Exceptions raised by ``func``
    are re-raised in the caller.
    """
    outcome: dict[str, Any] = {}

    def _target() -> None:
        try:
            outcome["value"] = func(deadline)
        except Exception as exc:  # noqa: BLE001
            outcome["error"] = exc

    worker = Thread(target=_target, name=name, daemon=True)
    worker.start()
    worker.join(timeout=deadline.remaining())
    if worker.is_alive():
        deadline.cancel()
        raise DeadlineExceeded(f"Deadline of {deadline.timeout}s exceeded")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["value"]


__all__ = ["Deadline", "DeadlineExceeded", "MIN_PHASE_TIMEOUT", "run_with_deadline"]
