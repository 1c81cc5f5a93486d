"""Absolute deadlines threaded through every I/O step of a request."""
from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass(frozen=True)
class Deadline:
    """A point on the monotonic clock after which work must be abandoned.

    Deadlines only ever shrink: ``clamp`` returns the earlier of the current
    deadline and ``now + budget``.
    """

    expires_at: float

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(expires_at=time.monotonic() + seconds)

    @classmethod
    def within(cls, seconds: float, parent: "Deadline | None" = None) -> "Deadline":
        """Budget-based deadline, bounded by ``parent`` when one is given."""
        if parent is None:
            return cls.after(seconds)
        return parent.clamp(seconds)

    def clamp(self, seconds: float) -> "Deadline":
        candidate = time.monotonic() + seconds
        if candidate < self.expires_at:
            return Deadline(expires_at=candidate)
        return self

    def remaining(self) -> float:
        return max(self.expires_at - time.monotonic(), 0.0)

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at
