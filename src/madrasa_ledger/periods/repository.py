from __future__ import annotations

from typing import Protocol

from .model import MonthlyLock


class MonthlyLockRepository(Protocol):
    def save(self, lock: MonthlyLock) -> None:
        """Create or update the status row of ``lock.period_month``."""

        raise NotImplementedError
