from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import now_local, parse_period
from ..common.locks import KeyedLocks
from ..core.exceptions import PeriodLocked
from ..store.entity_store import EntityStore
from .model import MonthlyLock
from .repository import MonthlyLockRepository

logger = logging.getLogger(__name__)


class PeriodLockGuard:
    """Open/closed gate per billing month.

    A month with no status row is open.
    """

    def __init__(self, store: EntityStore, locks_repo: MonthlyLockRepository, *, clock=now_local):
        self._store = store
        self._repo = locks_repo
        self._clock = clock
        self._locks = KeyedLocks()

    def hold(self, *period_months: str):
        """Serialize with open/close of the given months.

        Writers hold this around their lock check and the write it gates, so a
        close cannot land in between. Take it before any per-record lock.
        """
        return self._locks.hold_many(parse_period(p) for p in period_months)

    def is_locked(self, period_month: str) -> bool:
        period = parse_period(period_month)
        lock = self._store.snapshot.lock_for(period)
        return bool(lock and lock.is_closed)

    def ensure_open(self, period_month: str) -> None:
        period = parse_period(period_month)
        if self.is_locked(period):
            logger.warning("Write refused: period %s is closed", period)
            raise PeriodLocked(period)

    def status(self, period_month: str) -> MonthlyLock:
        period = parse_period(period_month)
        return self._store.snapshot.lock_for(period) or MonthlyLock.open(period)

    def set_locked(
        self,
        period_month: str,
        closed: bool,
        *,
        actor: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> MonthlyLock:
        period = parse_period(period_month)
        with self.hold(period):
            current = self.status(period)
            if current.is_closed == bool(closed):
                return current

            if closed:
                lock = MonthlyLock(period, True, closed_by=actor, closed_at=at or self._clock())
            else:
                lock = MonthlyLock.open(period)
            self._repo.save(lock)
            self._store.apply(lambda snap: snap.with_lock(lock))

        logger.info("Period %s %s by %s", period, "closed" if closed else "re-opened", actor or "-")
        return lock

    def list_statuses(self) -> list[MonthlyLock]:
        return sorted(self._store.snapshot.monthly_locks, key=lambda m: m.period_month, reverse=True)
