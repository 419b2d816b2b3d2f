from __future__ import annotations

from typing import Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def upsert_many(self, records: Sequence[AttendanceRecord]) -> Sequence[AttendanceRecord]:
        """Upsert by natural key in one transaction: all rows apply or none do.

        Returns the records with their storage ids filled in.
        """

        raise NotImplementedError
