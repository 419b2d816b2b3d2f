from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Iterable, Union

from ...core.enums import LedgerKind, SettlementStatus
from ...students.model import Student
from ...teachers.model import Teacher
from ..model import LedgerTransaction, LedgerWindow, Settlement

Subject = Union[Student, Teacher]


class LedgerCalculator(ABC):
    """Calculator interface (Strategy Pattern for settlement)."""

    @abstractmethod
    def obligation_for(self, subject: Subject) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def cumulative_paid(
        self,
        transactions: Iterable[LedgerTransaction],
        kind: LedgerKind,
        subject_id: str,
        window: LedgerWindow,
    ) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def settlement_status(self, paid: Decimal, obligation: Decimal, kind: LedgerKind) -> SettlementStatus:
        raise NotImplementedError

    @abstractmethod
    def settle(
        self,
        subject: Subject,
        transactions: Iterable[LedgerTransaction],
        window: LedgerWindow,
    ) -> Settlement:
        raise NotImplementedError
