from __future__ import annotations

from typing import Protocol

from .model import LedgerTransaction


class LedgerRepository(Protocol):
    def append(self, txn: LedgerTransaction) -> None:
        """Strict append keyed by receipt number; never updates."""

        raise NotImplementedError
