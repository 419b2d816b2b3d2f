from __future__ import annotations

import secrets
import threading
import time
from typing import Callable, Optional


class ReceiptNumberGenerator:
    """Receipt numbers like ``REC-0640A1B2C3D4E-7F3A``.

    The middle part is a microsecond clock in fixed-width hex that never goes
    backwards within a process, so numbers sort by creation. The random
    suffix keeps two processes issuing in the same microsecond apart.
    """

    STAMP_WIDTH = 13

    def __init__(self, *, clock_us: Optional[Callable[[], int]] = None, suffix_bytes: int = 2):
        self._clock_us = clock_us or (lambda: time.time_ns() // 1000)
        self._suffix_bytes = int(suffix_bytes)
        self._last = 0
        self._lock = threading.Lock()

    def _next_stamp(self) -> int:
        with self._lock:
            stamp = max(int(self._clock_us()), self._last + 1)
            self._last = stamp
            return stamp

    def next(self, prefix: str) -> str:
        stamp = self._next_stamp()
        suffix = secrets.token_hex(self._suffix_bytes).upper()
        return f"{prefix}-{stamp:0{self.STAMP_WIDTH}X}-{suffix}"


def new_record_id(prefix: str) -> str:
    """Random record id such as ``PAY-5f1c9e2a7b``."""
    return f"{prefix}-{secrets.token_hex(5)}"
