from __future__ import annotations

from typing import Protocol

from .snapshot import Snapshot


class SnapshotSource(Protocol):
    def fetch_snapshot(self) -> Snapshot:
        """Read every collection in one consistent pass.

        Raises SourceUnavailable when the backing store is unreachable.
        """

        raise NotImplementedError
