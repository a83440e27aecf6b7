from __future__ import annotations

import logging
from pathlib import Path

from domcapture.core.metadata import CaptureSession, MutationRecord, SnapshotEntry, SnapshotKind

logger = logging.getLogger(__name__)


class SessionRecorder:
    """Append-only timeline of snapshots plus running mutation totals."""

    def __init__(self, max_snapshots: int) -> None:
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")
        self.max_snapshots = max_snapshots
        self._timeline: list[SnapshotEntry] = []
        self.total_mutation_count = 0
        self.significant_mutation_count = 0

    @property
    def timeline(self) -> tuple[SnapshotEntry, ...]:
        return tuple(self._timeline)

    @property
    def count(self) -> int:
        return len(self._timeline)

    @property
    def full(self) -> bool:
        return len(self._timeline) >= self.max_snapshots

    @property
    def next_index(self) -> int:
        return len(self._timeline)

    def count_mutations(self, total: int, significant: int) -> None:
        if significant > total or significant < 0:
            raise ValueError("significant count must be between 0 and total")
        self.total_mutation_count += total
        self.significant_mutation_count += significant

    def add_snapshot(
        self,
        *,
        file: str,
        path: Path,
        elapsed_ms: int,
        kind: SnapshotKind,
        mutations: tuple[MutationRecord, ...] = (),
        trivial_count: int = 0,
    ) -> SnapshotEntry | None:
        if self.full:
            logger.warning("Dropping snapshot %s: session already holds %d snapshots", file, self.max_snapshots)
            return None
        if self._timeline and elapsed_ms < self._timeline[-1].elapsed_ms:
            raise ValueError("snapshot timeline must be non-decreasing in time")
        entry = SnapshotEntry(
            index=self.next_index,
            file=file,
            path=path,
            elapsed_ms=elapsed_ms,
            kind=kind,
            mutations=tuple(record for record in mutations if record.significant),
            significant_count=sum(1 for record in mutations if record.significant),
            trivial_count=trivial_count,
        )
        self._timeline.append(entry)
        return entry

    def finalize(self, error: Exception | None = None, cancelled: bool = False) -> CaptureSession:
        return CaptureSession(
            snapshots=tuple(self._timeline),
            total_mutation_count=self.total_mutation_count,
            significant_mutation_count=self.significant_mutation_count,
            error=error,
            cancelled=cancelled,
        )
