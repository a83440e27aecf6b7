"""Debounced sampling of page mutations into a bounded screenshot timeline.

The loop takes an initial screenshot, installs the change subscription, then
wakes every ``debounce_ms`` to check whether anything happened. A burst of
mutations between two wake-ups is judged as one batch: if any record in it is
significant a single screenshot is taken, otherwise the batch only feeds the
running totals. The session ends when the snapshot budget or the duration
bound is exhausted, when ``cancel`` is set, or when the driver fails.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from domcapture.core.classifier import partition
from domcapture.core.driver import CaptureDriver, MutationSource
from domcapture.core.exceptions import CaptureError
from domcapture.core.metadata import CaptureSession, MutationRecord, SnapshotKind
from domcapture.core.recorder import SessionRecorder
from domcapture.logging.artifacts import ArtifactManager
from domcapture.logging.timeline import log_snapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_SNAPSHOTS = 10
DEFAULT_MAX_DURATION_MS = 2000
DEFAULT_DEBOUNCE_MS = 100


class CaptureLoop:
    def __init__(
        self,
        driver: CaptureDriver,
        *,
        max_snapshots: int = DEFAULT_MAX_SNAPSHOTS,
        max_duration_ms: int = DEFAULT_MAX_DURATION_MS,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        artifacts: ArtifactManager | None = None,
        trigger: Callable[[], None] | None = None,
        cancel: threading.Event | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")
        if max_duration_ms <= 0 or debounce_ms <= 0:
            raise ValueError("max_duration_ms and debounce_ms must be positive")
        self.driver = driver
        self.max_snapshots = max_snapshots
        self.max_duration_ms = max_duration_ms
        self.debounce_ms = debounce_ms
        self.artifacts = artifacts or ArtifactManager()
        self.trigger = trigger
        self.cancel = cancel
        self.clock = clock
        self.sleep = sleep

    def run(self) -> CaptureSession:
        recorder = SessionRecorder(self.max_snapshots)
        try:
            self._snapshot(recorder, SnapshotKind.INITIAL, elapsed_ms=0)
        except CaptureError as exc:
            logger.error("Initial screenshot failed: %s", exc)
            return recorder.finalize(error=exc)

        start = self.clock()
        try:
            buffer = self.driver.subscribe_to_changes()
            if self.trigger is not None:
                self.trigger()
            cancelled = self._sample(recorder, buffer, start)
            self._account_leftovers(recorder, buffer)
        except CaptureError as exc:
            logger.error("Capture stopped after %d snapshot(s): %s", recorder.count, exc)
            return recorder.finalize(error=exc)
        return recorder.finalize(cancelled=cancelled)

    def _sample(self, recorder: SessionRecorder, buffer: MutationSource, start: float) -> bool:
        """Runs ticks until a terminal condition; returns True when cancelled."""

        while not recorder.full and self._elapsed_ms(start) < self.max_duration_ms:
            if self.cancel is not None and self.cancel.is_set():
                logger.info("Capture cancelled after %d snapshot(s)", recorder.count)
                return True
            self.sleep(self.debounce_ms / 1000)
            if self._elapsed_ms(start) >= self.max_duration_ms:
                break
            self._tick(recorder, buffer, start)
        return False

    def _tick(self, recorder: SessionRecorder, buffer: MutationSource, start: float) -> None:
        if not buffer.take_activity():
            return
        batch = partition(buffer.drain())
        recorder.count_mutations(batch.total, len(batch.significant))
        if not batch.significant:
            logger.debug("No significant change in %d drained record(s)", batch.total)
            return
        self._snapshot(
            recorder,
            SnapshotKind.SIGNIFICANT_CHANGE,
            elapsed_ms=self._elapsed_ms(start),
            mutations=batch.significant,
            trivial_count=batch.total - len(batch.significant),
        )

    def _snapshot(
        self,
        recorder: SessionRecorder,
        kind: SnapshotKind,
        *,
        elapsed_ms: int,
        mutations: tuple[MutationRecord, ...] = (),
        trivial_count: int = 0,
    ) -> None:
        index = recorder.next_index
        path = self.artifacts.snapshot_path(index)
        self.driver.take_snapshot(path)
        entry = recorder.add_snapshot(
            file=self.artifacts.snapshot_file(index),
            path=path,
            elapsed_ms=elapsed_ms,
            kind=kind,
            mutations=mutations,
            trivial_count=trivial_count,
        )
        if entry is not None:
            log_snapshot(logger, entry)

    @staticmethod
    def _account_leftovers(recorder: SessionRecorder, buffer: MutationSource) -> None:
        # Records still buffered at the end are counted but never trigger a screenshot.
        batch = partition(buffer.drain())
        if batch.total:
            recorder.count_mutations(batch.total, len(batch.significant))
            logger.debug("Counted %d record(s) left in the buffer at session end", batch.total)

    def _elapsed_ms(self, start: float) -> int:
        return int(round((self.clock() - start) * 1000))


def run_capture(
    driver: CaptureDriver,
    max_snapshots: int = DEFAULT_MAX_SNAPSHOTS,
    max_duration_ms: int = DEFAULT_MAX_DURATION_MS,
    debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    **options,
) -> CaptureSession:
    return CaptureLoop(
        driver,
        max_snapshots=max_snapshots,
        max_duration_ms=max_duration_ms,
        debounce_ms=debounce_ms,
        **options,
    ).run()
