from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from typing import Any


def wakes_capture(event: Mapping[str, Any]) -> bool:
    """Driver-side pre-filter: only element subtree changes and text changes raise the flag."""

    event_type = event.get("type")
    if not isinstance(event_type, str):
        return False
    if event_type in {"childList", "subtree-change"}:
        return bool(event.get("addedCount") or event.get("removedCount") or event.get("added") or event.get("removed"))
    return event_type in {"characterData", "text-change"}


class MutationBuffer:
    """Lock-guarded mailbox shared by a change producer and the capture loop.

    ``publish`` may be called from any thread. ``take_activity`` and ``drain``
    belong to the single consumer.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._origin = clock()
        self._lock = threading.Lock()
        self._events: list[dict[str, Any]] = []
        self._activity = False

    def publish(self, event: Mapping[str, Any], wake: bool | None = None) -> None:
        payload = dict(event)
        payload.setdefault("timestamp", (self._clock() - self._origin) * 1000.0)
        should_wake = wakes_capture(payload) if wake is None else wake
        with self._lock:
            self._events.append(payload)
            if should_wake:
                self._activity = True

    def take_activity(self) -> bool:
        with self._lock:
            activity = self._activity
            self._activity = False
        return activity

    def drain(self) -> list[dict[str, Any]]:
        with self._lock:
            events, self._events = self._events, []
        return events

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
