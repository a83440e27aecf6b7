from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

SNIPPET_LENGTH = 50
MAX_REPORTED_TAGS = 3


class MutationKind(str, Enum):
    SUBTREE = "subtree-change"
    ATTRIBUTE = "attribute-change"
    TEXT = "text-change"


class SnapshotKind(str, Enum):
    INITIAL = "initial"
    SIGNIFICANT_CHANGE = "significant-change"


@dataclass(frozen=True, slots=True)
class MutationRecord:
    """One observed change, normalised from a raw browser event.

    Values are kept in full so the significance verdict never depends on the
    reporting truncation; the ``*_snippet`` properties give the reported form.
    """

    kind: MutationKind
    target: str
    timestamp: float = 0.0
    added_tags: tuple[str, ...] = ()
    removed_tags: tuple[str, ...] = ()
    added_count: int = 0
    removed_count: int = 0
    attribute: str | None = None
    new_value: str | None = None
    text: str | None = None
    significant: bool = False

    @property
    def new_value_snippet(self) -> str | None:
        if self.new_value is None:
            return None
        return self.new_value[:SNIPPET_LENGTH]

    @property
    def text_snippet(self) -> str | None:
        if self.text is None:
            return None
        return self.text[:SNIPPET_LENGTH]

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "kind": self.kind.value,
            "target": self.target,
            "timestamp": self.timestamp,
            "significant": self.significant,
        }
        if self.kind is MutationKind.SUBTREE:
            payload["added"] = list(self.added_tags)
            payload["removed"] = list(self.removed_tags)
            payload["addedCount"] = self.added_count
            payload["removedCount"] = self.removed_count
        elif self.kind is MutationKind.ATTRIBUTE:
            payload["attribute"] = self.attribute
            payload["newValue"] = self.new_value_snippet
        elif self.kind is MutationKind.TEXT:
            payload["text"] = self.text_snippet
        return payload


@dataclass(frozen=True, slots=True)
class SnapshotEntry:
    index: int
    file: str
    path: Path
    elapsed_ms: int
    kind: SnapshotKind
    mutations: tuple[MutationRecord, ...] = ()
    significant_count: int = 0
    trivial_count: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "file": self.file,
            "elapsedMs": self.elapsed_ms,
            "kind": self.kind.value,
            "significantCount": self.significant_count,
            "trivialCount": self.trivial_count,
            "mutations": [record.to_payload() for record in self.mutations],
        }


@dataclass(frozen=True, slots=True)
class CaptureSession:
    """Immutable result of one capture run."""

    snapshots: tuple[SnapshotEntry, ...]
    total_mutation_count: int
    significant_mutation_count: int
    error: Exception | None = None
    cancelled: bool = False
    screenshots: tuple[Path, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "screenshots", tuple(entry.path for entry in self.snapshots))

    @property
    def completed(self) -> bool:
        return self.error is None

    @property
    def status(self) -> str:
        if self.error is not None:
            return "capture-failed"
        if self.cancelled:
            return "cancelled"
        return "completed"

    def to_payload(self) -> dict[str, Any]:
        return {
            "screenshots": [str(path) for path in self.screenshots],
            "totalMutations": self.total_mutation_count,
            "significantMutations": self.significant_mutation_count,
            "timeline": [entry.to_payload() for entry in self.snapshots],
            "status": self.status,
            "error": str(self.error) if self.error is not None else None,
        }
