"""Significance rules for observed document mutations.

Element insertion/removal and text changes always count. Attribute changes
only count when the attribute is state-bearing or a ``style`` value toggles
``display``/``visibility`` without touching focus/caret styling. Everything
else is treated as cosmetic noise.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from domcapture.core.exceptions import ClassificationInputError
from domcapture.core.metadata import MAX_REPORTED_TAGS, MutationKind, MutationRecord

logger = logging.getLogger(__name__)

SIGNIFICANT_ATTRIBUTES = frozenset(
    {
        "aria-expanded",
        "aria-hidden",
        "aria-selected",
        "aria-checked",
        "hidden",
        "disabled",
        "checked",
        "selected",
        "open",
        "display",
        "visibility",
        "src",
        "href",
        "value",
    }
)
TRIVIAL_STYLE_TOKENS = ("caret-color", "cursor", "outline")
VISIBILITY_STYLE_TOKENS = ("display", "visibility")

RAW_TYPE_KINDS = {
    "childList": MutationKind.SUBTREE,
    "attributes": MutationKind.ATTRIBUTE,
    "characterData": MutationKind.TEXT,
}
RAW_TYPE_KINDS.update({kind.value: kind for kind in MutationKind})


@dataclass(frozen=True, slots=True)
class Partition:
    significant: tuple[MutationRecord, ...]
    trivial: int
    malformed: int

    @property
    def total(self) -> int:
        return len(self.significant) + self.trivial + self.malformed


def classify(record: MutationRecord) -> bool:
    if record.kind is MutationKind.SUBTREE:
        return record.added_count > 0 or record.removed_count > 0
    if record.kind is MutationKind.TEXT:
        return True
    if record.kind is MutationKind.ATTRIBUTE:
        return _classify_attribute(record.attribute or "", record.new_value or "")
    return False


def _classify_attribute(name: str, value: str) -> bool:
    if name in SIGNIFICANT_ATTRIBUTES:
        return True
    if name != "style":
        return False
    # Focus and caret styling wins even when display/visibility also appear.
    if any(token in value for token in TRIVIAL_STYLE_TOKENS):
        return False
    return any(token in value for token in VISIBILITY_STYLE_TOKENS)


def parse_event(raw: Any) -> MutationRecord:
    """Builds a classified record from a raw change event.

    Any ``significant`` key carried by the event is ignored; the verdict is
    always recomputed here.
    """

    if not isinstance(raw, Mapping):
        raise ClassificationInputError(f"Change event must be a mapping, got {type(raw).__name__}")
    event_type = raw.get("type")
    kind = RAW_TYPE_KINDS.get(event_type) if isinstance(event_type, str) else None
    if kind is None:
        raise ClassificationInputError(f"Unknown change event type: {raw.get('type')!r}")
    target = raw.get("target")
    if not isinstance(target, str) or not target:
        raise ClassificationInputError("Change event has no target selector")
    timestamp = raw.get("timestamp", 0.0)
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        raise ClassificationInputError(f"Change event timestamp is not numeric: {timestamp!r}")

    fields: dict[str, Any] = {"kind": kind, "target": target, "timestamp": float(timestamp)}
    if kind is MutationKind.SUBTREE:
        added = _tag_list(raw, "added")
        removed = _tag_list(raw, "removed")
        fields["added_count"] = _element_count(raw, "addedCount", added)
        fields["removed_count"] = _element_count(raw, "removedCount", removed)
        fields["added_tags"] = tuple(added[:MAX_REPORTED_TAGS])
        fields["removed_tags"] = tuple(removed[:MAX_REPORTED_TAGS])
    elif kind is MutationKind.ATTRIBUTE:
        attribute = raw.get("attribute")
        if not isinstance(attribute, str) or not attribute:
            raise ClassificationInputError("Attribute change event has no attribute name")
        fields["attribute"] = attribute
        fields["new_value"] = _optional_text(raw.get("newValue"))
    else:
        fields["text"] = _optional_text(raw.get("text")) or ""

    record = MutationRecord(**fields)
    return replace(record, significant=classify(record))


def partition(raw_events: Iterable[Any]) -> Partition:
    significant: list[MutationRecord] = []
    trivial = 0
    malformed = 0
    for raw in raw_events:
        try:
            record = parse_event(raw)
        except ClassificationInputError as exc:
            logger.debug("Ignoring malformed change event: %s", exc)
            malformed += 1
            continue
        if record.significant:
            significant.append(record)
        else:
            trivial += 1
    return Partition(significant=tuple(significant), trivial=trivial, malformed=malformed)


def _tag_list(raw: Mapping[str, Any], key: str) -> list[str]:
    value = raw.get(key) or []
    if not isinstance(value, (list, tuple)):
        raise ClassificationInputError(f"Change event field {key!r} must be a list of tag names")
    return [str(tag).lower() for tag in value]


def _element_count(raw: Mapping[str, Any], key: str, tags: list[str]) -> int:
    count = raw.get(key)
    if count is None:
        return len(tags)
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise ClassificationInputError(f"Change event field {key!r} must be a non-negative integer")
    return max(count, len(tags))


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)
