from __future__ import annotations

import logging

from domcapture.core.metadata import MutationRecord, SnapshotEntry, SnapshotKind


def describe_mutation(record: MutationRecord) -> str:
    description = f"  * {record.kind.value}: {record.target}"
    if record.added_tags:
        description += f" +[{', '.join(record.added_tags)}]"
    if record.removed_tags:
        description += f" -[{', '.join(record.removed_tags)}]"
    if record.attribute:
        description += f' @{record.attribute}="{record.new_value_snippet or ""}"'
    if record.text_snippet:
        description += f' "{record.text_snippet}"'
    return description


def snapshot_headline(entry: SnapshotEntry) -> str:
    if entry.kind is SnapshotKind.INITIAL:
        return f"{entry.elapsed_ms}ms {entry.file} (initial state)"
    return f"{entry.elapsed_ms}ms {entry.file} ({entry.significant_count} significant, {entry.trivial_count} trivial)"


def log_snapshot(logger: logging.Logger, entry: SnapshotEntry) -> None:
    logger.info(snapshot_headline(entry))
    for record in entry.mutations:
        logger.info(describe_mutation(record))
