from __future__ import annotations

from pathlib import Path


class ArtifactManager:
    """Owns the output directory and the screenshot naming convention."""

    def __init__(self, root: str | Path = ".", label: str | None = None, metadata_file: str = "changes.json") -> None:
        self.root = Path(root)
        self.label = label
        self.metadata_file = metadata_file
        self._ensure_structure()

    def _ensure_structure(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def snapshot_file(self, index: int) -> str:
        if index == 0 and self.label:
            return f"shot_0_{self.label}.png"
        return f"shot_{index}.png"

    def snapshot_path(self, index: int) -> Path:
        return self.root / self.snapshot_file(index)

    @property
    def metadata_path(self) -> Path:
        return self.root / self.metadata_file

    def reset(self) -> Path:
        """Removes screenshots and metadata left by a previous session."""

        self._ensure_structure()
        for child in self.root.glob("shot_*.png"):
            if child.is_file():
                child.unlink()
        if self.metadata_path.is_file():
            self.metadata_path.unlink()
        return self.root
