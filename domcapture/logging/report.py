from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from domcapture.core.metadata import CaptureSession


class SessionReportWriter:
    """Persists the session report next to its screenshots."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def write(self, session: CaptureSession) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(session.to_payload(), indent=2), encoding="utf-8")
        return self.path

    def read(self) -> dict[str, Any]:
        return json.loads(self.path.read_text(encoding="utf-8"))
