from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from domcapture.config.schema import RunConfig


class ConfigLoader:
    """Loads the JSON capture configuration and applies command-line overrides."""

    @staticmethod
    def load(path: str | Path) -> RunConfig:
        with Path(path).open("r", encoding="utf-8") as handle:
            return RunConfig.model_validate(json.load(handle))

    @classmethod
    def resolve(
        cls,
        path: str | Path | None = None,
        capture: dict[str, Any] | None = None,
        browser: dict[str, Any] | None = None,
    ) -> RunConfig:
        """Starts from ``path`` (or defaults) and revalidates after applying non-``None`` overrides."""

        payload = (cls.load(path) if path else RunConfig()).model_dump()
        for section, overrides in (("capture", capture), ("browser", browser)):
            payload[section].update({key: value for key, value in (overrides or {}).items() if value is not None})
        return RunConfig.model_validate(payload)
