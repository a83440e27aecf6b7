from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class Viewport(BaseModel):
    width: int = Field(default=1280, gt=0)
    height: int = Field(default=720, gt=0)


class BrowserConfig(BaseModel):
    browser: str = "firefox"
    headless: bool = True
    navigation_timeout_ms: int = Field(default=30000, gt=0)
    viewport: Viewport = Field(default_factory=Viewport)

    @field_validator("browser")
    @classmethod
    def validate_browser(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in {"chrome", "firefox"}:
            raise ValueError(f"Unsupported browser: {value}")
        return normalized


class CaptureConfig(BaseModel):
    max_snapshots: int = Field(default=10, ge=1)
    max_duration_ms: int = Field(default=2000, gt=0)
    debounce_ms: int = Field(default=100, gt=0)
    output_dir: str = "."
    metadata_file: str = "changes.json"
    label: str | None = None

    @field_validator("label", "metadata_file")
    @classmethod
    def validate_file_component(cls, value: str | None) -> str | None:
        if value is not None and ("/" in value or "\\" in value):
            raise ValueError("must be a bare file name component")
        return value


class RunConfig(BaseModel):
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
