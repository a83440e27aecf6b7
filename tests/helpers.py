from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import pytest
from selenium.common.exceptions import WebDriverException

from domcapture.config.schema import BrowserConfig
from domcapture.core.browser import WINDOW_CHROME_SCRIPT, BrowserSession
from domcapture.core.buffer import MutationBuffer
from domcapture.core.dom_monitor import FLUSH_EVENTS_SCRIPT, TAKE_ACTIVITY_SCRIPT
from domcapture.core.driver import SeleniumCaptureDriver
from domcapture.core.exceptions import CaptureError
from domcapture.utils.wait import READY_STATE_SCRIPT


class FakeClock:
    """Millisecond clock that only moves when the loop sleeps."""

    def __init__(self) -> None:
        self.now_ms = 0
        self.ticks = 0
        self._listeners = []

    def monotonic(self) -> float:
        return self.now_ms / 1000

    def sleep(self, seconds: float) -> None:
        self.now_ms += round(seconds * 1000)
        self.ticks += 1
        for listener in list(self._listeners):
            listener(self.ticks)

    def on_tick(self, listener) -> None:
        self._listeners.append(listener)


class ScriptedDriver:
    """Capture driver that replays mutation bursts during the debounce waits.

    ``bursts`` maps a tick number (1 for the first wait) to the raw events the
    page emits during that wait.
    """

    def __init__(
        self,
        clock: FakeClock,
        bursts: dict[int, list[dict[str, Any]]] | None = None,
        fail_on_snapshot: int | None = None,
        write_files: bool = True,
    ) -> None:
        self.clock = clock
        self.bursts = bursts or {}
        self.fail_on_snapshot = fail_on_snapshot
        self.write_files = write_files
        self.buffer: MutationBuffer | None = None
        self.snapshot_paths: list[Path] = []
        self.subscribed_after_snapshots: int | None = None
        clock.on_tick(self._emit)

    def subscribe_to_changes(self) -> MutationBuffer:
        self.subscribed_after_snapshots = len(self.snapshot_paths)
        self.buffer = MutationBuffer(clock=self.clock.monotonic)
        return self.buffer

    def take_snapshot(self, path: Path) -> None:
        if self.fail_on_snapshot is not None and len(self.snapshot_paths) == self.fail_on_snapshot:
            raise CaptureError("page closed")
        if self.write_files:
            Path(path).write_bytes(b"\x89PNG\r\n\x1a\n")
        self.snapshot_paths.append(Path(path))

    def publish(self, event: dict[str, Any], wake: bool | None = None) -> None:
        assert self.buffer is not None, "driver is not subscribed"
        self.buffer.publish(event, wake=wake)

    def _emit(self, tick: int) -> None:
        if self.buffer is None:
            return
        for event in self.bursts.get(tick, []):
            self.buffer.publish(event)


def element_added(target: str = "#list", *tags: str) -> dict[str, Any]:
    added = list(tags or ("div",))
    return {"type": "childList", "target": target, "added": added[:3], "addedCount": len(added), "removed": [], "removedCount": 0}


def text_changed(target: str = "#status", text: str = "Saved") -> dict[str, Any]:
    return {"type": "characterData", "target": target, "text": text}


def attribute_changed(target: str = "#menu", attribute: str = "aria-expanded", value: str | None = "true") -> dict[str, Any]:
    return {"type": "attributes", "target": target, "attribute": attribute, "newValue": value}


def cursor_styled(target: str = "#input") -> dict[str, Any]:
    return attribute_changed(target, "style", "cursor: pointer;")


@contextmanager
def managed_browser(config: BrowserConfig | None = None) -> Iterator[SeleniumCaptureDriver]:
    config = config or BrowserConfig()
    try:
        webdriver = BrowserSession(config).start()
    except WebDriverException as exc:
        pytest.skip(f"WebDriver could not start for {config.browser}: {exc}")
    driver = SeleniumCaptureDriver(webdriver, navigation_timeout_ms=config.navigation_timeout_ms)
    try:
        yield driver
    finally:
        driver.close()


class FakeWebDriver:
    """Answers the scripts and commands the capture driver sends to a page."""

    def __init__(self, ready_state="complete", screenshot_result=True, fail_screenshot_at: int | None = None) -> None:
        self.ready_state = ready_state
        self.screenshot_result = screenshot_result
        self.fail_screenshot_at = fail_screenshot_at
        self.screenshot_calls = 0
        self.page_events: list[dict] = []
        self.page_activity = False
        self.window_chrome = [0, 0]
        self.window_sizes: list[tuple[int, int]] = []
        self.scripts: list[str] = []
        self.visited: list[str] = []
        self.get_error: Exception | None = None
        self.script_error: Exception | None = None
        self.screenshot_error: Exception | None = None
        self.quit_error: Exception | None = None
        self.quit_called = False

    def get(self, url):
        if self.get_error:
            raise self.get_error
        self.visited.append(url)

    def execute_script(self, script, *args):
        if self.script_error:
            raise self.script_error
        self.scripts.append(script)
        if script == READY_STATE_SCRIPT:
            return self.ready_state
        if script == TAKE_ACTIVITY_SCRIPT:
            activity, self.page_activity = self.page_activity, False
            return activity
        if script == FLUSH_EVENTS_SCRIPT:
            events, self.page_events = self.page_events, []
            return events
        if script == WINDOW_CHROME_SCRIPT:
            return self.window_chrome
        return None

    def set_window_size(self, width, height):
        self.window_sizes.append((width, height))

    def save_screenshot(self, path):
        call = self.screenshot_calls
        self.screenshot_calls += 1
        if self.screenshot_error:
            raise self.screenshot_error
        if self.fail_screenshot_at is not None and call >= self.fail_screenshot_at:
            raise WebDriverException("tab crashed")
        return self.screenshot_result

    def quit(self):
        self.quit_called = True
        if self.quit_error:
            raise self.quit_error


class FakeBrowserSession:
    def __init__(self, webdriver: FakeWebDriver) -> None:
        self.webdriver = webdriver

    def start(self):
        return self.webdriver
