from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

from selenium.common.exceptions import TimeoutException, WebDriverException

from domcapture.core.actions import PageActions, UserAction
from domcapture.core.dom_monitor import BrowserMutationBuffer, DomMonitor
from domcapture.core.exceptions import CaptureError, NavigationError
from domcapture.utils.wait import wait_for_ready_state

logger = logging.getLogger(__name__)


class MutationSource(Protocol):
    def take_activity(self) -> bool: ...

    def drain(self) -> list[dict[str, Any]]: ...


class CaptureDriver(Protocol):
    """What the capture loop needs from a browser driver."""

    def subscribe_to_changes(self) -> MutationSource: ...

    def take_snapshot(self, path: Path) -> None: ...


class SeleniumCaptureDriver:
    """Capture driver backed by a Selenium WebDriver."""

    def __init__(self, driver, navigation_timeout_ms: int = 30000, dom_monitor: DomMonitor | None = None) -> None:
        self.driver = driver
        self.navigation_timeout_ms = navigation_timeout_ms
        self.dom_monitor = dom_monitor or DomMonitor()
        self.actions = PageActions(driver)

    def navigate(self, url: str) -> None:
        timeout = self.navigation_timeout_ms / 1000
        try:
            self.driver.get(url)
            ready = wait_for_ready_state(self.driver, timeout)
        except TimeoutException as exc:
            raise NavigationError(f"Timed out loading {url}") from exc
        except WebDriverException as exc:
            raise NavigationError(f"Could not load {url}: {exc.msg or exc}") from exc
        if not ready:
            raise NavigationError(f"{url} did not finish loading within {self.navigation_timeout_ms}ms")

    def perform(self, action: UserAction) -> None:
        try:
            self.actions.perform(action)
        except WebDriverException as exc:
            raise CaptureError(f"Could not perform {action.name}: {exc.msg or exc}") from exc
        except ValueError as exc:
            raise CaptureError(f"Could not perform {action.name}: {exc}") from exc

    def subscribe_to_changes(self) -> BrowserMutationBuffer:
        try:
            self.dom_monitor.install(self.driver)
        except WebDriverException as exc:
            raise CaptureError(f"Could not install mutation observer: {exc.msg or exc}") from exc
        return BrowserMutationBuffer(self.driver, self.dom_monitor)

    def take_snapshot(self, path: Path) -> None:
        try:
            saved = self.driver.save_screenshot(str(path))
        except WebDriverException as exc:
            raise CaptureError(f"Screenshot failed for {path}: {exc.msg or exc}") from exc
        if not saved:
            raise CaptureError(f"Screenshot could not be written to {path}")

    def close(self) -> None:
        try:
            self.driver.quit()
        except WebDriverException as exc:
            logger.warning("Browser did not shut down cleanly: %s", exc.msg or exc)
