from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path

from selenium.common.exceptions import WebDriverException

from domcapture.config.schema import RunConfig
from domcapture.core.actions import UserAction
from domcapture.core.browser import BrowserSession
from domcapture.core.capture_loop import CaptureLoop
from domcapture.core.driver import SeleniumCaptureDriver
from domcapture.core.exceptions import NavigationError
from domcapture.core.metadata import CaptureSession
from domcapture.logging.artifacts import ArtifactManager
from domcapture.logging.report import SessionReportWriter

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CaptureResult:
    session: CaptureSession
    report_path: Path


class CaptureRunner:
    """Launches a browser, loads the page, performs one action and records what changed."""

    def __init__(self, config: RunConfig, browser_session: BrowserSession | None = None) -> None:
        self.config = config
        self.browser_session = browser_session or BrowserSession(config.browser)
        capture = config.capture
        self.artifacts = ArtifactManager(capture.output_dir, label=capture.label, metadata_file=capture.metadata_file)
        self.report_writer = SessionReportWriter(self.artifacts.metadata_path)
        self.capturing = threading.Event()

    def run(self, url: str, action: UserAction | None = None, cancel: threading.Event | None = None) -> CaptureResult:
        try:
            webdriver = self.browser_session.start()
        except WebDriverException as exc:
            raise NavigationError(f"Could not start {self.config.browser.browser}: {exc.msg or exc}") from exc
        driver = SeleniumCaptureDriver(webdriver, navigation_timeout_ms=self.config.browser.navigation_timeout_ms)
        try:
            logger.info("> Navigating to %s...", url)
            driver.navigate(url)
            session = self.capture(driver, action, cancel)
        finally:
            driver.close()
        report_path = self.report_writer.write(session)
        return CaptureResult(session=session, report_path=report_path)

    def capture(
        self,
        driver: SeleniumCaptureDriver,
        action: UserAction | None = None,
        cancel: threading.Event | None = None,
    ) -> CaptureSession:
        self.artifacts.reset()
        self.capturing.set()
        trigger = None
        if action is not None:

            def trigger() -> None:
                logger.info("> %s...", action.describe())
                driver.perform(action)

        capture = self.config.capture
        logger.info("> Monitoring DOM changes...")
        loop = CaptureLoop(
            driver,
            max_snapshots=capture.max_snapshots,
            max_duration_ms=capture.max_duration_ms,
            debounce_ms=capture.debounce_ms,
            artifacts=self.artifacts,
            trigger=trigger,
            cancel=cancel,
        )
        return loop.run()
