from __future__ import annotations

import pytest
from selenium.common.exceptions import WebDriverException

from domcapture.config.schema import BrowserConfig, CaptureConfig, RunConfig
from domcapture.core.actions import UserAction
from domcapture.core.exceptions import NavigationError
from domcapture.core.runner import CaptureRunner
from domcapture.logging.report import SessionReportWriter
from tests.helpers import FakeBrowserSession, FakeWebDriver, element_added


def _config(tmp_path, **browser) -> RunConfig:
    return RunConfig(
        capture=CaptureConfig(output_dir=str(tmp_path), max_duration_ms=300, debounce_ms=10),
        browser=BrowserConfig(**browser),
    )


def test_report_is_written_when_browser_dies_mid_session(tmp_path):
    webdriver = FakeWebDriver(fail_screenshot_at=1)
    webdriver.page_events = [element_added("#menu", "li")]
    webdriver.page_activity = True
    webdriver.quit_error = WebDriverException("session gone")
    runner = CaptureRunner(_config(tmp_path), browser_session=FakeBrowserSession(webdriver))

    result = runner.run("http://localhost:5173")

    assert webdriver.quit_called
    assert result.report_path.exists()
    payload = SessionReportWriter(result.report_path).read()
    assert payload["status"] == "capture-failed"
    assert len(payload["timeline"]) == 1
    assert payload["totalMutations"] == 1
    assert payload["error"].startswith("Screenshot failed")


def test_unperformable_action_still_writes_partial_report(tmp_path):
    webdriver = FakeWebDriver()
    runner = CaptureRunner(_config(tmp_path), browser_session=FakeBrowserSession(webdriver))

    result = runner.run("http://localhost:5173", UserAction("press", text="Hyper"))

    assert result.session.status == "capture-failed"
    assert [entry.file for entry in result.session.snapshots] == ["shot_0.png"]
    assert SessionReportWriter(result.report_path).read()["status"] == "capture-failed"


def test_completed_run_writes_report_and_marks_capturing(tmp_path):
    webdriver = FakeWebDriver()
    runner = CaptureRunner(_config(tmp_path), browser_session=FakeBrowserSession(webdriver))
    assert not runner.capturing.is_set()

    result = runner.run("http://localhost:5173")

    assert runner.capturing.is_set()
    assert result.session.status == "completed"
    assert SessionReportWriter(result.report_path).read()["screenshots"] == [str(tmp_path / "shot_0.png")]


def test_navigation_failure_closes_browser_without_capturing(tmp_path):
    webdriver = FakeWebDriver(ready_state="loading")
    runner = CaptureRunner(_config(tmp_path, navigation_timeout_ms=1), browser_session=FakeBrowserSession(webdriver))

    with pytest.raises(NavigationError):
        runner.run("http://localhost:5173")

    assert webdriver.quit_called
    assert webdriver.screenshot_calls == 0
    assert not runner.capturing.is_set()
