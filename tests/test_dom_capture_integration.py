from __future__ import annotations

from urllib.parse import quote

import pytest

from domcapture.config.schema import CaptureConfig, RunConfig
from domcapture.core.actions import parse_action
from domcapture.core.runner import CaptureRunner
from tests.helpers import managed_browser

MENU_PAGE = """
<html><body style="margin:0">
<button id="toggle" style="position:absolute;left:0;top:0;width:200px;height:80px">Open</button>
<ul id="menu"></ul>
<script>
document.getElementById("toggle").addEventListener("click", () => {
  document.getElementById("toggle").style.cursor = "wait";
  setTimeout(() => {
    const item = document.createElement("li");
    item.textContent = "First";
    document.getElementById("menu").appendChild(item);
  }, 50);
});
</script>
</body></html>
"""


@pytest.mark.integration
def test_click_that_opens_menu_is_captured(tmp_path):
    config = RunConfig(capture=CaptureConfig(output_dir=str(tmp_path), max_snapshots=3, max_duration_ms=1500))
    runner = CaptureRunner(config)

    with managed_browser(config.browser) as driver:
        driver.navigate("data:text/html," + quote(MENU_PAGE))
        session = runner.capture(driver, parse_action("click", "100,40"))

    assert session.completed
    assert session.snapshots[0].kind.value == "initial"
    assert len(session.snapshots) >= 2
    added = [record for entry in session.snapshots[1:] for record in entry.mutations]
    assert any("li" in record.added_tags for record in added)
    assert all(record.attribute != "style" for record in added)
    assert all(path.exists() for path in session.screenshots)
