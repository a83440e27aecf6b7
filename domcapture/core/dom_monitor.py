from __future__ import annotations

from typing import Any

from selenium.common.exceptions import WebDriverException

from domcapture.core.exceptions import CaptureError

INSTALL_MONITOR_SCRIPT = r"""
if (!window.__capture_observer_installed__) {
  window.__capture_events__ = [];
  window.__capture_activity__ = false;
  window.__capture_origin__ = performance.now();

  const TAG_LIMIT = 3;

  const describeTarget = (node) => {
    const element = node && node.nodeType === Node.ELEMENT_NODE ? node : node && node.parentElement;
    if (!element) return "unknown";
    if (element.id) return `#${element.id}`;
    const className = typeof element.className === "string"
      ? element.className
      : (element.getAttribute && element.getAttribute("class")) || "";
    const firstClass = className.trim().split(/\s+/)[0];
    if (firstClass) return `.${firstClass}`;
    return element.tagName ? element.tagName.toLowerCase() : "unknown";
  };

  const elementTags = (nodes) => Array.from(nodes || [])
    .filter((node) => node.nodeType === Node.ELEMENT_NODE)
    .map((node) => node.tagName.toLowerCase());

  const toEvent = (mutation) => {
    const event = {
      type: mutation.type,
      target: describeTarget(mutation.target),
      timestamp: performance.now() - window.__capture_origin__,
    };
    if (mutation.type === "childList") {
      const added = elementTags(mutation.addedNodes);
      const removed = elementTags(mutation.removedNodes);
      event.added = added.slice(0, TAG_LIMIT);
      event.removed = removed.slice(0, TAG_LIMIT);
      event.addedCount = added.length;
      event.removedCount = removed.length;
    } else if (mutation.type === "attributes") {
      event.attribute = mutation.attributeName;
      event.newValue = mutation.target.getAttribute
        ? mutation.target.getAttribute(mutation.attributeName)
        : null;
    } else if (mutation.type === "characterData") {
      event.text = mutation.target.textContent || "";
    }
    return event;
  };

  const observer = new MutationObserver((mutations) => {
    for (const mutation of mutations) {
      const event = toEvent(mutation);
      window.__capture_events__.push(event);
      if ((event.addedCount || event.removedCount) || mutation.type === "characterData") {
        window.__capture_activity__ = true;
      }
    }
  });
  observer.observe(document.body || document.documentElement, {
    childList: true,
    subtree: true,
    attributes: true,
    characterData: true,
  });
  window.__capture_observer_installed__ = true;
}
"""

TAKE_ACTIVITY_SCRIPT = """
const activity = Boolean(window.__capture_activity__);
window.__capture_activity__ = false;
return activity;
"""

FLUSH_EVENTS_SCRIPT = """
const events = window.__capture_events__ || [];
window.__capture_events__ = [];
return events;
"""


class DomMonitor:
    """Installs and reads the browser-side mutation buffer."""

    def install(self, driver) -> None:
        driver.execute_script(INSTALL_MONITOR_SCRIPT)

    def take_activity(self, driver) -> bool:
        return bool(driver.execute_script(TAKE_ACTIVITY_SCRIPT))

    def flush_events(self, driver) -> list[dict[str, Any]]:
        return driver.execute_script(FLUSH_EVENTS_SCRIPT) or []


class BrowserMutationBuffer:
    """Buffer handle over the in-page event array.

    Every script runs atomically on the page's JavaScript thread, so the
    observer can never interleave with a single flag read or drain.
    """

    def __init__(self, driver, monitor: DomMonitor) -> None:
        self.driver = driver
        self.monitor = monitor

    def take_activity(self) -> bool:
        try:
            return self.monitor.take_activity(self.driver)
        except WebDriverException as exc:
            raise CaptureError(f"Could not read page activity: {exc.msg or exc}") from exc

    def drain(self) -> list[dict[str, Any]]:
        try:
            return self.monitor.flush_events(self.driver)
        except WebDriverException as exc:
            raise CaptureError(f"Could not drain page mutations: {exc.msg or exc}") from exc
