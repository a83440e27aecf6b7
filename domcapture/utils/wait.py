from __future__ import annotations

import time

READY_STATE_SCRIPT = "return document.readyState;"


def wait_for_ready_state(driver, timeout: float, interval: float = 0.1, state: str = "complete") -> bool:
    """Polls ``document.readyState`` until it reaches ``state`` or the timeout passes."""

    deadline = time.monotonic() + timeout
    while True:
        if driver.execute_script(READY_STATE_SCRIPT) == state:
            return True
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        time.sleep(min(interval, remaining))
