from __future__ import annotations

from selenium import webdriver
from selenium.webdriver import ChromeOptions, FirefoxOptions

from domcapture.config.schema import BrowserConfig, Viewport

WINDOW_CHROME_SCRIPT = (
    "return [window.outerWidth - window.innerWidth, window.outerHeight - window.innerHeight];"
)


def fit_viewport(driver, viewport: Viewport) -> None:
    """Sizes the outer window so the page viewport matches ``viewport``.

    ``set_window_size`` includes toolbars and borders, so the difference
    between outer and inner size is measured and added back.
    """

    driver.set_window_size(viewport.width, viewport.height)
    chrome = driver.execute_script(WINDOW_CHROME_SCRIPT) or [0, 0]
    extra_width, extra_height = (max(int(value), 0) for value in chrome)
    if extra_width or extra_height:
        driver.set_window_size(viewport.width + extra_width, viewport.height + extra_height)


class BrowserSession:
    """Creates browser instances using Selenium Manager."""

    def __init__(self, config: BrowserConfig) -> None:
        self.config = config

    def start(self):
        viewport = self.config.viewport
        if self.config.browser == "chrome":
            options = ChromeOptions()
            if self.config.headless:
                options.add_argument("--headless=new")
            options.add_argument(f"--window-size={viewport.width},{viewport.height}")
            driver = webdriver.Chrome(options=options)
        elif self.config.browser == "firefox":
            options = FirefoxOptions()
            if self.config.headless:
                options.add_argument("-headless")
            options.add_argument(f"--width={viewport.width}")
            options.add_argument(f"--height={viewport.height}")
            driver = webdriver.Firefox(options=options)
        else:
            raise ValueError(f"Unsupported browser: {self.config.browser}")
        driver.set_page_load_timeout(self.config.navigation_timeout_ms / 1000)
        driver.implicitly_wait(0)
        fit_viewport(driver, viewport)
        return driver
