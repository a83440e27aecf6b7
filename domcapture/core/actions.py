from __future__ import annotations

from dataclasses import dataclass

from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.actions.action_builder import ActionBuilder
from selenium.webdriver.common.keys import Keys

DEFAULT_SCROLL_PIXELS = 500
ACTION_NAMES = ("click", "type", "press", "scroll")

# Key names as commonly written (Enter, ArrowDown) mapped onto Selenium's constants.
KEY_ALIASES = {
    "arrowdown": "ARROW_DOWN",
    "arrowup": "ARROW_UP",
    "arrowleft": "ARROW_LEFT",
    "arrowright": "ARROW_RIGHT",
    "esc": "ESCAPE",
    "pagedown": "PAGE_DOWN",
    "pageup": "PAGE_UP",
    "del": "DELETE",
}


@dataclass(frozen=True, slots=True)
class UserAction:
    name: str
    text: str = ""
    x: int = 0
    y: int = 0
    pixels: int = 0

    def describe(self) -> str:
        if self.name == "click":
            return f"Clicking at ({self.x}, {self.y})"
        if self.name == "type":
            return f'Typing: "{self.text}"'
        if self.name == "press":
            return f"Pressing key: {self.text}"
        return f"Scrolling {self.pixels}px"


def parse_action(name: str | None, argument: str | None = None) -> UserAction | None:
    """Turns a command-line action and its argument into a ``UserAction``; ``None`` means navigate only."""

    if not name:
        return None
    normalized = name.lower()
    if normalized not in ACTION_NAMES:
        raise ValueError(f"Unsupported action: {name}")
    if normalized == "scroll":
        if not argument:
            return UserAction("scroll", pixels=DEFAULT_SCROLL_PIXELS)
        try:
            return UserAction("scroll", pixels=int(argument))
        except ValueError as exc:
            raise ValueError(f"Scroll amount must be an integer: {argument}") from exc
    if not argument:
        raise ValueError(f"Action '{normalized}' needs an argument")
    if normalized == "click":
        parts = argument.split(",")
        if len(parts) != 2:
            raise ValueError(f"Click position must look like 'x,y': {argument}")
        try:
            x, y = (int(float(part)) for part in parts)
        except ValueError as exc:
            raise ValueError(f"Click position must be numeric: {argument}") from exc
        return UserAction("click", x=x, y=y)
    if normalized == "press":
        resolve_key(argument)
    return UserAction(normalized, text=argument)


def resolve_key(key: str) -> str:
    if len(key) == 1:
        return key
    attribute = KEY_ALIASES.get(key.lower(), key.upper())
    resolved = getattr(Keys, attribute, None)
    if resolved is None:
        raise ValueError(f"Unknown key: {key}")
    return resolved


class PageActions:
    """Dispatches simulated user input at the viewport level."""

    def __init__(self, driver) -> None:
        self.driver = driver

    def perform(self, action: UserAction) -> None:
        if action.name == "click":
            self.click(action.x, action.y)
        elif action.name == "type":
            self.type(action.text)
        elif action.name == "press":
            self.press(action.text)
        elif action.name == "scroll":
            self.scroll(action.pixels)
        else:
            raise ValueError(f"Unsupported action: {action.name}")

    def click(self, x: int, y: int) -> None:
        builder = ActionBuilder(self.driver)
        builder.pointer_action.move_to_location(x, y)
        builder.pointer_action.click()
        builder.perform()

    def type(self, text: str) -> None:
        ActionChains(self.driver).send_keys(text).perform()

    def press(self, key: str) -> None:
        ActionChains(self.driver).send_keys(resolve_key(key)).perform()

    def scroll(self, pixels: int) -> None:
        ActionChains(self.driver).scroll_by_amount(0, pixels).perform()
