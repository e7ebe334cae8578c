# browser/playwright_browser.py
# Playwright wrapper exposing the primitives the instruction handlers need

from playwright.sync_api import sync_playwright, Page
from PIL import Image
from typing import Any, Optional
import io
import os

_FORCE_FILL_JS = """
({ selector, value }) => {
    const el = document.querySelector(selector)
    if (!el) throw new Error(`element ${selector} not found`)
    el.focus()
    el.value = value
    el.dispatchEvent(new Event('input', { bubbles: true }))
    el.dispatchEvent(new Event('change', { bubbles: true }))
}
"""

_FORCE_SELECT_JS = """
({ selector, value }) => {
    const el = document.querySelector(selector)
    if (!el) throw new Error(`element ${selector} not found`)
    const option = Array.from(el.options || []).find(o => o.value === value || o.label === value || o.text === value)
    el.value = option ? option.value : value
    el.dispatchEvent(new Event('input', { bubbles: true }))
    el.dispatchEvent(new Event('change', { bubbles: true }))
}
"""

_SCROLL_PAGE_JS = """
(direction) => {
    const viewportHeight = window.visualViewport ? window.visualViewport.height : window.innerHeight
    const distance = 0.75 * viewportHeight
    if (direction === 'up') window.scrollBy(0, -distance)
    else if (direction === 'down') window.scrollBy(0, distance)
    else if (direction === 'top') window.scrollTo(0, 0)
    else if (direction === 'bottom') window.scrollTo(0, document.body.scrollHeight)
}
"""


class PlaywrightBrowser:
    def __init__(self, headless: bool = False, screenshot_dir: str = "screenshots", page: Optional[Page] = None):
        # An externally owned page (e.g. from a test fixture) is used as-is
        self.playwright = None
        self.browser = None
        if page is None:
            self.playwright = sync_playwright().start()
            self.browser = self.playwright.chromium.launch(headless=headless)
            page = self.browser.new_page(viewport=None)
        self.page = page
        self.screenshot_dir = str(screenshot_dir)
        os.makedirs(self.screenshot_dir, exist_ok=True)

    # ---- navigation and load state ----

    def navigate(self, url: str, wait_until: str = "domcontentloaded", timeout: int = 30000):
        self.page.goto(url, wait_until=wait_until, timeout=timeout)

    def wait_for_load_state(self, state: str = "domcontentloaded", timeout: Optional[int] = None):
        self.page.wait_for_load_state(state, timeout=timeout)

    def wait(self, ms: int):
        self.page.wait_for_timeout(ms)

    # ---- element lookup ----

    def wait_for_attached(self, selector: str, timeout: int):
        self.page.locator(selector).first.wait_for(state="attached", timeout=timeout)

    def wait_for_visible(self, selector: str, timeout: int):
        self.page.locator(selector).first.wait_for(state="visible", timeout=timeout)

    def _visible(self, selector: str):
        return self.page.locator(selector).and_(self.page.locator(":visible"))

    def count(self, selector: str) -> int:
        return self.page.locator(selector).count()

    def count_visible(self, selector: str) -> int:
        return self._visible(selector).count()

    # ---- native interactions on the first visible match ----

    def click(self, selector: str, timeout: int = 3000):
        self._visible(selector).first.click(timeout=timeout)

    def fill(self, selector: str, value: str, timeout: int = 3000):
        self._visible(selector).first.fill(value, timeout=timeout)

    def hover(self, selector: str, timeout: int = 3000):
        self._visible(selector).first.hover(timeout=timeout)

    def select_option(self, selector: str, value: str, timeout: int = 3000):
        self._visible(selector).first.select_option(value, timeout=timeout)

    # ---- low-level fallbacks for present-but-hidden elements ----

    def dispatch_event(self, selector: str, event: str):
        self.page.locator(selector).first.dispatch_event(event)

    def force_fill(self, selector: str, value: str):
        self.page.evaluate(_FORCE_FILL_JS, {"selector": selector, "value": value})

    def force_select(self, selector: str, value: str):
        self.page.evaluate(_FORCE_SELECT_JS, {"selector": selector, "value": value})

    # ---- keyboard, scrolling, page content ----

    def press(self, key: str):
        self.page.keyboard.press(key)

    def scroll(self, delta: int):
        self.page.mouse.wheel(0, delta)

    def scroll_page(self, direction: str):
        self.page.evaluate(_SCROLL_PAGE_JS, direction)

    def content(self) -> str:
        return self.page.content()

    def inner_text(self) -> str:
        return self.page.inner_text("body")

    def evaluate(self, script: str, arg: Any = None) -> Any:
        return self.page.evaluate(script, arg)

    # ---- text and label based primitives used by the vision resolver ----

    def click_by_text(self, text: str):
        self.page.get_by_text(text).first.click(timeout=5000)

    def fill_by_label(self, label: str, text: str):
        self.page.get_by_label(label).first.fill(text, timeout=5000)

    def select_by_label(self, label: str, value: str):
        self.page.get_by_label(label).first.select_option(value, timeout=5000)

    def hover_by_text(self, text: str):
        self.page.get_by_text(text).first.hover(timeout=5000)

    def take_screenshot(self, filename: str) -> str:
        screenshot = self.page.screenshot()
        img = Image.open(io.BytesIO(screenshot))
        path = os.path.join(self.screenshot_dir, filename)
        img.save(path)
        return path

    def close(self):
        if self.browser is not None:
            self.browser.close()
        if self.playwright is not None:
            self.playwright.stop()
