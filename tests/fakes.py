# tests/fakes.py
# In-memory stand-ins for the browser driver and the semantic resolver

import os
from typing import Dict, Optional

from playwright.sync_api import Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError


class FakeBrowser:
    """
    Records every driver call.

    `elements` maps a CSS selector to {"visible": bool}; selectors not listed
    are absent from the page. Method names in `fail_on` raise a Playwright error.
    """

    def __init__(self, elements: Optional[Dict[str, dict]] = None, text: str = "", html: Optional[str] = None,
                 screenshot_dir: Optional[str] = None):
        self.elements = elements or {}
        self.text = text
        self.html = html if html is not None else f"<html><body>{text}</body></html>"
        self.screenshot_dir = screenshot_dir
        self.fail_on = set()
        self.calls = []
        self.url = None

    def _record(self, name: str, *args):
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise PlaywrightError(f"{name} failed")

    def names(self):
        return [c[0] for c in self.calls]

    def _visible(self, selector: str) -> bool:
        return self.elements.get(selector, {}).get("visible", False)

    def navigate(self, url, wait_until="domcontentloaded", timeout=30000):
        self._record("navigate", url)
        self.url = url

    def wait_for_load_state(self, state="domcontentloaded", timeout=None):
        self._record("wait_for_load_state", state)

    def wait(self, ms):
        self._record("wait", ms)

    def wait_for_attached(self, selector, timeout):
        self._record("wait_for_attached", selector)
        if selector not in self.elements:
            raise PlaywrightTimeoutError(f"{selector} not attached after {timeout}ms")

    def wait_for_visible(self, selector, timeout):
        self._record("wait_for_visible", selector, timeout)
        if not self._visible(selector):
            raise PlaywrightTimeoutError(f"{selector} not visible after {timeout}ms")

    def count(self, selector):
        return 1 if selector in self.elements else 0

    def count_visible(self, selector):
        return 1 if self._visible(selector) else 0

    def click(self, selector, timeout=3000):
        self._record("click", selector)

    def fill(self, selector, value, timeout=3000):
        self._record("fill", selector, value)

    def hover(self, selector, timeout=3000):
        self._record("hover", selector)

    def select_option(self, selector, value, timeout=3000):
        self._record("select_option", selector, value)

    def dispatch_event(self, selector, event):
        self._record("dispatch_event", selector, event)

    def force_fill(self, selector, value):
        self._record("force_fill", selector, value)

    def force_select(self, selector, value):
        self._record("force_select", selector, value)

    def press(self, key):
        self._record("press", key)

    def scroll(self, delta):
        self._record("scroll", delta)

    def scroll_page(self, direction):
        self._record("scroll_page", direction)

    def content(self):
        return self.html

    def inner_text(self):
        return self.text

    def click_by_text(self, text):
        self._record("click_by_text", text)

    def fill_by_label(self, label, text):
        self._record("fill_by_label", label, text)

    def select_by_label(self, label, value):
        self._record("select_by_label", label, value)

    def hover_by_text(self, text):
        self._record("hover_by_text", text)

    def take_screenshot(self, filename):
        self._record("take_screenshot", filename)
        path = os.path.join(self.screenshot_dir or ".", filename)
        with open(path, "wb") as f:
            f.write(b"\x89PNG fake")
        return path


class CountingResolver:
    """Semantic resolver double that counts its calls."""

    def __init__(self, answer=True, error: Optional[Exception] = None):
        self.answer = answer
        self.error = error
        self.calls = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def resolve(self, instruction: str):
        self.calls.append(instruction)
        if self.error is not None:
            raise self.error
        return self.answer
