# handlers/page.py
# Deterministic page-level actions: navigate, wait, press, scroll

import logging

from playwright.sync_api import Error as PlaywrightError

from handlers.common import (
    ExecutionContext,
    NAVIGATION_TIMEOUT_MS,
    WAIT_SELECTOR_CAP_MS,
    WAIT_SELECTOR_DEFAULT_MS,
    SETTLE_PAUSE_MS,
    CONDITION_PAUSE_MS,
    NETWORK_IDLE_TIMEOUT_MS,
)
from schemas.instructions import NavigateParams, WaitParams, PressParams, ScrollParams, SCROLL_DIRECTIONS

logger = logging.getLogger(__name__)


def handle_navigate(context: ExecutionContext, params: NavigateParams):
    # Initial document parse only; full network idle is too slow to wait for
    logger.info("navigating to %s", params.url)
    context.browser.navigate(params.url, wait_until="domcontentloaded", timeout=NAVIGATION_TIMEOUT_MS)


def handle_wait(context: ExecutionContext, params: WaitParams):
    """
    Wait for a selector, a load condition or a fixed time.

    A selector that never shows up is not a failure: the handler degrades to
    waiting for the document to parse plus a short pause.
    """
    browser = context.browser

    if params.selector:
        timeout = min(params.timeout or WAIT_SELECTOR_DEFAULT_MS, WAIT_SELECTOR_CAP_MS)
        try:
            browser.wait_for_visible(params.selector, timeout)
            return
        except PlaywrightError as e:
            logger.info("selector %s not visible after %sms, waiting for page to settle: %s", params.selector, timeout, e)
        try:
            browser.wait_for_load_state("domcontentloaded")
        except PlaywrightError as e:
            logger.debug("domcontentloaded wait failed: %s", e)
        browser.wait(SETTLE_PAUSE_MS)
    elif params.condition == "networkidle":
        browser.wait_for_load_state("networkidle", timeout=NETWORK_IDLE_TIMEOUT_MS)
    elif params.condition:
        logger.info("waiting for condition: %s", params.condition)
        try:
            browser.wait_for_load_state("networkidle", timeout=NETWORK_IDLE_TIMEOUT_MS)
        except PlaywrightError as e:
            logger.debug("networkidle wait failed: %s", e)
        browser.wait(params.timeout or CONDITION_PAUSE_MS)
    elif params.timeout:
        browser.wait(params.timeout)


def handle_press(context: ExecutionContext, params: PressParams):
    context.browser.press(params.key)


def handle_scroll(context: ExecutionContext, params: ScrollParams):
    if params.direction not in SCROLL_DIRECTIONS:
        raise ValueError(f"Unsupported scroll direction: {params.direction}")

    if params.semantic_locator and context.resolver is not None:
        try:
            return context.resolver.resolve(f"Scroll the {params.semantic_locator} {params.direction}")
        except Exception as e:
            logger.warning("semantic scroll of %s failed, scrolling the page instead: %s", params.semantic_locator, e)

    context.browser.scroll_page(params.direction)
