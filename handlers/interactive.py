# handlers/interactive.py
# click, input, select and hover: selector first, semantic resolver as fallback

import logging

from handlers.common import (
    ExecutionContext,
    try_selector,
    resolve_semantically,
    ACTION_TIMEOUT_MS,
    INPUT_ATTACH_TIMEOUT_MS,
)
from schemas.instructions import ClickParams, InputParams, SelectParams, HoverParams

logger = logging.getLogger(__name__)


def handle_click(context: ExecutionContext, params: ClickParams):
    browser = context.browser
    selector = params.fallback_selector
    if selector:
        handled = try_selector(
            browser,
            selector,
            native=lambda: browser.click(selector, timeout=ACTION_TIMEOUT_MS),
            forced=lambda: browser.dispatch_event(selector, "click"),
        )
        if handled:
            return None

    return resolve_semantically(context, params.semantic_locator, f"Click on the {params.semantic_locator}", "click")


def handle_input(context: ExecutionContext, params: InputParams):
    browser = context.browser
    selector = params.fallback_selector
    value = str(params.value)
    if selector:
        handled = try_selector(
            browser,
            selector,
            native=lambda: browser.fill(selector, value, timeout=ACTION_TIMEOUT_MS),
            forced=lambda: browser.force_fill(selector, value),
            attach_timeout=INPUT_ATTACH_TIMEOUT_MS,
        )
        if handled:
            return None

    return resolve_semantically(
        context, params.semantic_locator, f'Type "{value}" into the {params.semantic_locator}', "input"
    )


def handle_select(context: ExecutionContext, params: SelectParams):
    browser = context.browser
    selector = params.fallback_selector
    if selector:
        handled = try_selector(
            browser,
            selector,
            native=lambda: browser.select_option(selector, params.value, timeout=ACTION_TIMEOUT_MS),
            forced=lambda: browser.force_select(selector, params.value),
        )
        if handled:
            return None

    return resolve_semantically(
        context, params.semantic_locator, f'Select "{params.value}" from the {params.semantic_locator}', "select"
    )


def _force_hover(browser, selector: str):
    browser.dispatch_event(selector, "mouseover")
    browser.dispatch_event(selector, "mouseenter")


def handle_hover(context: ExecutionContext, params: HoverParams):
    browser = context.browser
    selector = params.fallback_selector
    if selector:
        handled = try_selector(
            browser,
            selector,
            native=lambda: browser.hover(selector, timeout=ACTION_TIMEOUT_MS),
            forced=lambda: _force_hover(browser, selector),
        )
        if handled:
            return None

    return resolve_semantically(context, params.semantic_locator, f"Hover over the {params.semantic_locator}", "hover")
