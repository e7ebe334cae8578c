# handlers/common.py
# Shared two-tier resolution: structural selector first, semantic resolver second

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from errors import ResolutionError

logger = logging.getLogger(__name__)

# Timeouts in ms. The deterministic tier is kept short so misses escalate quickly.
ATTACH_TIMEOUT_MS = 5000
INPUT_ATTACH_TIMEOUT_MS = 10000
ACTION_TIMEOUT_MS = 3000
NAVIGATION_TIMEOUT_MS = 30000
WAIT_SELECTOR_CAP_MS = 3000
WAIT_SELECTOR_DEFAULT_MS = 5000
SETTLE_PAUSE_MS = 500
CONDITION_PAUSE_MS = 3000
NETWORK_IDLE_TIMEOUT_MS = 30000


@dataclass
class ExecutionContext:
    """The single page driver plus the optional semantic resolver."""
    browser: Any
    resolver: Optional[Any] = None


def try_selector(
    browser,
    selector: str,
    native: Callable[[], None],
    forced: Callable[[], None],
    attach_timeout: int = ATTACH_TIMEOUT_MS,
) -> bool:
    """
    Run the deterministic tier for one selector.

    Waits briefly for the selector to attach, then performs `native` on a
    visible match, or `forced` when the element exists but is hidden.

    Returns:
        True if the action was performed, False if the caller should escalate.
        Errors are logged and reported as False, never raised.
    """
    try:
        try:
            browser.wait_for_attached(selector, attach_timeout)
        except Exception as e:
            logger.debug("selector %s did not attach within %sms: %s", selector, attach_timeout, e)

        if browser.count_visible(selector) > 0:
            native()
            return True

        if browser.count(selector) > 0:
            logger.info("selector %s is present but hidden, dispatching directly", selector)
            forced()
            return True

        logger.info("selector %s matched nothing, escalating", selector)
    except Exception as e:
        logger.warning("deterministic tier failed for %s, escalating: %s", selector, e)
    return False


def resolve_semantically(context: ExecutionContext, semantic_locator: Optional[str], instruction: str, action: str) -> Any:
    """Run the semantic tier, or raise ResolutionError if it is unavailable."""
    if not semantic_locator:
        raise ResolutionError(f"{action} failed: selector did not resolve and no semantic locator was given")
    if context.resolver is None:
        raise ResolutionError(f"{action} failed: no semantic resolver configured for '{semantic_locator}'")
    logger.info("semantic %s: %s", action, instruction)
    return context.resolver.resolve(instruction)
