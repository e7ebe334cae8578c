# handlers/verify.py
# Assertions: quoted keywords are checked against the page before asking the resolver

import logging
import re
from typing import List

from errors import AssertionFailedError, ResolutionError
from handlers.common import ExecutionContext
from schemas.instructions import VerifyParams

logger = logging.getLogger(__name__)

# Straight, curly and corner-bracket quotes
_QUOTE_PATTERNS = [
    re.compile(r"“(.*?)”"),
    re.compile(r"‘(.*?)’"),
    re.compile(r"「(.*?)」"),
    re.compile(r'"(.*?)"'),
    re.compile(r"'(.*?)'"),
]


def extract_keywords(assertion: str) -> List[str]:
    """Return the quoted substrings of an assertion, first occurrence order, no duplicates."""
    keywords = []
    for pattern in _QUOTE_PATTERNS:
        for match in pattern.finditer(assertion):
            keyword = match.group(1)
            if keyword and keyword not in keywords:
                keywords.append(keyword)
    return keywords


def handle_verify(context: ExecutionContext, params: VerifyParams):
    assertion = params.assertion
    browser = context.browser

    keywords = extract_keywords(assertion)
    if keywords:
        markup = browser.content()
        try:
            text = browser.inner_text()
        except Exception as e:
            logger.debug("could not read body text, using markup only: %s", e)
            text = markup
        found = [kw for kw in keywords if kw in text or kw in markup]
        if found:
            logger.info("verified from page content: %s", found)
            return True
        logger.info("keywords %s not on page, asking semantic resolver", keywords)

    if context.resolver is None:
        raise ResolutionError(f"Cannot verify without a semantic resolver: {assertion}")

    verdict = context.resolver.resolve(f"Verify that {assertion}")
    logger.info("semantic verdict for '%s': %s", assertion, verdict)
    if verdict is False:
        raise AssertionFailedError(f"Assertion failed: {assertion}")
    return verdict
