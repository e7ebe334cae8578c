# llm_output.py
# Helpers for pulling JSON out of model replies

import json
import re
from typing import Any

_CODE_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def extract_json(text: str, opener: str = "[", closer: str = "]") -> Any:
    """
    Parse JSON from a model reply.

    Strips markdown code fences and anything outside the outermost
    `opener`...`closer` pair. Raises ValueError if nothing parses.
    """
    cleaned = (text or "").strip()

    fenced = _CODE_FENCE_RE.search(cleaned)
    if fenced:
        cleaned = fenced.group(1).strip()

    start = cleaned.find(opener)
    end = cleaned.rfind(closer)
    if start != -1 and end > start:
        cleaned = cleaned[start:end + 1]

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ValueError(f"Could not parse JSON from model output: {e}\nRaw output: {text}")
