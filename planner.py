# planner.py
# Converts a natural-language goal into a candidate instruction stream using OpenAI

import logging
from typing import List

import openai

from config import EngineConfig
from errors import ExternalServiceError, InstructionValidationError
from llm_output import extract_json
from schemas.instructions import SUPPORTED_ACTIONS

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = f"""
You are a web UI test automation expert. Convert the user's goal into browser steps.

Output a JSON array only. No markdown. No explanation. No code fences.

Supported action_type values: {', '.join(SUPPORTED_ACTIONS)}

Each element:
{{"step_id": <number>, "action_type": "<type>", "params": {{}}, "description": "<what the step does>"}}

params per action_type:
- navigate: {{"url": "<URL>"}}
- click / hover: {{"semantic_locator": "<English description of the element>", "fallback_selector": "<optional CSS>"}}
- input: {{"semantic_locator": "<English description>", "fallback_selector": "<optional CSS>", "value": "<text>"}}
- verify: {{"assertion": "<assertion, wrap keywords in double quotes>"}}
- wait: {{"selector": "<CSS selector>", "timeout": <ms>}}
- press: {{"key": "<key name, e.g. Enter>"}}
- scroll: {{"direction": "<up/down/top/bottom>"}}
- select: {{"semantic_locator": "<English description>", "fallback_selector": "<optional CSS>", "value": "<option>"}}

Rules:
1. navigate needs no semantic_locator.
2. Interactive steps must have a semantic_locator and should also have a fallback_selector.
3. Do not add a wait right after navigate.
4. Use wait only for dynamic content, and always with a selector.
5. input focuses the field itself, do not click it first.
6. Use as few steps as possible.

Example for "open https://example.com/login, log in as demo, verify "Dashboard"":
[
  {{"step_id": 1, "action_type": "navigate", "params": {{"url": "https://example.com/login"}}, "description": "Open the login page"}},
  {{"step_id": 2, "action_type": "input", "params": {{"semantic_locator": "username field", "fallback_selector": "input[name=username]", "value": "demo"}}, "description": "Enter username"}},
  {{"step_id": 3, "action_type": "click", "params": {{"semantic_locator": "login button", "fallback_selector": "button[type=submit]"}}, "description": "Submit the form"}},
  {{"step_id": 4, "action_type": "verify", "params": {{"assertion": "the page shows \\"Dashboard\\""}}, "description": "Check login succeeded"}}
]
"""


class Planner:
    def __init__(self, config: EngineConfig):
        if not config.planner_api_key:
            raise ExternalServiceError("Planner API key missing: set PLANNER_API_KEY or OPENAI_API_KEY")
        self.model = config.planner_model
        self.client = openai.OpenAI(api_key=config.planner_api_key, base_url=config.planner_base_url)

    def create_plan(self, intent: str) -> List[dict]:
        """Return the raw candidate stream; callers validate it before executing."""
        logger.info("planning: %s", intent)
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": intent},
                ],
                temperature=0,
            )
        except openai.OpenAIError as e:
            raise ExternalServiceError(f"Planner request failed: {e}") from e

        content = response.choices[0].message.content
        if not content:
            raise ExternalServiceError("Planner returned an empty response")
        logger.debug("planner output: %s", content)

        try:
            instructions = extract_json(content)
        except ValueError as e:
            raise InstructionValidationError(str(e), [{"step_id": -1, "errors": [str(e)]}])

        logger.info("planner produced %d steps", len(instructions) if isinstance(instructions, list) else 0)
        return instructions
