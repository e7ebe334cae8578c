# vlm/semantic_resolver.py
# Semantic tier: resolves natural-language instructions with a vision model

import base64
import logging
from typing import Any, List

import requests
from pydantic import ValidationError

from config import EngineConfig
from errors import ExternalServiceError, ResolutionError
from llm_output import extract_json
from schemas.actions import (
    Action,
    ClickByTextAction,
    FillByLabelAction,
    SelectByLabelAction,
    HoverByTextAction,
    PressKeyAction,
    ScrollAction,
    WaitAction,
    VerdictAction,
    DoneAction,
    parse_action,
)
from vlm.prompt import SYSTEM_PROMPT

logger = logging.getLogger(__name__)


class SemanticResolver:
    """Carries out, or judges, one natural-language browser instruction."""

    def resolve(self, instruction: str) -> Any:
        raise NotImplementedError


class VisionResolver(SemanticResolver):
    """
    Screenshot-driven resolver.

    Each round sends the current screenshot and the instruction to an
    OpenAI-compatible vision chat endpoint, then runs the returned primitive
    actions on the browser. A `verdict` action answers assertions; `done`
    ends an interaction.
    """

    def __init__(self, browser, api_key: str, base_url: str = "https://api.qwen.ai/v1",
                 model: str = "qwen-vl-max", max_rounds: int = 3, request_timeout: int = 60):
        self.browser = browser
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.max_rounds = max_rounds
        self.request_timeout = request_timeout
        self._screenshot_count = 0

    @classmethod
    def from_config(cls, browser, config: EngineConfig) -> "VisionResolver":
        if not config.vlm_api_key:
            raise ExternalServiceError("Vision model API key missing: set VLM_API_KEY")
        return cls(browser, config.vlm_api_key, base_url=config.vlm_base_url, model=config.vlm_model)

    def call_vlm(self, image_path: str, instruction: str, history: str) -> List[dict]:
        with open(image_path, "rb") as img_file:
            img_data = base64.b64encode(img_file.read()).decode()

        prompt = SYSTEM_PROMPT.format(instruction=instruction, history=history or "none")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "user", "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": f"data:image/png;base64,{img_data}"}}
                ]}
            ]
        }

        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            response = requests.post(f"{self.base_url}/chat/completions", json=payload, headers=headers,
                                     timeout=self.request_timeout)
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except requests.RequestException as e:
            raise ExternalServiceError(f"Vision model request failed: {e}") from e
        except (KeyError, IndexError, ValueError) as e:
            raise ExternalServiceError(f"Unexpected vision model response: {e}") from e

        logger.debug("vision model output: %s", content)
        try:
            actions = extract_json(content, opener="[", closer="]")
        except ValueError:
            try:
                actions = extract_json(content, opener="{", closer="}")
            except ValueError as e:
                raise ExternalServiceError(str(e)) from e

        # Ensure we always return a list
        if isinstance(actions, dict):
            return [actions]
        elif isinstance(actions, list):
            return actions
        else:
            raise ExternalServiceError(f"Unexpected response format: {actions}")

    def execute_action(self, action: Action):
        if isinstance(action, ClickByTextAction):
            self.browser.click_by_text(action.text)
        elif isinstance(action, FillByLabelAction):
            self.browser.fill_by_label(action.label, action.text)
        elif isinstance(action, SelectByLabelAction):
            self.browser.select_by_label(action.label, action.value)
        elif isinstance(action, HoverByTextAction):
            self.browser.hover_by_text(action.text)
        elif isinstance(action, PressKeyAction):
            self.browser.press(action.key)
        elif isinstance(action, ScrollAction):
            self.browser.scroll(action.delta)
        elif isinstance(action, WaitAction):
            self.browser.wait(action.ms)
        else:
            raise ValueError(f"Unknown action type: {type(action)}")

    def resolve(self, instruction: str) -> Any:
        history = []
        for round_index in range(self.max_rounds):
            self._screenshot_count += 1
            screenshot_path = self.browser.take_screenshot(f"resolve_{self._screenshot_count}.png")
            actions_data = self.call_vlm(screenshot_path, instruction, "; ".join(history[-5:]))

            try:
                actions = [parse_action(data) for data in actions_data]
            except (ValueError, ValidationError, AttributeError) as e:
                raise ExternalServiceError(f"Vision model returned an invalid action: {e}") from e

            for action, action_data in zip(actions, actions_data):
                if isinstance(action, VerdictAction):
                    logger.info("verdict for '%s': %s (%s)", instruction, action.passed, action.reason)
                    return action.passed
                if isinstance(action, DoneAction):
                    return True
                logger.info("round %d: %s", round_index + 1, action_data)
                self.execute_action(action)
                history.append(f"{action_data['name']} with {action_data.get('arguments', {})}")

        raise ResolutionError(f"Vision model did not complete '{instruction}' in {self.max_rounds} rounds")
