import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from errors import ExternalServiceError, ResolutionError
from fakes import FakeBrowser
from vlm.semantic_resolver import VisionResolver


def vlm_reply(actions):
    response = MagicMock()
    response.json.return_value = {"choices": [{"message": {"content": json.dumps(actions)}}]}
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def vision(tmp_path):
    browser = FakeBrowser(screenshot_dir=str(tmp_path))
    return VisionResolver(browser, api_key="key", base_url="https://vlm.test/v1", model="test-vl")


def test_click_then_done(vision):
    reply = vlm_reply([
        {"name": "click_by_text", "arguments": {"text": "Login"}},
        {"name": "done"},
    ])
    with patch("vlm.semantic_resolver.requests.post", return_value=reply) as post:
        assert vision.resolve("Click on the login button") is True

    assert ("click_by_text", "Login") in vision.browser.calls
    assert post.call_args.args[0] == "https://vlm.test/v1/chat/completions"
    assert post.call_args.kwargs["json"]["model"] == "test-vl"


def test_verdict_is_returned(vision):
    reply = vlm_reply([{"name": "verdict", "arguments": {"passed": False, "reason": "no banner"}}])
    with patch("vlm.semantic_resolver.requests.post", return_value=reply):
        assert vision.resolve("Verify that the banner is shown") is False


def test_single_action_object_is_accepted(vision):
    reply = MagicMock()
    reply.json.return_value = {"choices": [{"message": {"content": '{"name": "done"}'}}]}
    with patch("vlm.semantic_resolver.requests.post", return_value=reply):
        assert vision.resolve("Hover over the menu") is True


def test_actions_without_done_run_until_rounds_exhausted(vision):
    reply = vlm_reply([{"name": "scroll", "arguments": {"delta": 300}}])
    with patch("vlm.semantic_resolver.requests.post", return_value=reply) as post:
        with pytest.raises(ResolutionError):
            vision.resolve("Scroll the sidebar down")
    assert post.call_count == vision.max_rounds
    assert vision.browser.names().count("scroll") == vision.max_rounds


def test_transport_error(vision):
    with patch("vlm.semantic_resolver.requests.post", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(ExternalServiceError):
            vision.resolve("Click on the login button")


def test_unknown_action(vision):
    reply = vlm_reply([{"name": "teleport", "arguments": {}}])
    with patch("vlm.semantic_resolver.requests.post", return_value=reply):
        with pytest.raises(ExternalServiceError):
            vision.resolve("Click on the login button")
