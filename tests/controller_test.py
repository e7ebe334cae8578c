from unittest.mock import MagicMock

import pytest

from cache.store import FileInstructionStore, MemoryInstructionStore, prompt_hash
from config import EngineConfig
from controller import Controller, extract_url
from errors import ExternalServiceError, InstructionValidationError
from fakes import FakeBrowser, CountingResolver
from handlers.common import ExecutionContext

LOGIN_PROMPT = 'open example.com, click the login button, verify page contains "Dashboard"'

LOGIN_PLAN = [
    {"step_id": 1, "action_type": "navigate", "params": {"url": "https://example.com"}, "description": "open site"},
    {"step_id": 2, "action_type": "click",
     "params": {"semantic_locator": "login button", "fallback_selector": "#login"}, "description": "log in"},
    {"step_id": 3, "action_type": "verify", "params": {"assertion": 'page contains "Dashboard"'},
     "description": "dashboard shown"},
]


def make_planner(plan=None):
    planner = MagicMock()
    planner.create_plan.return_value = plan if plan is not None else LOGIN_PLAN
    return planner


def make_context():
    browser = FakeBrowser(elements={"#login": {"visible": True}}, text="Your Dashboard")
    return ExecutionContext(browser=browser, resolver=CountingResolver())


# ============ END TO END ============

def test_login_scenario_passes():
    planner = make_planner()
    controller = Controller(planner, store=MemoryInstructionStore())
    ctx = make_context()

    result = controller.run(LOGIN_PROMPT, ctx)

    assert result.summary.all_passed is True
    assert result.summary.total == 3
    assert result.from_cache is False
    assert [r.step_id for r in result.results] == [1, 2, 3]
    planner.create_plan.assert_called_once_with(LOGIN_PROMPT)
    assert ctx.resolver.call_count == 0
    assert ctx.browser.calls[0] == ("navigate", "https://example.com")


def test_second_run_uses_cache_and_pre_navigates():
    planner = make_planner()
    store = MemoryInstructionStore()
    controller = Controller(planner, store=store)
    controller.run(LOGIN_PROMPT, make_context())

    ctx = make_context()
    result = controller.run(LOGIN_PROMPT, ctx)

    assert planner.create_plan.call_count == 1
    assert result.from_cache is True
    assert result.summary.all_passed is True
    assert result.instructions[0].pre_resolved is True
    assert result.results[0].result == "pre-resolved"
    assert ctx.browser.names().count("navigate") == 1


def test_cache_disabled_always_plans(tmp_path):
    planner = make_planner()
    store = FileInstructionStore(tmp_path)
    controller = Controller(planner, store=store)

    controller.run(LOGIN_PROMPT, make_context(), use_cache=False)
    controller.run(LOGIN_PROMPT, make_context(), use_cache=False)

    assert planner.create_plan.call_count == 2
    assert list(tmp_path.iterdir()) == []


def test_plan_is_persisted_under_prompt_hash(tmp_path):
    controller = Controller(make_planner(), config=EngineConfig(cache_dir=tmp_path))
    controller.run(LOGIN_PROMPT, make_context())
    assert (tmp_path / f"instructions_{prompt_hash(LOGIN_PROMPT)}.json").exists()


def test_cached_pre_navigation_failure_leaves_step_to_executor():
    store = MemoryInstructionStore()
    controller = Controller(make_planner(), store=store)
    controller.run(LOGIN_PROMPT, make_context())

    ctx = make_context()
    ctx.browser.fail_on.add("navigate")
    result = controller.run(LOGIN_PROMPT, ctx)

    assert result.instructions[0].pre_resolved is False
    assert result.results[0].success is False
    assert result.summary.all_passed is False


# ============ PARALLEL PLANNING ============

def test_url_in_prompt_pre_navigates_while_planning():
    prompt = "open https://example.com, click the login button, verify \"Dashboard\""
    planner = make_planner()
    controller = Controller(planner, store=MemoryInstructionStore())
    ctx = make_context()

    result = controller.run(prompt, ctx)

    assert ctx.browser.calls[0] == ("navigate", "https://example.com")
    assert ctx.browser.names().count("navigate") == 1
    assert result.instructions[0].pre_resolved is True
    assert result.summary.all_passed is True


def test_pre_navigation_failure_on_miss_is_swallowed():
    planner = make_planner()
    controller = Controller(planner, store=MemoryInstructionStore())
    ctx = make_context()
    ctx.browser.fail_on.add("navigate")

    result = controller.run("go to https://example.com and log in", ctx)

    assert result.instructions[0].pre_resolved is True
    assert result.summary.all_passed is True


def test_first_step_not_navigate_is_not_marked():
    plan = [LOGIN_PLAN[1], LOGIN_PLAN[2]]
    controller = Controller(make_planner(plan), store=MemoryInstructionStore())
    result = controller.run("on https://example.com click login", make_context())
    assert all(not inst.pre_resolved for inst in result.instructions)


def test_extract_url():
    assert extract_url("open https://example.com/login, then click") == "https://example.com/login"
    assert extract_url("打开 http://a.cn/x，点击") == "http://a.cn/x"
    assert extract_url("open example.com") is None


# ============ FAILURES BEFORE EXECUTION ============

def test_planner_error_is_reraised():
    planner = MagicMock()
    planner.create_plan.side_effect = ExternalServiceError("401 unauthorized")
    controller = Controller(planner, store=MemoryInstructionStore())
    ctx = make_context()

    with pytest.raises(ExternalServiceError):
        controller.run(LOGIN_PROMPT, ctx)
    assert ctx.browser.calls == []


def test_invalid_plan_is_rejected_before_execution():
    store = MemoryInstructionStore()
    controller = Controller(make_planner([{"step_id": 1, "action_type": "click", "params": {}, "description": "x"}]),
                            store=store)
    ctx = make_context()

    with pytest.raises(InstructionValidationError):
        controller.run(LOGIN_PROMPT, ctx)
    assert ctx.browser.calls == []
    assert store.get(prompt_hash(LOGIN_PROMPT)) is None


def test_stop_on_error_default_comes_from_config():
    plan = [
        LOGIN_PLAN[0],
        {"step_id": 2, "action_type": "click", "params": {"fallback_selector": "#nope"}, "description": "x"},
        LOGIN_PLAN[2],
    ]
    controller = Controller(make_planner(plan), store=MemoryInstructionStore(),
                            config=EngineConfig(stop_on_error=False))
    result = controller.run(LOGIN_PROMPT, make_context())
    assert len(result.results) == 3
    assert result.summary.fail == 1
